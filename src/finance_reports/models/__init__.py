"""Data models for transactions, reports, exports and goals."""

from finance_reports.models.export import (
    ConfigResult,
    ExportArtifact,
    ExportConfig,
    ExportKind,
    TransactionFilters,
    normalize_filters,
    validate_export_request,
)
from finance_reports.models.goal import CompletionEstimate, Goal, GoalProgress, GoalStatus
from finance_reports.models.period import DateRange
from finance_reports.models.report import (
    CategoryBreakdown,
    CategoryChange,
    CategoryTotal,
    ComparativeInsight,
    ComparativeReport,
    EvolutionSeries,
    MonthlySummary,
    MonthSummary,
    PatternAnalysis,
    PatternSignal,
    PeriodSummary,
    ReportAggregate,
    ReportType,
    TopTransactions,
    TransactionListing,
)
from finance_reports.models.transaction import Transaction, TransactionType

__all__ = [
    "Transaction",
    "TransactionType",
    "DateRange",
    "ReportType",
    "ReportAggregate",
    "MonthlySummary",
    "MonthSummary",
    "CategoryTotal",
    "CategoryBreakdown",
    "EvolutionSeries",
    "TopTransactions",
    "PeriodSummary",
    "CategoryChange",
    "ComparativeInsight",
    "ComparativeReport",
    "PatternSignal",
    "PatternAnalysis",
    "TransactionListing",
    "ExportKind",
    "ExportConfig",
    "ConfigResult",
    "ExportArtifact",
    "TransactionFilters",
    "normalize_filters",
    "validate_export_request",
    "Goal",
    "GoalStatus",
    "GoalProgress",
    "CompletionEstimate",
]
