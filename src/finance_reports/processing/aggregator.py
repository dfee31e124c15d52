"""Report aggregation over filtered transactions.

One pure function per report type. Every function is deterministic, leaves
its input untouched and returns an empty aggregate for an empty sequence.
`aggregate` dispatches on ReportType through the AGGREGATORS table.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Sequence

from finance_reports.errors import ValidationError
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
    PeriodSummary,
    ReportAggregate,
    ReportType,
    TopTransactions,
)
from finance_reports.models.transaction import Transaction
from finance_reports.processing.patterns import PatternStrategy, SpendingPatternStrategy
from finance_reports.processing.period_resolver import resolve_adjacent_months
from finance_reports.utils.date_utils import trailing_months
from finance_reports.utils.decimal_utils import ZERO, percent_change, percentage, sum_amounts

DEFAULT_EVOLUTION_MONTHS = 6
EVOLUTION_MONTHS_BOUNDS = (1, 24)
DEFAULT_TOP_LIMIT = 10
TOP_LIMIT_BOUNDS = (1, 50)
DEFAULT_MAX_PATTERN_SIGNALS = 8

COMPARED_METRICS = ("income", "expense", "balance", "count")

# Percentage moves beyond these produce a comparative insight
INSIGHT_THRESHOLDS = {
    "income": Decimal("10"),
    "expense": Decimal("10"),
    "balance": Decimal("15"),
}


def check_bounds(name: str, value: int, bounds: tuple[int, int]) -> int:
    """Validate an integer option against inclusive bounds.

    Raises:
        ValidationError: If value is not an int within bounds.
    """
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValidationError(f"{name} must be between {low} and {high}, got {value!r}")
    return value


def summarize(transactions: Sequence[Transaction]) -> MonthlySummary:
    """Income, expense, balance and counts (the monthly report)."""
    incomes = [t.amount for t in transactions if t.is_income]
    expenses = [t.amount for t in transactions if t.is_expense]
    return MonthlySummary(
        total_income=sum_amounts(incomes),
        total_expense=sum_amounts(expenses),
        count=len(transactions),
        income_count=len(incomes),
        expense_count=len(expenses),
    )


def category_breakdown(transactions: Sequence[Transaction]) -> CategoryBreakdown:
    """Totals per category with their share of the overall total.

    Sorted by total descending, ties broken by category name ascending.
    """
    totals: dict[str, Decimal] = defaultdict(Decimal)
    counts: dict[str, int] = defaultdict(int)
    for txn in transactions:
        totals[txn.category] += txn.amount
        counts[txn.category] += 1

    overall = sum_amounts(totals.values())
    ordered = sorted(totals, key=lambda c: (-totals[c], c))
    return CategoryBreakdown(
        items=tuple(
            CategoryTotal(
                category=category,
                total=totals[category],
                percentage=percentage(totals[category], overall),
                count=counts[category],
            )
            for category in ordered
        )
    )


def evolution(
    transactions: Sequence[Transaction],
    months: int = DEFAULT_EVOLUTION_MONTHS,
    as_of: Optional[date] = None,
) -> EvolutionSeries:
    """One summary per trailing calendar month, oldest first.

    Months without transactions are included with zero totals, so the
    series always has exactly `months` entries.

    Args:
        transactions: Filtered transactions.
        months: Number of trailing months, 1-24.
        as_of: Reference date whose month is the last entry (default today).

    Raises:
        ValidationError: If months is out of bounds.
    """
    check_bounds("months", months, EVOLUTION_MONTHS_BOUNDS)

    by_month: dict[tuple[int, int], list[Transaction]] = defaultdict(list)
    for txn in transactions:
        by_month[(txn.date.year, txn.date.month)].append(txn)

    return EvolutionSeries(
        months=tuple(
            MonthSummary(year=year, month=month, summary=summarize(by_month.get((year, month), [])))
            for year, month in trailing_months(as_of or date.today(), months)
        )
    )


def top_transactions(
    transactions: Sequence[Transaction],
    limit: int = DEFAULT_TOP_LIMIT,
) -> TopTransactions:
    """The `limit` largest transactions by absolute amount.

    Ties are broken by date, most recent first; remaining ties keep
    their input order.

    Raises:
        ValidationError: If limit is out of bounds.
    """
    check_bounds("limit", limit, TOP_LIMIT_BOUNDS)

    def ranked(items: Sequence[Transaction]) -> tuple[Transaction, ...]:
        return tuple(sorted(items, key=lambda t: (abs(t.amount), t.date), reverse=True)[:limit])

    top = ranked(transactions)
    overall = sum_amounts(t.amount for t in transactions)
    return TopTransactions(
        items=top,
        limit=limit,
        top_incomes=ranked([t for t in transactions if t.is_income]),
        top_expenses=ranked([t for t in transactions if t.is_expense]),
        share_of_total=percentage(sum_amounts(t.amount for t in top), overall),
    )


def _metrics(summary: MonthlySummary) -> dict[str, Decimal]:
    return {
        "income": summary.total_income,
        "expense": summary.total_expense,
        "balance": summary.balance,
        "count": Decimal(summary.count),
    }


def _expenses_by_category(transactions: Sequence[Transaction]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for txn in transactions:
        if txn.is_expense:
            totals[txn.category] += txn.amount
    return totals


def _insights(
    deltas: dict[str, Optional[Decimal]], differences: dict[str, Decimal]
) -> tuple[ComparativeInsight, ...]:
    insights = []
    for metric, threshold in INSIGHT_THRESHOLDS.items():
        delta = deltas[metric]
        if delta is None or abs(delta) <= threshold:
            continue
        rising = differences[metric] > 0
        favorable = not rising if metric == "expense" else rising
        insights.append(ComparativeInsight(metric=metric, change=delta, favorable=favorable))
    return tuple(insights)


def comparative(
    transactions: Sequence[Transaction],
    current: DateRange,
    previous: DateRange,
) -> ComparativeReport:
    """Compare two adjacent periods.

    Deltas are (current - previous) / |previous| * 100 per metric and
    are None when the previous value is zero.

    Args:
        transactions: Filtered transactions covering both periods.
        current: The later period.
        previous: The earlier period.
    """
    current_txns = [t for t in transactions if current.contains(t.date)]
    previous_txns = [t for t in transactions if previous.contains(t.date)]
    current_summary = summarize(current_txns)
    previous_summary = summarize(previous_txns)

    now_metrics = _metrics(current_summary)
    before_metrics = _metrics(previous_summary)

    current_categories = _expenses_by_category(current_txns)
    previous_categories = _expenses_by_category(previous_txns)
    changes = [
        CategoryChange(
            category=category,
            previous=previous_categories.get(category, ZERO),
            current=current_categories.get(category, ZERO),
        )
        for category in set(current_categories) | set(previous_categories)
    ]
    changes.sort(key=lambda c: (-abs(c.difference), c.category))

    deltas = {m: percent_change(now_metrics[m], before_metrics[m]) for m in COMPARED_METRICS}
    differences = {m: now_metrics[m] - before_metrics[m] for m in COMPARED_METRICS}
    return ComparativeReport(
        current=PeriodSummary(period=current, summary=current_summary),
        previous=PeriodSummary(period=previous, summary=previous_summary),
        deltas=deltas,
        differences=differences,
        category_changes=tuple(changes),
        insights=_insights(deltas, differences),
    )


def pattern_analysis(
    transactions: Sequence[Transaction],
    strategy: Optional[PatternStrategy] = None,
    max_signals: int = DEFAULT_MAX_PATTERN_SIGNALS,
) -> PatternAnalysis:
    """Run a pattern strategy and keep at most `max_signals` signals."""
    strategy = strategy or SpendingPatternStrategy()
    signals = strategy.analyze(transactions)
    return PatternAnalysis(signals=tuple(signals[: max(max_signals, 0)]))


@dataclass(frozen=True)
class AggregationParams:
    """Per-report parameters passed through the dispatch table.

    Attributes:
        months: Trailing months for evolution.
        limit: K for top.
        as_of: Reference date for evolution and the default comparison.
        current_period: Later period for comparative.
        previous_period: Earlier period for comparative.
        strategy: Pattern strategy for patterns.
        max_signals: Bound on pattern signals.
    """

    months: int = DEFAULT_EVOLUTION_MONTHS
    limit: int = DEFAULT_TOP_LIMIT
    as_of: Optional[date] = None
    current_period: Optional[DateRange] = None
    previous_period: Optional[DateRange] = None
    strategy: Optional[PatternStrategy] = None
    max_signals: int = DEFAULT_MAX_PATTERN_SIGNALS


def _run_comparative(
    transactions: Sequence[Transaction], params: AggregationParams
) -> ComparativeReport:
    if params.current_period and params.previous_period:
        return comparative(transactions, params.current_period, params.previous_period)
    as_of = params.as_of or date.today()
    previous, current = resolve_adjacent_months(as_of.year, as_of.month, as_of)
    return comparative(transactions, current, previous)


AGGREGATORS: dict[ReportType, Callable[[Sequence[Transaction], AggregationParams], ReportAggregate]] = {
    ReportType.MONTHLY: lambda txns, params: summarize(txns),
    ReportType.CATEGORY: lambda txns, params: category_breakdown(txns),
    ReportType.EVOLUTION: lambda txns, params: evolution(txns, params.months, params.as_of),
    ReportType.TOP: lambda txns, params: top_transactions(txns, params.limit),
    ReportType.COMPARATIVE: _run_comparative,
    ReportType.PATTERNS: lambda txns, params: pattern_analysis(
        txns, params.strategy, params.max_signals
    ),
}


def aggregate(
    report_type: ReportType,
    transactions: Sequence[Transaction],
    params: Optional[AggregationParams] = None,
) -> ReportAggregate:
    """Compute the aggregate for a report type.

    Args:
        report_type: Which report to compute.
        transactions: Filtered transactions.
        params: Report parameters (defaults apply when omitted).

    Returns:
        The report-type-specific aggregate.
    """
    return AGGREGATORS[report_type](transactions, params or AggregationParams())
