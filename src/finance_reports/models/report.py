"""Report aggregate models produced by the aggregator.

Each report type maps to exactly one aggregate class; together they form
the closed ReportAggregate union consumed by renderers.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from finance_reports.models.period import DateRange
from finance_reports.models.transaction import Transaction
from finance_reports.utils.date_utils import month_label
from finance_reports.utils.decimal_utils import percent_change

ZERO = Decimal("0")


class ReportType(Enum):
    """Supported report types."""

    MONTHLY = "monthly"
    CATEGORY = "category"
    EVOLUTION = "evolution"
    TOP = "top"
    COMPARATIVE = "comparative"
    PATTERNS = "patterns"


@dataclass(frozen=True)
class MonthlySummary:
    """Income/expense totals over a set of transactions.

    Attributes:
        total_income: Sum of income amounts.
        total_expense: Sum of expense amounts.
        count: Number of transactions.
        income_count: Number of income transactions.
        expense_count: Number of expense transactions.
    """

    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    count: int = 0
    income_count: int = 0
    expense_count: int = 0

    @property
    def balance(self) -> Decimal:
        """Income minus expense."""
        return self.total_income - self.total_expense

    @property
    def average_income(self) -> Decimal:
        if self.income_count == 0:
            return ZERO
        return self.total_income / self.income_count

    @property
    def average_expense(self) -> Decimal:
        if self.expense_count == 0:
            return ZERO
        return self.total_expense / self.expense_count


@dataclass(frozen=True)
class CategoryTotal:
    """One row of a category breakdown."""

    category: str
    total: Decimal
    percentage: Decimal
    count: int = 0


@dataclass(frozen=True)
class CategoryBreakdown:
    """Category totals sorted by total descending, then name ascending."""

    items: tuple[CategoryTotal, ...] = ()

    @property
    def total(self) -> Decimal:
        return sum((item.total for item in self.items), ZERO)


@dataclass(frozen=True)
class MonthSummary:
    """Monthly summary tagged with its calendar month."""

    year: int
    month: int
    summary: MonthlySummary

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)


@dataclass(frozen=True)
class EvolutionSeries:
    """Trailing monthly summaries, oldest first.

    Attributes:
        months: One entry per calendar month, oldest first.
    """

    months: tuple[MonthSummary, ...] = ()

    @property
    def trend(self) -> Decimal:
        """Balance of the last month minus balance of the first month."""
        if not self.months:
            return ZERO
        return self.months[-1].summary.balance - self.months[0].summary.balance

    @property
    def best_month(self) -> Optional[MonthSummary]:
        """Month with the highest balance (earliest wins ties)."""
        if not self.months:
            return None
        return max(self.months, key=lambda m: m.summary.balance)

    @property
    def worst_month(self) -> Optional[MonthSummary]:
        """Month with the lowest balance (earliest wins ties)."""
        if not self.months:
            return None
        return min(self.months, key=lambda m: m.summary.balance)


@dataclass(frozen=True)
class TopTransactions:
    """Largest transactions, descending by amount.

    Attributes:
        items: Top transactions regardless of type.
        limit: Requested K.
        top_incomes: Top incomes only.
        top_expenses: Top expenses only.
        share_of_total: Percentage of the filtered total covered by items.
    """

    items: tuple[Transaction, ...] = ()
    limit: int = 10
    top_incomes: tuple[Transaction, ...] = ()
    top_expenses: tuple[Transaction, ...] = ()
    share_of_total: Decimal = ZERO


@dataclass(frozen=True)
class PeriodSummary:
    """Summary for one side of a comparison."""

    period: DateRange
    summary: MonthlySummary


@dataclass(frozen=True)
class CategoryChange:
    """Expense change for one category between two periods."""

    category: str
    previous: Decimal
    current: Decimal

    @property
    def difference(self) -> Decimal:
        return self.current - self.previous

    @property
    def variation(self) -> Optional[Decimal]:
        """Percentage change, or None when nothing was spent previously."""
        return percent_change(self.current, self.previous)


@dataclass(frozen=True)
class ComparativeInsight:
    """A metric whose change crossed its insight threshold.

    Attributes:
        metric: "income", "expense" or "balance".
        change: Percentage change from the previous period.
        favorable: Whether the move is good news (more income, less spending).
    """

    metric: str
    change: Decimal
    favorable: bool

    @property
    def message(self) -> str:
        size = f"{abs(self.change)}%"
        rising = self.change > 0
        if self.metric == "balance":
            verb = "improved" if rising else "worsened"
            return f"Balance {verb} significantly ({size})"
        noun = "Income" if self.metric == "income" else "Expenses"
        return f"{noun} {'increased' if rising else 'decreased'} {size}"


@dataclass(frozen=True)
class ComparativeReport:
    """Current period compared with the adjacent previous period.

    Attributes:
        current: Summary for the current period.
        previous: Summary for the previous period.
        deltas: Percentage change per metric (income, expense, balance,
            count); None where the previous value is zero.
        differences: Absolute change per metric.
        category_changes: Expense changes per category, largest first.
        insights: Metrics that moved past their thresholds.
    """

    current: PeriodSummary
    previous: PeriodSummary
    deltas: dict[str, Optional[Decimal]] = field(default_factory=dict)
    differences: dict[str, Decimal] = field(default_factory=dict)
    category_changes: tuple[CategoryChange, ...] = ()
    insights: tuple[ComparativeInsight, ...] = ()


@dataclass(frozen=True)
class PatternSignal:
    """A detected behavioural signal and the figures behind it."""

    signal: str
    evidence: str


@dataclass(frozen=True)
class PatternAnalysis:
    """Bounded, ordered list of pattern signals."""

    signals: tuple[PatternSignal, ...] = ()


@dataclass(frozen=True)
class TransactionListing:
    """Raw transactions plus their summary, for transaction exports."""

    transactions: tuple[Transaction, ...]
    summary: MonthlySummary
    period: Optional[DateRange] = None


ReportAggregate = Union[
    MonthlySummary,
    CategoryBreakdown,
    EvolutionSeries,
    TopTransactions,
    ComparativeReport,
    PatternAnalysis,
]
