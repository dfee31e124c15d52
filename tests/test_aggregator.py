"""Tests for report aggregation."""

from datetime import date
from decimal import Decimal

import pytest

from finance_reports.errors import ValidationError
from finance_reports.models.period import DateRange
from finance_reports.models.report import (
    CategoryBreakdown,
    ComparativeReport,
    EvolutionSeries,
    MonthlySummary,
    PatternAnalysis,
    ReportType,
    TopTransactions,
)
from finance_reports.models.transaction import Transaction, TransactionType
from finance_reports.processing.aggregator import (
    AGGREGATORS,
    AggregationParams,
    aggregate,
    category_breakdown,
    comparative,
    evolution,
    pattern_analysis,
    summarize,
    top_transactions,
)

AS_OF = date(2026, 10, 19)


def create_transaction(
    amount: str,
    txn_type: TransactionType,
    trans_date: date = date(2026, 9, 15),
    category: str = "Other",
    description: str = "Test Transaction",
    txn_id: str | None = None,
) -> Transaction:
    """Helper to create a Transaction for testing."""
    return Transaction(
        id=txn_id or f"{trans_date.isoformat()}-{amount}",
        date=trans_date,
        type=txn_type,
        amount=Decimal(amount),
        description=description,
        category=category,
    )


def income(amount: str, trans_date: date, category: str = "Salary", description: str = "Income") -> Transaction:
    return create_transaction(amount, TransactionType.INCOME, trans_date, category, description)


def expense(amount: str, trans_date: date, category: str = "Other", description: str = "Expense") -> Transaction:
    return create_transaction(amount, TransactionType.EXPENSE, trans_date, category, description)


@pytest.fixture
def five_day_ledger() -> list[Transaction]:
    """Incomes 5000 + 300, expenses 150 + 80 + 200, over five days."""
    return [
        income("5000", date(2026, 9, 1), "Salary", "Monthly salary"),
        expense("150", date(2026, 9, 2), "Groceries", "Supermarket"),
        income("300", date(2026, 9, 3), "Freelance", "Logo design"),
        expense("80", date(2026, 9, 4), "Transport", "Fuel"),
        expense("200", date(2026, 9, 5), "Dining", "Dinner"),
    ]


class TestSummarize:
    """Tests for the monthly summary."""

    def test_five_transaction_scenario(self, five_day_ledger: list[Transaction]) -> None:
        """Test totals, balance and count on the reference ledger."""
        summary = summarize(five_day_ledger)

        assert summary.total_income == Decimal("5300")
        assert summary.total_expense == Decimal("430")
        assert summary.balance == Decimal("4870")
        assert summary.count == 5

    def test_counts_and_averages(self, five_day_ledger: list[Transaction]) -> None:
        """Test per-type counts and average tickets."""
        summary = summarize(five_day_ledger)

        assert summary.income_count == 2
        assert summary.expense_count == 3
        assert summary.average_income == Decimal("2650")
        assert summary.average_expense.quantize(Decimal("0.01")) == Decimal("143.33")

    def test_empty_input_is_all_zero(self) -> None:
        """Test the empty ledger gives a zero summary."""
        summary = summarize([])

        assert summary == MonthlySummary()
        assert summary.balance == 0
        assert summary.average_expense == 0


class TestCategoryBreakdown:
    """Tests for category grouping."""

    def test_sorted_by_total_descending(self, five_day_ledger: list[Transaction]) -> None:
        """Test categories are ordered by total, largest first."""
        breakdown = category_breakdown(five_day_ledger)

        assert [item.category for item in breakdown.items] == [
            "Salary",
            "Freelance",
            "Dining",
            "Groceries",
            "Transport",
        ]
        assert breakdown.items[0].percentage == Decimal("87.26")

    def test_totals_and_percentages_add_up(self, five_day_ledger: list[Transaction]) -> None:
        """Test group totals sum to the overall total and shares to ~100."""
        breakdown = category_breakdown(five_day_ledger)

        assert breakdown.total == Decimal("5730")
        assert sum(item.total for item in breakdown.items) == Decimal("5730")
        assert abs(sum(item.percentage for item in breakdown.items) - 100) <= Decimal("0.05")

    def test_ties_broken_by_name(self) -> None:
        """Test equal totals are ordered by category name ascending."""
        txns = [
            expense("50", date(2026, 9, 1), "Zoo"),
            expense("50", date(2026, 9, 2), "Art"),
            expense("20", date(2026, 9, 3), "Books"),
            expense("30", date(2026, 9, 4), "Books"),
        ]
        breakdown = category_breakdown(txns)

        assert [item.category for item in breakdown.items] == ["Art", "Books", "Zoo"]
        assert breakdown.items[1].count == 2

    def test_empty_input(self) -> None:
        """Test the empty ledger gives an empty breakdown."""
        assert category_breakdown([]).items == ()


class TestEvolution:
    """Tests for the trailing-month series."""

    def test_length_and_order(self, five_day_ledger: list[Transaction]) -> None:
        """Test one entry per month, oldest first, including empty months."""
        series = evolution(five_day_ledger, months=3, as_of=AS_OF)

        assert [(m.year, m.month) for m in series.months] == [(2026, 8), (2026, 9), (2026, 10)]
        assert series.months[0].summary.count == 0
        assert series.months[1].summary.balance == Decimal("4870")

    def test_crosses_year_boundary(self) -> None:
        """Test the series spans December into January."""
        series = evolution([], months=4, as_of=date(2026, 2, 10))

        assert [(m.year, m.month) for m in series.months] == [
            (2025, 11),
            (2025, 12),
            (2026, 1),
            (2026, 2),
        ]

    @pytest.mark.parametrize("months", [1, 6, 24])
    def test_length_matches_request(self, months: int) -> None:
        """Test the series length equals the requested month count."""
        assert len(evolution([], months=months, as_of=AS_OF).months) == months

    @pytest.mark.parametrize("months", [0, 25, -1])
    def test_out_of_bounds_rejected(self, months: int) -> None:
        """Test month counts outside 1-24 raise ValidationError."""
        with pytest.raises(ValidationError):
            evolution([], months=months, as_of=AS_OF)

    def test_trend_and_extremes(self) -> None:
        """Test trend and best/worst month by balance."""
        txns = [
            income("1000", date(2026, 8, 5)),
            expense("1200", date(2026, 9, 5)),
            income("400", date(2026, 10, 5)),
        ]
        series = evolution(txns, months=3, as_of=AS_OF)

        assert series.trend == Decimal("-600")
        assert series.best_month.month == 8
        assert series.worst_month.month == 9


class TestTopTransactions:
    """Tests for top-K selection."""

    def test_limit_two_on_reference_ledger(self, five_day_ledger: list[Transaction]) -> None:
        """Test the two largest amounts are returned in descending order."""
        top = top_transactions(five_day_ledger, limit=2)

        assert [t.amount for t in top.items] == [Decimal("5000"), Decimal("300")]

    def test_length_is_min_of_limit_and_count(self, five_day_ledger: list[Transaction]) -> None:
        """Test fewer transactions than K returns all of them."""
        top = top_transactions(five_day_ledger, limit=10)

        assert len(top.items) == 5
        amounts = [t.amount for t in top.items]
        assert amounts == sorted(amounts, reverse=True)

    def test_ties_broken_by_date_descending(self) -> None:
        """Test equal amounts put the most recent first."""
        older = expense("100", date(2026, 9, 1), description="older")
        newer = expense("100", date(2026, 9, 9), description="newer")
        top = top_transactions([older, newer], limit=2)

        assert [t.description for t in top.items] == ["newer", "older"]

    def test_split_by_type_and_share(self, five_day_ledger: list[Transaction]) -> None:
        """Test per-type lists and the share of the total."""
        top = top_transactions(five_day_ledger, limit=2)

        assert [t.amount for t in top.top_incomes] == [Decimal("5000"), Decimal("300")]
        assert [t.amount for t in top.top_expenses] == [Decimal("200"), Decimal("150")]
        assert top.share_of_total == Decimal("92.50")

    @pytest.mark.parametrize("limit", [0, 51])
    def test_out_of_bounds_rejected(self, limit: int) -> None:
        """Test limits outside 1-50 raise ValidationError."""
        with pytest.raises(ValidationError):
            top_transactions([], limit=limit)

    def test_empty_input(self) -> None:
        """Test the empty ledger gives an empty top list."""
        top = top_transactions([], limit=5)

        assert top.items == ()
        assert top.share_of_total == 0


class TestComparative:
    """Tests for period-over-period comparison."""

    SEPTEMBER = DateRange(date(2026, 9, 1), date(2026, 9, 30))
    OCTOBER = DateRange(date(2026, 10, 1), date(2026, 10, 19))

    def test_deltas(self, five_day_ledger: list[Transaction]) -> None:
        """Test percentage deltas per metric."""
        txns = five_day_ledger + [
            income("5000", date(2026, 10, 1)),
            expense("215", date(2026, 10, 5), "Dining"),
        ]
        report = comparative(txns, current=self.OCTOBER, previous=self.SEPTEMBER)

        assert report.previous.summary.total_income == Decimal("5300")
        assert report.current.summary.total_expense == Decimal("215")
        assert report.deltas["income"] == Decimal("-5.66")
        assert report.deltas["expense"] == Decimal("-50.00")
        assert report.deltas["balance"] == Decimal("-1.75")
        assert report.deltas["count"] == Decimal("-60.00")
        assert report.differences["income"] == Decimal("-300")

    def test_category_changes_sorted_by_size(self, five_day_ledger: list[Transaction]) -> None:
        """Test category changes are ordered by absolute change."""
        txns = five_day_ledger + [expense("215", date(2026, 10, 5), "Dining")]
        report = comparative(txns, current=self.OCTOBER, previous=self.SEPTEMBER)

        assert [c.category for c in report.category_changes] == ["Groceries", "Transport", "Dining"]
        assert report.category_changes[-1].difference == Decimal("15")
        assert report.category_changes[-1].variation == Decimal("7.50")
        assert report.category_changes[0].variation == Decimal("-100.00")

    def test_new_category_has_no_variation(self) -> None:
        """Test a category with no previous spending has no percentage change."""
        txns = [expense("40", date(2026, 10, 3), "Books")]
        report = comparative(txns, current=self.OCTOBER, previous=self.SEPTEMBER)

        assert report.category_changes[0].variation is None

    def test_insights_past_thresholds(self, five_day_ledger: list[Transaction]) -> None:
        """Test only metrics moving past their threshold produce insights."""
        txns = five_day_ledger + [
            income("5000", date(2026, 10, 1)),
            expense("215", date(2026, 10, 5), "Dining"),
        ]
        report = comparative(txns, current=self.OCTOBER, previous=self.SEPTEMBER)

        assert [i.metric for i in report.insights] == ["expense"]
        assert report.insights[0].favorable is True
        assert report.insights[0].message == "Expenses decreased 50.00%"

    def test_balance_insight_needs_fifteen_percent(self) -> None:
        """Test the balance insight uses the wider threshold."""
        txns = [
            income("1000", date(2026, 9, 1)),
            income("1120", date(2026, 10, 1)),
        ]
        report = comparative(txns, current=self.OCTOBER, previous=self.SEPTEMBER)

        assert [i.metric for i in report.insights] == ["income"]
        assert report.insights[0].message == "Income increased 12.00%"

        txns.append(income("200", date(2026, 10, 2)))
        report = comparative(txns, current=self.OCTOBER, previous=self.SEPTEMBER)

        assert [i.metric for i in report.insights] == ["income", "balance"]
        assert report.insights[1].message == "Balance improved significantly (32.00%)"

    def test_zero_previous_gives_no_delta(self) -> None:
        """Test deltas are None instead of dividing by zero."""
        txns = [income("100", date(2026, 10, 2))]
        report = comparative(txns, current=self.OCTOBER, previous=self.SEPTEMBER)

        assert report.deltas["income"] is None
        assert report.deltas["count"] is None
        assert report.differences["income"] == Decimal("100")

    def test_default_periods_from_as_of(self, five_day_ledger: list[Transaction]) -> None:
        """Test the comparative aggregator defaults to as_of month vs the one before."""
        report = aggregate(ReportType.COMPARATIVE, five_day_ledger, AggregationParams(as_of=AS_OF))

        assert report.current.period.start == date(2026, 10, 1)
        assert report.previous.period.start == date(2026, 9, 1)
        assert report.previous.summary.count == 5


class TestPatternAnalysis:
    """Tests for the patterns aggregate."""

    def test_bounded(self, five_day_ledger: list[Transaction]) -> None:
        """Test the signal list never exceeds max_signals."""
        analysis = pattern_analysis(five_day_ledger, max_signals=3)

        assert len(analysis.signals) == 3

    def test_deterministic(self, five_day_ledger: list[Transaction]) -> None:
        """Test repeated runs give identical output."""
        assert pattern_analysis(five_day_ledger) == pattern_analysis(list(five_day_ledger))

    def test_custom_strategy(self, five_day_ledger: list[Transaction]) -> None:
        """Test any object with analyze() can be plugged in."""

        class CountingStrategy:
            def analyze(self, transactions):  # type: ignore[no-untyped-def]
                from finance_reports.models.report import PatternSignal

                return [PatternSignal("count", str(len(transactions)))]

        analysis = pattern_analysis(five_day_ledger, strategy=CountingStrategy())

        assert analysis.signals[0].evidence == "5"

    def test_empty_input(self) -> None:
        """Test the empty ledger gives no signals."""
        assert pattern_analysis([]) == PatternAnalysis()


class TestAggregate:
    """Tests for report-type dispatch."""

    def test_every_report_type_registered(self) -> None:
        """Test the dispatch table covers every report type."""
        assert set(AGGREGATORS) == set(ReportType)

    @pytest.mark.parametrize(
        "report_type,expected",
        [
            (ReportType.MONTHLY, MonthlySummary),
            (ReportType.CATEGORY, CategoryBreakdown),
            (ReportType.EVOLUTION, EvolutionSeries),
            (ReportType.TOP, TopTransactions),
            (ReportType.COMPARATIVE, ComparativeReport),
            (ReportType.PATTERNS, PatternAnalysis),
        ],
    )
    def test_total_on_empty_input(self, report_type: ReportType, expected: type) -> None:
        """Test every aggregate is defined for the empty ledger."""
        result = aggregate(report_type, [], AggregationParams(as_of=AS_OF))

        assert isinstance(result, expected)

    def test_params_flow_through(self, five_day_ledger: list[Transaction]) -> None:
        """Test limit and months reach the aggregation functions."""
        top = aggregate(ReportType.TOP, five_day_ledger, AggregationParams(limit=1))
        series = aggregate(
            ReportType.EVOLUTION, five_day_ledger, AggregationParams(months=2, as_of=AS_OF)
        )

        assert len(top.items) == 1
        assert len(series.months) == 2
