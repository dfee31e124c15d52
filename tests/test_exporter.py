"""Tests for the export pipeline."""

from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from finance_reports.config import ReportSettings
from finance_reports.errors import ConfigError, NotFoundError, RenderError, ValidationError
from finance_reports.ledger import BaseLedger, InMemoryLedger
from finance_reports.models.export import ExportArtifact, ExportKind, TransactionFilters
from finance_reports.models.report import (
    ComparativeReport,
    EvolutionSeries,
    MonthlySummary,
    ReportType,
    TopTransactions,
    TransactionListing,
)
from finance_reports.models.transaction import Transaction, TransactionType
from finance_reports.output.base import BaseRenderer
from finance_reports.processing.exporter import ReportExporter, ReportOptions

TODAY = date(2026, 10, 19)


def create_transaction(
    txn_id: str,
    amount: str,
    trans_date: date,
    txn_type: TransactionType = TransactionType.EXPENSE,
    category: str = "Other",
) -> Transaction:
    """Helper to create a Transaction for testing."""
    return Transaction(
        id=txn_id,
        date=trans_date,
        type=txn_type,
        amount=Decimal(amount),
        description=f"Transaction {txn_id}",
        category=category,
    )


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger(
        {
            "alice": [
                create_transaction("s1", "5000", date(2026, 9, 1), TransactionType.INCOME, "Salary"),
                create_transaction("s2", "150", date(2026, 9, 2), category="Groceries"),
                create_transaction("s3", "300", date(2026, 9, 3), TransactionType.INCOME, "Freelance"),
                create_transaction("s4", "80", date(2026, 9, 4), category="Transport"),
                create_transaction("s5", "200", date(2026, 9, 5), category="Dining"),
                create_transaction("o1", "5000", date(2026, 10, 1), TransactionType.INCOME, "Salary"),
                create_transaction("o2", "215", date(2026, 10, 5), category="Dining"),
            ]
        }
    )


@pytest.fixture
def renderer() -> MagicMock:
    mock = MagicMock(spec=BaseRenderer)
    mock.render.return_value = ExportArtifact(
        filename="export.pdf", filepath=Path("exports/export.pdf"), pages=2, size=2048
    )
    return mock


@pytest.fixture
def exporter(ledger: InMemoryLedger, renderer: MagicMock) -> ReportExporter:
    return ReportExporter(ledger, renderer, today=TODAY)


def rendered(renderer: MagicMock) -> tuple:
    """Return the (data, config) the renderer was called with."""
    renderer.render.assert_called_once()
    return renderer.render.call_args.args


class TestExportTransactions:
    """Tests for ReportExporter.export_transactions."""

    def test_defaults_to_current_month(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test no dates and no period means the current month."""
        artifact = exporter.export_transactions("alice")
        data, config = rendered(renderer)

        assert isinstance(data, TransactionListing)
        assert [t.id for t in data.transactions] == ["o1", "o2"]
        assert config.export_type is ExportKind.TRANSACTIONS
        assert config.filters.start_date == date(2026, 10, 1)
        assert config.filters.end_date == TODAY
        assert artifact.transaction_count == 2
        assert artifact.summary.balance == Decimal("4785")

    def test_period_key(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test a symbolic period selects that range."""
        artifact = exporter.export_transactions("alice", {"period": "last-month"})
        data, _ = rendered(renderer)

        assert len(data.transactions) == 5
        assert artifact.summary.total_income == Decimal("5300")
        assert artifact.summary.total_expense == Decimal("430")

    def test_explicit_dates_and_type(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test explicit dates and a type filter."""
        exporter.export_transactions(
            "alice", {"start_date": "01/09/2026", "end_date": "30/09/2026", "type": "income"}
        )
        data, config = rendered(renderer)

        assert [t.id for t in data.transactions] == ["s1", "s3"]
        assert config.filters.type is TransactionType.INCOME
        assert data.period.start == date(2026, 9, 1)

    def test_filters_object(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test ready-made TransactionFilters are used as-is."""
        exporter.export_transactions("alice", TransactionFilters(start_date=date(2026, 9, 4)))
        data, _ = rendered(renderer)

        assert [t.id for t in data.transactions] == ["s4", "s5", "o1", "o2"]

    def test_summary_can_be_omitted(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test include_summary=False reaches the renderer and the artifact."""
        artifact = exporter.export_transactions("alice", include_summary=False)
        _, config = rendered(renderer)

        assert config.include_summary is False
        assert artifact.summary is None
        assert artifact.transaction_count == 2

    def test_period_and_dates_conflict(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test a period and explicit dates together are rejected."""
        with pytest.raises(ValidationError, match="either"):
            exporter.export_transactions(
                "alice", {"period": "last-month", "start_date": "01/09/2026"}
            )
        renderer.render.assert_not_called()

    def test_validation_before_ledger_access(self, renderer: MagicMock) -> None:
        """Test bad filters never reach the ledger."""
        ledger = MagicMock(spec=BaseLedger)
        exporter = ReportExporter(ledger, renderer, today=TODAY)

        with pytest.raises(ValidationError):
            exporter.export_transactions("alice", {"category": "Dining"})
        with pytest.raises(ValidationError):
            exporter.export_transactions("alice", {"period": "fortnight"})

        ledger.fetch.assert_not_called()

    def test_unknown_user(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test NotFoundError from the ledger propagates."""
        with pytest.raises(NotFoundError):
            exporter.export_transactions("bob")
        renderer.render.assert_not_called()

    def test_render_error_propagates(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test render failures reach the caller unchanged."""
        renderer.render.side_effect = RenderError("disk full")

        with pytest.raises(RenderError, match="disk full"):
            exporter.export_transactions("alice")


class TestExportReport:
    """Tests for ReportExporter.export_report."""

    def test_monthly_for_selected_month(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test month=YYYY-MM selects the whole month."""
        exporter.export_report("alice", "monthly", {"month": "2026-09"})
        data, config = rendered(renderer)

        assert data == MonthlySummary(
            total_income=Decimal("5300"),
            total_expense=Decimal("430"),
            count=5,
            income_count=2,
            expense_count=3,
        )
        assert config.report_type is ReportType.MONTHLY
        assert config.filters.start_date == date(2026, 9, 1)
        assert config.filters.end_date == date(2026, 9, 30)

    def test_top_with_limit(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test the top report honors the limit option."""
        exporter.export_report("alice", ReportType.TOP, {"period": "last-month", "limit": 2})
        data, _ = rendered(renderer)

        assert isinstance(data, TopTransactions)
        assert [t.amount for t in data.items] == [Decimal("5000"), Decimal("300")]

    def test_evolution_months(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test evolution fetches exactly the trailing months."""
        exporter.export_report("alice", "evolution", {"months": 3})
        data, config = rendered(renderer)

        assert isinstance(data, EvolutionSeries)
        assert [m.month for m in data.months] == [8, 9, 10]
        assert config.filters.start_date == date(2026, 8, 1)

    def test_comparative_defaults_to_current_month(
        self, exporter: ReportExporter, renderer: MagicMock
    ) -> None:
        """Test comparative compares this month with last month."""
        exporter.export_report("alice", "comparative")
        data, config = rendered(renderer)

        assert isinstance(data, ComparativeReport)
        assert data.current.summary.count == 2
        assert data.previous.summary.count == 5
        assert config.filters.start_date == date(2026, 9, 1)
        assert config.filters.end_date == TODAY

    def test_flags_and_title(self, exporter: ReportExporter, renderer: MagicMock) -> None:
        """Test presentation options reach the config."""
        options = ReportOptions(include_charts=False, include_summary=False, title="September")
        exporter.export_report("alice", "category", options)
        _, config = rendered(renderer)

        assert config.include_charts is False
        assert config.include_summary is False
        assert config.get_title() == "September"

    def test_settings_provide_defaults(self, ledger: InMemoryLedger, renderer: MagicMock) -> None:
        """Test configured defaults are used when options are omitted."""
        exporter = ReportExporter(
            ledger, renderer, settings=ReportSettings(top_limit=1, evolution_months=2), today=TODAY
        )
        exporter.export_report("alice", "top", {"period": "current-year"})
        data, _ = rendered(renderer)

        assert len(data.items) == 1

    @pytest.mark.parametrize(
        "report_type,options,error",
        [
            ("weekly", None, ConfigError),
            (None, None, ConfigError),
            ("top", {"limit": 0}, ValidationError),
            ("evolution", {"months": 25}, ValidationError),
            ("monthly", {"month": "2026-13"}, ValidationError),
            ("monthly", {"month": "2027-01"}, ValidationError),
            ("monthly", {"month": "0000-05"}, ValidationError),
            ("comparative", {"month": "0001-01"}, ValidationError),
            ("evolution", {"month": "0001-02", "months": 3}, ValidationError),
            ("monthly", {"start_date": "01/09/2026"}, ValidationError),
            ("monthly", {"colour": "blue"}, ValidationError),
        ],
    )
    def test_invalid_requests_fail_before_fetch(
        self, renderer: MagicMock, report_type: str, options: dict | None, error: type
    ) -> None:
        """Test every invalid request fails without touching the ledger."""
        ledger = MagicMock(spec=BaseLedger)
        exporter = ReportExporter(ledger, renderer, today=TODAY)

        with pytest.raises(error):
            exporter.export_report("alice", report_type, options)

        ledger.fetch.assert_not_called()
        renderer.render.assert_not_called()

    def test_unrecognized_type_option_ignored(
        self, exporter: ReportExporter, renderer: MagicMock
    ) -> None:
        """Test an unknown type value is dropped rather than rejected."""
        exporter.export_report("alice", "monthly", {"month": "2026-09", "type": "transfer"})
        data, config = rendered(renderer)

        assert config.filters.type is None
        assert data.count == 5


class TestReportOptions:
    """Tests for ReportOptions.from_dict."""

    def test_empty(self) -> None:
        """Test None gives the defaults."""
        assert ReportOptions.from_dict(None) == ReportOptions()

    def test_unknown_keys_listed(self) -> None:
        """Test the error names the offending keys."""
        with pytest.raises(ValidationError, match="Unknown report options: colour, size"):
            ReportOptions.from_dict({"size": 3, "colour": "red"})
