"""Export pipeline: resolve period, fetch, aggregate, render.

Every validation step (options, period, bounds, export config) runs before
the ledger is touched, so a bad request never costs a fetch or a render.
"""

from dataclasses import dataclass, fields, replace
from datetime import date
from typing import TYPE_CHECKING, Mapping, Optional, Union

from finance_reports.errors import ValidationError
from finance_reports.ledger.base import BaseLedger
from finance_reports.models.export import (
    ConfigResult,
    ExportArtifact,
    ExportConfig,
    ExportKind,
    TransactionFilters,
    normalize_filters,
)
from finance_reports.models.period import DateRange
from finance_reports.models.report import ReportType, TransactionListing
from finance_reports.models.transaction import TransactionType
from finance_reports.processing.aggregator import (
    DEFAULT_EVOLUTION_MONTHS,
    DEFAULT_MAX_PATTERN_SIGNALS,
    DEFAULT_TOP_LIMIT,
    EVOLUTION_MONTHS_BOUNDS,
    TOP_LIMIT_BOUNDS,
    AggregationParams,
    aggregate,
    check_bounds,
    summarize,
)
from finance_reports.processing.patterns import PatternStrategy, SpendingPatternStrategy
from finance_reports.processing.period_resolver import (
    PeriodKey,
    resolve_adjacent_months,
    resolve_custom_period,
    resolve_month,
    resolve_period,
    resolve_trailing_months,
)
from finance_reports.utils.date_utils import parse_year_month
from finance_reports.utils.logging_config import LogContext, get_logger

if TYPE_CHECKING:
    from finance_reports.config import ReportSettings
    from finance_reports.output.base import BaseRenderer

logger = get_logger(__name__)

# Keys accepted by export_transactions on top of the plain ledger filters
TRANSACTION_EXPORT_KEYS = ("period", "start_date", "end_date", "type")


def _unwrap(result: ConfigResult) -> ExportConfig:
    """Return the built config or raise the error it carries."""
    if not result.success:
        raise result.error  # type: ignore[misc]
    return result.config  # type: ignore[return-value]


@dataclass(frozen=True)
class ReportOptions:
    """Every option export_report understands.

    Period precedence: month, then start_date/end_date, then period.
    With none of them the current month is used.

    Attributes:
        period: Symbolic period key (e.g. "last-3-months").
        start_date: Custom range start, DD/MM/YYYY.
        end_date: Custom range end, DD/MM/YYYY.
        month: A single calendar month, YYYY-MM.
        months: Trailing month count for evolution.
        limit: K for top.
        type: Restrict to "income" or "expense".
        include_charts: Whether the document gets charts.
        include_summary: Whether the document gets a summary block.
        title: Title override.
    """

    period: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    month: Optional[str] = None
    months: Optional[int] = None
    limit: Optional[int] = None
    type: Optional[str] = None
    include_charts: bool = True
    include_summary: bool = True
    title: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, object]]) -> "ReportOptions":
        """Create from a mapping, rejecting keys that are not options.

        Raises:
            ValidationError: If the mapping has unknown keys.
        """
        if not data:
            return cls()

        known = [f.name for f in fields(cls)]
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValidationError(
                f"Unknown report options: {', '.join(unknown)}. "
                f"Valid options: {', '.join(known)}"
            )
        return cls(**data)  # type: ignore[arg-type]


class ReportExporter:
    """Runs transaction and report exports for one ledger and renderer."""

    def __init__(
        self,
        ledger: BaseLedger,
        renderer: "BaseRenderer",
        settings: Optional["ReportSettings"] = None,
        strategy: Optional[PatternStrategy] = None,
        today: Optional[date] = None,
    ):
        """Initialize the exporter.

        Args:
            ledger: Source of transactions.
            renderer: Document renderer.
            settings: Report defaults (evolution months, top limit, ...).
            strategy: Pattern strategy; built from settings when omitted.
            today: Fixed reference date; the real date when omitted.
        """
        self.ledger = ledger
        self.renderer = renderer
        self.evolution_months = settings.evolution_months if settings else DEFAULT_EVOLUTION_MONTHS
        self.top_limit = settings.top_limit if settings else DEFAULT_TOP_LIMIT
        self.max_signals = settings.max_pattern_signals if settings else DEFAULT_MAX_PATTERN_SIGNALS
        if strategy is None and settings is not None:
            strategy = SpendingPatternStrategy(settings.large_transaction_threshold)
        self.strategy = strategy
        self._fixed_today = today

    @property
    def today(self) -> date:
        return self._fixed_today or date.today()

    def export_transactions(
        self,
        user_id: str,
        filters: Union[TransactionFilters, Mapping[str, object], None] = None,
        include_summary: bool = True,
        title: Optional[str] = None,
    ) -> ExportArtifact:
        """Export a user's transactions as a listing document.

        Args:
            user_id: Ledger owner.
            filters: TransactionFilters, or a mapping with any of period,
                start_date, end_date and type. No dates means the current month.
            include_summary: Whether to add the totals block.
            title: Title override.

        Returns:
            Artifact with transaction_count and summary filled in.

        Raises:
            ValidationError: On bad filters or period.
            ConfigError: On an invalid export configuration.
            NotFoundError: If the user has no ledger.
            RenderError: If the document could not be written.
        """
        resolved = self._resolve_transaction_filters(filters)
        result = ExportConfig.build(
            export_type=ExportKind.TRANSACTIONS,
            filters=resolved,
            include_summary=include_summary,
            title=title,
        )
        config = _unwrap(result)

        with LogContext(
            logger,
            "export_transactions",
            user_id=user_id,
            start_date=config.filters.start_date,
            end_date=config.filters.end_date,
        ):
            transactions = self.ledger.fetch(user_id, config.filters)
            summary = summarize(transactions)
            period = None
            if config.filters.start_date and config.filters.end_date:
                period = DateRange(config.filters.start_date, config.filters.end_date)
            listing = TransactionListing(
                transactions=tuple(transactions), summary=summary, period=period
            )

            artifact = self.renderer.render(listing, config)
            logger.info(
                f"Exported {len(transactions)} transactions to {artifact.filename} "
                f"({artifact.pages} pages, {artifact.size} bytes)"
            )
            return replace(
                artifact,
                transaction_count=len(transactions),
                summary=summary if include_summary else None,
            )

    def export_report(
        self,
        user_id: str,
        report_type: Union[ReportType, str],
        options: Union[ReportOptions, Mapping[str, object], None] = None,
    ) -> ExportArtifact:
        """Export one aggregate report.

        Args:
            user_id: Ledger owner.
            report_type: monthly, category, evolution, top, comparative or patterns.
            options: ReportOptions or an equivalent mapping.

        Returns:
            Artifact for the rendered report.

        Raises:
            ValidationError: On bad options, period or bounds.
            ConfigError: On an invalid report type.
            NotFoundError: If the user has no ledger.
            RenderError: If the document could not be written.
        """
        opts = options if isinstance(options, ReportOptions) else ReportOptions.from_dict(options)

        # Structural checks first so an unknown report type is reported as such
        structural = _unwrap(
            ExportConfig.build(export_type=ExportKind.REPORT, report_type=report_type)
        )
        resolved_type: ReportType = structural.report_type  # type: ignore[assignment]

        params, period = self._resolve_report_scope(resolved_type, opts)
        result = ExportConfig.build(
            export_type=ExportKind.REPORT,
            report_type=resolved_type,
            filters={
                "start_date": period.start,
                "end_date": period.end,
                "type": opts.type,
            },
            include_charts=opts.include_charts,
            include_summary=opts.include_summary,
            title=opts.title,
        )
        config = _unwrap(result)

        with LogContext(
            logger,
            "export_report",
            user_id=user_id,
            report_type=resolved_type.value,
            period=period.display(),
        ):
            transactions = self.ledger.fetch(user_id, config.filters)
            report = aggregate(resolved_type, transactions, params)
            artifact = self.renderer.render(report, config)
            logger.info(
                f"Exported {resolved_type.value} report to {artifact.filename} "
                f"({artifact.pages} pages, {artifact.size} bytes)"
            )
            return artifact

    def _resolve_transaction_filters(
        self, filters: Union[TransactionFilters, Mapping[str, object], None]
    ) -> TransactionFilters:
        if isinstance(filters, TransactionFilters):
            return filters

        raw = dict(filters or {})
        unknown = sorted(set(raw) - set(TRANSACTION_EXPORT_KEYS))
        if unknown:
            raise ValidationError(
                f"Unknown filter keys: {', '.join(unknown)}. "
                f"Valid keys: {', '.join(TRANSACTION_EXPORT_KEYS)}"
            )

        period_key = raw.pop("period", None)
        if period_key:
            if raw.get("start_date") or raw.get("end_date"):
                raise ValidationError("Use either a period or explicit dates, not both")
            period = resolve_period(str(period_key), self.today)
            raw["start_date"], raw["end_date"] = period.start, period.end
        elif not raw.get("start_date") and not raw.get("end_date"):
            period = resolve_period(PeriodKey.CURRENT_MONTH, self.today)
            raw["start_date"], raw["end_date"] = period.start, period.end

        return normalize_filters(raw)

    def _resolve_report_scope(
        self, report_type: ReportType, opts: ReportOptions
    ) -> tuple[AggregationParams, DateRange]:
        """Work out aggregation parameters and the date range to fetch."""
        if opts.type and TransactionType.from_value(opts.type) is None:
            logger.debug(f"Ignoring unrecognized type option {opts.type!r}")

        months = check_bounds(
            "months",
            opts.months if opts.months is not None else self.evolution_months,
            EVOLUTION_MONTHS_BOUNDS,
        )
        limit = check_bounds(
            "limit",
            opts.limit if opts.limit is not None else self.top_limit,
            TOP_LIMIT_BOUNDS,
        )

        if report_type is ReportType.EVOLUTION:
            as_of = self._month_range(opts.month).end if opts.month else self.today
            period = resolve_trailing_months(months, as_of)
            return AggregationParams(months=months, as_of=as_of), period

        if report_type is ReportType.COMPARATIVE:
            anchor = self.today
            if opts.month:
                year, month = parse_year_month(opts.month)
            else:
                year, month = anchor.year, anchor.month
            previous, current = resolve_adjacent_months(year, month, anchor)
            params = AggregationParams(
                as_of=current.end, current_period=current, previous_period=previous
            )
            span = DateRange(previous.start, current.end, f"{previous.label} vs {current.label}")
            return params, span

        params = AggregationParams(
            months=months,
            limit=limit,
            as_of=self.today,
            strategy=self.strategy,
            max_signals=self.max_signals,
        )
        return params, self._selected_period(opts)

    def _month_range(self, value: str) -> DateRange:
        year, month = parse_year_month(value)
        return resolve_month(year, month, self.today)

    def _selected_period(self, opts: ReportOptions) -> DateRange:
        if opts.month:
            return self._month_range(opts.month)
        if opts.start_date or opts.end_date:
            return resolve_custom_period(opts.start_date, opts.end_date)
        if opts.period:
            return resolve_period(opts.period, self.today)
        return resolve_period(PeriodKey.CURRENT_MONTH, self.today)
