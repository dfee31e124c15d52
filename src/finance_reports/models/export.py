"""Export request and artifact models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

from finance_reports.errors import ConfigError, FinanceReportsError, ValidationError
from finance_reports.models.report import MonthlySummary, ReportType
from finance_reports.models.transaction import TransactionType
from finance_reports.utils.date_utils import parse_date
from finance_reports.utils.logging_config import get_logger

logger = get_logger(__name__)


class ExportKind(Enum):
    """What an export contains."""

    TRANSACTIONS = "transactions"
    REPORT = "report"


EXPORT_FORMATS = ("pdf",)

FILTER_KEYS = ("start_date", "end_date", "type")

REPORT_TITLES = {
    ReportType.MONTHLY: "Monthly Report",
    ReportType.CATEGORY: "Category Report",
    ReportType.EVOLUTION: "Evolution Report",
    ReportType.TOP: "Top Transactions",
    ReportType.COMPARATIVE: "Comparative Report",
    ReportType.PATTERNS: "Pattern Analysis",
}
TRANSACTIONS_TITLE = "Transactions Report"
FALLBACK_TITLE = "Financial Report"


@dataclass(frozen=True)
class TransactionFilters:
    """Ledger filters recognized by exports.

    Attributes:
        start_date: Inclusive lower bound, or None.
        end_date: Inclusive upper bound, or None.
        type: Only this transaction type, or None for both.
    """

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    type: Optional[TransactionType] = None

    def __post_init__(self) -> None:
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError(
                f"End date {self.end_date} is before start date {self.start_date}"
            )


def normalize_filters(
    filters: Union[TransactionFilters, Mapping[str, object], None],
) -> TransactionFilters:
    """Normalize raw filter input into TransactionFilters.

    Date strings are parsed into dates. An unrecognized `type` value is
    dropped silently; unknown keys and unparseable dates raise.

    Args:
        filters: Raw mapping, existing TransactionFilters, or None.

    Returns:
        Normalized filters.

    Raises:
        ValidationError: On unknown keys, malformed dates or an inverted range.
    """
    if filters is None:
        return TransactionFilters()
    if isinstance(filters, TransactionFilters):
        return filters

    unknown = sorted(set(filters) - set(FILTER_KEYS))
    if unknown:
        raise ValidationError(
            f"Unknown filter keys: {', '.join(unknown)}. "
            f"Valid keys: {', '.join(FILTER_KEYS)}"
        )

    start_raw = filters.get("start_date")
    end_raw = filters.get("end_date")
    type_raw = filters.get("type")

    txn_type = TransactionType.from_value(type_raw)  # type: ignore[arg-type]
    if type_raw and txn_type is None:
        logger.debug(f"Dropping unrecognized type filter {type_raw!r}")

    return TransactionFilters(
        start_date=parse_date(start_raw) if start_raw else None,  # type: ignore[arg-type]
        end_date=parse_date(end_raw) if end_raw else None,  # type: ignore[arg-type]
        type=txn_type,
    )


def validate_export_request(
    export_type: Union[ExportKind, str, None],
    format: str,
    report_type: Union[ReportType, str, None],
) -> tuple[ExportKind, Optional[ReportType]]:
    """Validate the structural fields of an export request.

    Args:
        export_type: "transactions" or "report".
        format: Output format; only "pdf" is supported.
        report_type: Required when export_type is "report", ignored otherwise.

    Returns:
        Tuple of (ExportKind, ReportType or None).

    Raises:
        ConfigError: If any field is invalid for the combination.
    """
    valid_types = ", ".join(k.value for k in ExportKind)
    try:
        kind = ExportKind(export_type.value if isinstance(export_type, ExportKind) else export_type)
    except ValueError:
        raise ConfigError(
            f"Invalid export type: {export_type}. Valid types: {valid_types}"
        ) from None

    if format not in EXPORT_FORMATS:
        raise ConfigError(
            f"Unsupported format: {format}. Valid formats: {', '.join(EXPORT_FORMATS)}"
        )

    if kind is ExportKind.TRANSACTIONS:
        return kind, None

    if not report_type:
        raise ConfigError("Report type is required for report exports")

    valid_reports = ", ".join(r.value for r in ReportType)
    try:
        resolved = ReportType(report_type.value if isinstance(report_type, ReportType) else report_type)
    except ValueError:
        raise ConfigError(
            f"Invalid report type: {report_type}. Valid report types: {valid_reports}"
        ) from None

    return kind, resolved


@dataclass(frozen=True)
class ConfigResult:
    """Outcome of ExportConfig.build: either a config or a typed error."""

    config: Optional["ExportConfig"] = None
    error: Optional[FinanceReportsError] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.config is not None


@dataclass(frozen=True)
class ExportConfig:
    """Validated, normalized export request.

    Validation runs in __post_init__, so an instance is always valid.
    String values for export_type and report_type are coerced to enums.

    Attributes:
        export_type: Transactions listing or report.
        report_type: Report variant; always None for transaction exports.
        filters: Normalized ledger filters.
        format: Output format ("pdf").
        include_charts: Whether the renderer draws charts.
        include_summary: Whether the renderer adds the summary block.
        title: Optional title override.
        created_at: When the request was created.
    """

    export_type: ExportKind
    report_type: Optional[ReportType] = None
    filters: TransactionFilters = field(default_factory=TransactionFilters)
    format: str = "pdf"
    include_charts: bool = True
    include_summary: bool = True
    title: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        kind, report_type = validate_export_request(
            self.export_type, self.format, self.report_type
        )
        object.__setattr__(self, "export_type", kind)
        object.__setattr__(self, "report_type", report_type)
        object.__setattr__(self, "filters", normalize_filters(self.filters))

    @classmethod
    def build(cls, **kwargs: object) -> ConfigResult:
        """Create a config, returning the error instead of raising it.

        Args:
            **kwargs: ExportConfig fields.

        Returns:
            ConfigResult holding the config on success or the error.
        """
        try:
            return ConfigResult(config=cls(**kwargs))  # type: ignore[arg-type]
        except (ConfigError, ValidationError) as e:
            return ConfigResult(error=e)

    def get_title(self) -> str:
        """Title override, else the report-type title, else a generic one."""
        if self.title:
            return self.title
        if self.export_type is ExportKind.TRANSACTIONS:
            return TRANSACTIONS_TITLE
        return REPORT_TITLES.get(self.report_type, FALLBACK_TITLE)  # type: ignore[arg-type]

    def generate_filename(self, now: Optional[datetime] = None) -> str:
        """Build a filename unique to the millisecond.

        Format: <kind>_<discriminator>_<YYYY-MM-DD>_<epoch millis>.<format>

        Args:
            now: Moment to stamp (defaults to the current time).

        Returns:
            Filename such as "report_top_2026-10-19_1792400000000.pdf".
        """
        moment = now or datetime.now()
        # Whole milliseconds since the epoch, truncated
        epoch_millis = (
            int(moment.replace(microsecond=0).timestamp()) * 1000 + moment.microsecond // 1000
        )
        day = moment.date().isoformat()

        if self.export_type is ExportKind.TRANSACTIONS:
            discriminator = self.filters.type.value if self.filters.type else "all"
            return f"transactions_{discriminator}_{day}_{epoch_millis}.{self.format}"

        discriminator = self.report_type.value  # type: ignore[union-attr]
        return f"report_{discriminator}_{day}_{epoch_millis}.{self.format}"

    def to_dict(self) -> dict[str, object]:
        """Plain representation for logging and display."""
        return {
            "type": self.export_type.value,
            "report_type": self.report_type.value if self.report_type else None,
            "filters": {
                "start_date": self.filters.start_date.isoformat() if self.filters.start_date else None,
                "end_date": self.filters.end_date.isoformat() if self.filters.end_date else None,
                "type": self.filters.type.value if self.filters.type else None,
            },
            "format": self.format,
            "include_charts": self.include_charts,
            "include_summary": self.include_summary,
            "title": self.get_title(),
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class ExportArtifact:
    """A rendered document and its metadata.

    Attributes:
        filename: File name only.
        filepath: Full path to the written file.
        pages: Page count read back from the finished document.
        size: File size in bytes.
        transaction_count: Number of transactions listed (transaction exports).
        summary: Summary included with transaction exports.
    """

    filename: str
    filepath: Path
    pages: int
    size: int
    transaction_count: Optional[int] = None
    summary: Optional[MonthlySummary] = None

    @property
    def size_kb(self) -> float:
        return self.size / 1024
