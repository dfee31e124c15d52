"""Exception types raised by the reporting and export pipeline."""

from pathlib import Path


class FinanceReportsError(Exception):
    """Base exception for finance_reports."""

    pass


class ValidationError(FinanceReportsError, ValueError):
    """Malformed or out-of-range period, date, or numeric option."""

    pass


class ConfigError(FinanceReportsError):
    """Invalid export type/format/report type combination or bad settings file."""

    pass


class RenderError(FinanceReportsError):
    """Document rendering or file I/O failed."""

    def __init__(self, message: str, filepath: "Path | str | None" = None):
        """Initialize RenderError.

        Args:
            message: Error message.
            filepath: Optional path of the artifact that failed to render.
        """
        self.filepath = filepath
        super().__init__(message)


class NotFoundError(FinanceReportsError):
    """Requested ledger or record does not exist."""

    pass
