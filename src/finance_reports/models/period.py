"""Date range value object."""

from dataclasses import dataclass
from datetime import date

from finance_reports.utils.date_utils import format_date


@dataclass(frozen=True)
class DateRange:
    """Inclusive date interval.

    Attributes:
        start: First day of the range.
        end: Last day of the range.
        label: Human-readable description (e.g. "Last 3 months").
    """

    start: date
    end: date
    label: str = ""

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Range end {self.end} is before start {self.start}")

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    @property
    def days(self) -> int:
        """Number of days covered, both ends included."""
        return (self.end - self.start).days + 1

    def display(self, fmt: str = "%d/%m/%Y") -> str:
        return f"{format_date(self.start, fmt)} to {format_date(self.end, fmt)}"
