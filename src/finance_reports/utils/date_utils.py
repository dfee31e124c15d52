"""Date parsing and calendar arithmetic utilities."""

import calendar
import re
from datetime import date, datetime

from finance_reports.errors import ValidationError

# Accepted date formats
#
# Slash, period and dash separated dates are always day-first (DD/MM/YYYY).
# ISO 8601 (YYYY-MM-DD) is tried first and is the unambiguous choice.
DATE_PATTERNS = [
    (r"^(\d{4})-(\d{1,2})-(\d{1,2})$", ("year", "month", "day")),
    (r"^(\d{1,2})/(\d{1,2})/(\d{4})$", ("day", "month", "year")),
    (r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$", ("day", "month", "year")),
    (r"^(\d{1,2})-(\d{1,2})-(\d{4})$", ("day", "month", "year")),
]

COMPILED_PATTERNS = [(re.compile(pattern), order) for pattern, order in DATE_PATTERNS]

DAY_MONTH_YEAR_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")


def build_date(day: int, month: int, year: int) -> date:
    """Build a date, rejecting combinations that are not on the calendar.

    The constructed date must round-trip to exactly the requested
    day, month and year, so 30/02/2026 or 31/04/2026 are rejected.

    Args:
        day: Day of month.
        month: Month (1-12).
        year: Four-digit year.

    Returns:
        The date.

    Raises:
        ValidationError: If the combination is not a valid calendar date.
    """
    try:
        built = date(year, month, day)
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Invalid calendar date {day:02d}/{month:02d}/{year}: {e}") from e

    if (built.day, built.month, built.year) != (day, month, year):
        raise ValidationError(f"Invalid calendar date {day:02d}/{month:02d}/{year}")
    return built


def parse_day_month_year(raw_date: str) -> date:
    """Parse a DD/MM/YYYY string strictly.

    Args:
        raw_date: The raw date string.

    Returns:
        Parsed date.

    Raises:
        ValidationError: If the string is malformed or not a calendar date.
    """
    if not raw_date or not raw_date.strip():
        raise ValidationError("Empty date string")

    match = DAY_MONTH_YEAR_PATTERN.match(raw_date.strip())
    if not match:
        raise ValidationError(f"Invalid date '{raw_date}'. Use DD/MM/YYYY")

    day, month, year = (int(part) for part in match.groups())
    return build_date(day, month, year)


def parse_date(raw_date: str | date) -> date:
    """Parse a date string in ISO or day-first format.

    Handles:
    - ISO: 2026-01-15
    - Day-first: 15/01/2026, 15.01.2026, 15-01-2026

    Args:
        raw_date: The raw date string (date and datetime values pass through).

    Returns:
        Parsed date object.

    Raises:
        ValidationError: If the date cannot be parsed.
    """
    if isinstance(raw_date, datetime):
        return raw_date.date()
    if isinstance(raw_date, date):
        return raw_date

    if not raw_date or not raw_date.strip():
        raise ValidationError("Empty date string")

    date_str = raw_date.strip()
    for pattern, order in COMPILED_PATTERNS:
        match = pattern.match(date_str)
        if match:
            parts = dict(zip(order, (int(g) for g in match.groups())))
            return build_date(parts["day"], parts["month"], parts["year"])

    raise ValidationError(f"Cannot parse date: '{raw_date}'")


def parse_year_month(raw_month: str) -> tuple[int, int]:
    """Parse a YYYY-MM string.

    Args:
        raw_month: Month string like "2026-09".

    Returns:
        Tuple of (year, month).

    Raises:
        ValidationError: If the string is malformed or the month is out of range.
    """
    match = YEAR_MONTH_PATTERN.match(raw_month.strip()) if raw_month else None
    if not match:
        raise ValidationError(f"Invalid month '{raw_month}'. Use YYYY-MM")

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month '{raw_month}': month must be 1-12")
    return year, month


def format_date(d: date, fmt: str = "%d/%m/%Y") -> str:
    """Format a date for display.

    Args:
        d: Date to format.
        fmt: strftime format string (default day-first).

    Returns:
        Formatted date string.
    """
    return d.strftime(fmt)


def month_start(d: date) -> date:
    """First day of the month containing d."""
    return d.replace(day=1)


def month_end(d: date) -> date:
    """Last day of the month containing d."""
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def add_months(d: date, months: int) -> date:
    """Shift a date by a number of calendar months.

    The day is clamped to the length of the target month, so
    31 March minus one month is 28 (or 29) February.

    Args:
        d: Date to shift.
        months: Number of months (negative to go back).

    Returns:
        Shifted date.

    Raises:
        ValidationError: If the result falls outside the supported years.
    """
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    try:
        day = min(d.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Cannot shift {d.isoformat()} by {months} months: {e}") from e


def trailing_months(as_of: date, count: int) -> list[tuple[int, int]]:
    """List the `count` calendar months ending with the month of as_of.

    Args:
        as_of: Reference date; its month is the last one returned.
        count: Number of months.

    Returns:
        List of (year, month) tuples, oldest first.
    """
    start = add_months(month_start(as_of), -(count - 1))
    return generate_month_range(start, as_of)


def month_label(year: int, month: int) -> str:
    """Short display label like 'Sep 2026'."""
    return f"{calendar.month_abbr[month]} {year}"


def is_date_in_range(
    d: date,
    start_date: date | None = None,
    end_date: date | None = None,
) -> bool:
    """Check if a date is within a range.

    Args:
        d: Date to check.
        start_date: Start of range (inclusive). None means no lower bound.
        end_date: End of range (inclusive). None means no upper bound.

    Returns:
        True if date is within range.
    """
    if start_date is not None and d < start_date:
        return False
    if end_date is not None and d > end_date:
        return False
    return True


def generate_month_range(start: date, end: date) -> list[tuple[int, int]]:
    """Generate a list of (year, month) tuples for a date range.

    Args:
        start: Start date.
        end: End date.

    Returns:
        List of (year, month) tuples covering the range.
    """
    months = []
    current_year = start.year
    current_month = start.month

    while (current_year, current_month) <= (end.year, end.month):
        months.append((current_year, current_month))
        current_month += 1
        if current_month > 12:
            current_month = 1
            current_year += 1

    return months
