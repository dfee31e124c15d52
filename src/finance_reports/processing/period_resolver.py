"""Resolution of symbolic and explicit period selections into date ranges."""

from datetime import date
from enum import Enum
from typing import Optional, Union

from finance_reports.errors import ValidationError
from finance_reports.models.period import DateRange
from finance_reports.utils.date_utils import (
    add_months,
    month_end,
    month_label,
    month_start,
    parse_day_month_year,
)

__all__ = [
    "PeriodKey",
    "DateRange",
    "resolve_period",
    "resolve_custom_period",
    "resolve_month",
    "resolve_trailing_months",
    "resolve_adjacent_months",
]


class PeriodKey(Enum):
    """Symbolic periods offered to the user."""

    CURRENT_MONTH = "current-month"
    LAST_MONTH = "last-month"
    LAST_3_MONTHS = "last-3-months"
    LAST_6_MONTHS = "last-6-months"
    CURRENT_YEAR = "current-year"
    LAST_YEAR = "last-year"


PERIOD_LABELS = {
    PeriodKey.CURRENT_MONTH: "Current month",
    PeriodKey.LAST_MONTH: "Last month",
    PeriodKey.LAST_3_MONTHS: "Last 3 months",
    PeriodKey.LAST_6_MONTHS: "Last 6 months",
    PeriodKey.CURRENT_YEAR: "Current year",
    PeriodKey.LAST_YEAR: "Last year",
}


def resolve_period(key: Union[PeriodKey, str], today: Optional[date] = None) -> DateRange:
    """Resolve a symbolic period key.

    Rules:
    - current-month: 1st of this month to today
    - last-month: the whole previous calendar month
    - last-3-months / last-6-months: rolling window ending today
    - current-year: 1 January to today
    - last-year: the whole previous calendar year

    Args:
        key: PeriodKey or its string value.
        today: Reference date (defaults to today).

    Returns:
        Inclusive DateRange.

    Raises:
        ValidationError: If the key is unknown.
    """
    try:
        period = key if isinstance(key, PeriodKey) else PeriodKey(key)
    except ValueError:
        valid = ", ".join(k.value for k in PeriodKey)
        raise ValidationError(f"Unknown period '{key}'. Valid periods: {valid}") from None

    today = today or date.today()
    label = PERIOD_LABELS[period]

    if period is PeriodKey.CURRENT_MONTH:
        return DateRange(month_start(today), today, label)
    if period is PeriodKey.LAST_MONTH:
        previous = add_months(month_start(today), -1)
        return DateRange(previous, month_end(previous), label)
    if period is PeriodKey.LAST_3_MONTHS:
        return DateRange(add_months(today, -3), today, label)
    if period is PeriodKey.LAST_6_MONTHS:
        return DateRange(add_months(today, -6), today, label)
    if period is PeriodKey.CURRENT_YEAR:
        return DateRange(date(today.year, 1, 1), today, label)
    return DateRange(date(today.year - 1, 1, 1), date(today.year - 1, 12, 31), label)


def resolve_custom_period(start: Optional[str], end: Optional[str]) -> DateRange:
    """Resolve an explicit DD/MM/YYYY start and end.

    Args:
        start: Start date string.
        end: End date string.

    Returns:
        Inclusive DateRange.

    Raises:
        ValidationError: If either bound is missing or invalid, or end < start.
    """
    if not start or not end:
        raise ValidationError("Custom periods require both a start and an end date")

    start_date = parse_day_month_year(start)
    end_date = parse_day_month_year(end)
    if end_date < start_date:
        raise ValidationError(f"End date {end} is before start date {start}")

    return DateRange(start_date, end_date, "Custom period")


def resolve_month(year: int, month: int, today: Optional[date] = None) -> DateRange:
    """Resolve one calendar month, capped at today for the running month.

    Raises:
        ValidationError: If the month is invalid or entirely in the future.
    """
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")

    today = today or date.today()
    try:
        start = date(year, month, 1)
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Invalid month {year:04d}-{month:02d}: {e}") from e
    if start > today:
        raise ValidationError(f"{month_label(year, month)} is in the future")

    return DateRange(start, min(month_end(start), today), month_label(year, month))


def resolve_trailing_months(count: int, today: Optional[date] = None) -> DateRange:
    """Range covering the `count` calendar months ending with today's month."""
    today = today or date.today()
    start = add_months(month_start(today), -(count - 1))
    return DateRange(start, today, f"Last {count} months")


def resolve_adjacent_months(
    year: int, month: int, today: Optional[date] = None
) -> tuple[DateRange, DateRange]:
    """Resolve a month and the calendar month before it.

    Returns:
        Tuple of (previous, current) ranges.
    """
    current = resolve_month(year, month, today)
    previous_start = add_months(current.start, -1)
    previous = DateRange(
        previous_start,
        month_end(previous_start),
        month_label(previous_start.year, previous_start.month),
    )
    return previous, current
