"""Decimal utilities for financial calculations.

All monetary calculations use Decimal to avoid floating-point precision issues.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

CURRENCY_SYMBOLS = {"$", "€", "£", "R$"}

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def parse_amount(raw_amount: str) -> Decimal:
    """Parse a raw amount string into a Decimal.

    Handles plain numbers (1234.56), thousands separators (1,234.56)
    and a leading currency symbol ($1,234.56).

    Args:
        raw_amount: The raw amount string to parse.

    Returns:
        Parsed amount.

    Raises:
        ValueError: If the amount cannot be parsed or is not finite.
    """
    if raw_amount is None or not str(raw_amount).strip():
        raise ValueError("Empty amount string")

    amount_str = str(raw_amount).strip()
    for symbol in sorted(CURRENCY_SYMBOLS, key=len, reverse=True):
        amount_str = amount_str.replace(symbol, "")
    amount_str = amount_str.replace(",", "").replace(" ", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse amount '{raw_amount}': {e}") from e

    if not amount.is_finite():
        raise ValueError(f"Amount must be a finite number: '{raw_amount}'")
    return amount


def quantize_money(amount: Decimal) -> Decimal:
    """Round to cents using ROUND_HALF_UP."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, symbol: str = "$") -> str:
    """Format a Decimal amount for display.

    Args:
        amount: The amount to format.
        symbol: Currency symbol prefix.

    Returns:
        Formatted string like "$1,234.56" or "-$80.00".
    """
    rounded = quantize_money(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Share of part in whole, as a percentage rounded to two places.

    Returns zero when whole is zero.
    """
    if whole == 0:
        return Decimal("0.00")
    return (part / whole * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_change(current: Decimal, previous: Decimal) -> Optional[Decimal]:
    """Relative change from previous to current, in percent.

    Args:
        current: Value for the current period.
        previous: Value for the previous period.

    Returns:
        (current - previous) / |previous| * 100 rounded to two places,
        or None when previous is zero.
    """
    if previous == 0:
        return None
    return ((current - previous) / abs(previous) * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Sum Decimal amounts, starting from Decimal zero."""
    return sum(amounts, ZERO)
