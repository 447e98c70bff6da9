"""
Money helpers.

All amounts are Decimal with two decimal places. The settlement matcher
works on integer cents, and conversion back to Decimal happens only when
results are handed out.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")

# Default tolerance below which a balance counts as settled (one cent).
DEFAULT_EPSILON = CENT

MoneyLike = Union[Decimal, int, str, float]


def to_decimal(value: MoneyLike) -> Decimal:
    """Convert to Decimal without going through binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value: MoneyLike) -> Decimal:
    """Round to the currency minor unit, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: MoneyLike) -> int:
    return int(quantize_money(value).scaleb(2))


def from_cents(cents: int) -> Decimal:
    return Decimal(cents).scaleb(-2).quantize(CENT)


def format_money(value: MoneyLike, symbol: str = "₹") -> str:
    """Format for display, e.g. ``₹1,250.00``."""
    return f"{symbol}{quantize_money(value):,.2f}"
