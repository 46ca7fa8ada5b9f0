"""Decimal arithmetic helpers"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

ZERO = Decimal("0")

# Differences at or below this are treated as floating noise, not money.
AMOUNT_TOLERANCE = Decimal("0.009")

# Magnitudes at or above this are not money; they read as 0 like NaN does.
MAX_MAGNITUDE = Decimal("1e100")


def round_decimal(value: Decimal, decimal_places: int = 2) -> Decimal:
    """
    Round a decimal value to specified decimal places.

    ROUND_HALF_UP on Decimal rounds half away from zero, so negative
    balances round symmetrically with positive ones. The precision is
    widened for values with more integer digits than the default context
    holds, so large totals round instead of raising.

    Args:
        value: Decimal value to round
        decimal_places: Number of decimal places (default 2)

    Returns:
        Rounded decimal value
    """
    quantize_value = Decimal(10) ** -decimal_places
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + decimal_places + 2)
        return value.quantize(quantize_value, rounding=ROUND_HALF_UP)


def sum_decimals(values) -> Decimal:
    """
    Sum an iterable of decimal values.

    Args:
        values: Iterable of decimal values

    Returns:
        Sum of all values
    """
    return sum(values, ZERO)


def to_decimal(value: Any) -> Decimal:
    """
    Convert a loosely typed number to Decimal.

    None, non-numeric strings, NaN, infinities and magnitudes of
    MAX_MAGNITUDE or more all become 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not result.is_finite() or abs(result) >= MAX_MAGNITUDE:
        return ZERO
    return result


def to_money(value: Any) -> Decimal:
    """Convert to Decimal, clamping negatives to 0."""
    result = to_decimal(value)
    return result if result > 0 else ZERO
