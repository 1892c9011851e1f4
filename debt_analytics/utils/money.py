"""Decimal helpers for currency amounts and percentages"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
TENTH = Decimal("0.1")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_money(value) -> Decimal:
    """Quantize to currency scale (2 places, half-up)"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_percent(value) -> Decimal:
    """Quantize a percentage to 1 place of display precision"""
    return Decimal(value).quantize(TENTH, rounding=ROUND_HALF_UP)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100 at full precision; 0 when whole is not positive"""
    if whole <= 0:
        return Decimal(0)
    return part / whole * HUNDRED


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return min(max(value, low), high)
