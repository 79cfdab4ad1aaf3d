"""
Conversions between stored ownership fractions (0..1) and percentages (0..100).

Every read of an ownership column for validation or display, and every
write of a user-entered percentage, goes through these helpers.
"""
from decimal import Decimal, ROUND_HALF_UP

EPSILON = Decimal('0.01')
HUNDRED = Decimal('100')

_FRACTION_PLACES = Decimal('0.000001')
_DISPLAY_PLACES = Decimal('0.01')


def to_decimal(value) -> Decimal:
    """Coerce ints, floats, strings and Decimals to Decimal (None -> 0)."""
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    # str() first so 0.1 becomes Decimal('0.1') rather than its binary expansion
    return Decimal(str(value))


def percentage_to_fraction(percentage) -> Decimal:
    """30 -> Decimal('0.300000')"""
    return (to_decimal(percentage) / HUNDRED).quantize(_FRACTION_PLACES, rounding=ROUND_HALF_UP)


def fraction_to_percentage(fraction) -> Decimal:
    """Decimal('0.3') -> Decimal('30.0'); a missing fraction counts as 0%."""
    return to_decimal(fraction) * HUNDRED


def format_percentage(value) -> str:
    """Two-decimal rendering used in messages and contracts, e.g. '40.00'."""
    return str(to_decimal(value).quantize(_DISPLAY_PLACES, rounding=ROUND_HALF_UP))


def totals_match(total, expected) -> bool:
    return abs(to_decimal(total) - to_decimal(expected)) <= EPSILON
