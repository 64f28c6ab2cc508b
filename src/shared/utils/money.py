from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import Union

# Type alias for money values
Money = Decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def as_decimal(value: Union[Decimal, float, int, str, None]) -> Decimal:
    """
    Coerce a stored or submitted amount to Decimal without rounding.

    Floats go through ``str`` so 0.1 becomes Decimal('0.1'), not its binary
    expansion. ``None`` is treated as zero.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percent_to_rate(percent: Union[Decimal, float, int, str]) -> Decimal:
    """Convert a 0-100 percentage into a multiplier, e.g. 5.5 -> 0.055."""
    return as_decimal(percent) / HUNDRED


def round_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Round monetary value to 2 decimal places using ROUND_HALF_UP.

    Only used when presenting values; calculations keep full precision.

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money(10.124)
        Decimal('10.12')
        >>> round_money("10.115")
        Decimal('10.12')
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if value < 0:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_DOWN)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
