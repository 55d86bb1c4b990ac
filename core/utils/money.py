"""
Money Utilities

Stripe reports amounts as integers in the currency's minor unit (cents).
Canonical records carry major units. Conversion goes through Decimal so that
12345 becomes exactly 123.45 rather than 123.44999999999999.
"""

from decimal import Decimal
from typing import Union


def to_major_units(minor: Union[int, str], exponent: int = 2) -> float:
    """
    Convert an amount in minor units to major units.

    Examples:
        >>> to_major_units(12345)
        123.45
        >>> to_major_units(-500)
        -5.0
    """
    return float(Decimal(minor) / (Decimal(10) ** exponent))


def absolute_amount(value: Union[int, float, str]) -> float:
    """
    Absolute value of a decimal amount given as number or string.

    Example:
        >>> absolute_amount("-42.10")
        42.1
    """
    return float(abs(Decimal(str(value))))
