"""
Litre quantity helpers.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional


def format_liters(value) -> str:
    """Plain decimal text without trailing zeros: 3000.000 -> "3000", 12.50 -> "12.5"."""
    d = Decimal(value)
    if d == d.to_integral_value():
        return str(d.quantize(Decimal(1)))
    return format(d.normalize(), "f")


def parse_decimal(value) -> Optional[Decimal]:
    """Decimal from user input, or None when it is blank or not a number."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        d = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    return d
