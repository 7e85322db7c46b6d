"""
Trip number derivation.

A trip number is `<2-digit state code><3-digit depot code><serial>`, e.g.
27101001. The serial is global across the whole system, at least three
digits wide, and keeps growing past 999.
"""

import re
from typing import Iterable, Optional

_NON_DIGITS = re.compile(r"\D")
_SERIAL_AFTER_PREFIX = re.compile(r"^\d{5}(\d{3,})$")
_TRAILING_SERIAL = re.compile(r"(\d{3})$")

SERIAL_WIDTH = 3


def digits_only(value) -> str:
    return _NON_DIGITS.sub("", str(value or ""))


def state_code(bill_state) -> str:
    """
    Two-digit billing state code.

    Non-digits are stripped and the first two digits kept, left-padded
    with zeros. Empty input gives "00".
    """
    return digits_only(bill_state)[:2].rjust(2, "0")


def depot_code(depot_cd) -> str:
    """Three-digit depot code, same rules as `state_code`."""
    return digits_only(depot_cd)[:3].rjust(3, "0")


def extract_serial(trip_no) -> Optional[int]:
    """
    Global serial of an existing trip number.

    Everything after the five prefix digits is the serial; numbers that do
    not have that shape fall back to their last three digits.
    """
    text = str(trip_no or "").strip()
    match = _SERIAL_AFTER_PREFIX.match(text)
    if match:
        return int(match.group(1))
    match = _TRAILING_SERIAL.search(text)
    if match:
        return int(match.group(1))
    return None


def max_serial(trip_nos: Iterable) -> int:
    serials = [s for s in (extract_serial(t) for t in trip_nos) if s is not None]
    return max(serials, default=0)


def next_serial(trip_nos: Iterable) -> int:
    """One more than the largest serial found, regardless of input order."""
    return max_serial(trip_nos) + 1


def format_serial(serial: int, width: int = SERIAL_WIDTH) -> str:
    return str(serial).rjust(width, "0")


def compose_trip_no(bill_state, depot_cd, serial: int, width: int = SERIAL_WIDTH) -> str:
    return f"{state_code(bill_state)}{depot_code(depot_cd)}{format_serial(serial, width)}"
