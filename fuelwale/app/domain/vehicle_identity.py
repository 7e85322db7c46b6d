"""
Vehicle number normalisation.

Vehicle numbers are typed inconsistently ("MH-01 AB.1234", "mh01ab1234").
Every number is canonicalised once when it is written, so lookups are a
plain equality on the canonical form.
"""

import re
from typing import Iterable, Optional, TypeVar

_SEPARATORS = re.compile(r"[\s\-._]+")

T = TypeVar("T")


def canonical_vehicle_no(raw: Optional[str]) -> str:
    """Uppercase and strip spaces, dashes, dots and underscores."""
    return _SEPARATORS.sub("", str(raw or "")).upper()


def match_vehicle(vehicle_no: str, candidates: Iterable[T], key=lambda v: v) -> Optional[T]:
    """
    Find a vehicle in an already fetched list.

    Tries an exact match first, then a case-insensitive one, then a
    comparison of canonical forms. Returns None when nothing matches.
    """
    items = list(candidates)
    wanted = str(vehicle_no or "").strip()
    if not wanted:
        return None

    for item in items:
        if str(key(item) or "").strip() == wanted:
            return item

    lowered = wanted.lower()
    for item in items:
        if str(key(item) or "").strip().lower() == lowered:
            return item

    canonical = canonical_vehicle_no(wanted)
    for item in items:
        if canonical_vehicle_no(key(item)) == canonical:
            return item

    return None
