"""
Trip lifecycle enumerations.
"""

import enum


class TripStatus(str, enum.Enum):
    """
    Trip status.

    Transitions are strictly ordered:
        ASSIGNED -> ACTIVE -> COMPLETED
    """
    ASSIGNED = "ASSIGNED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class PendingDeliveryStatus(str, enum.Enum):
    """
    Status of a delivery requirement seeded at assignment.

    PENDING entries become FULFILLED when a delivery is confirmed
    against them, or UNDELIVERED when the trip ends without one.
    """
    PENDING = "PENDING"
    FULFILLED = "FULFILLED"
    UNDELIVERED = "UNDELIVERED"
