"""
Order status enumeration.
"""

import enum


class OrderStatus(str, enum.Enum):
    """
    Order status.

    PENDING: created by order intake, nothing delivered yet
    PARTIALLY_COMPLETED: some requirements fulfilled
    COMPLETED: every requirement fulfilled
    CANCELLED: withdrawn before dispatch
    """
    PENDING = "PENDING"
    PARTIALLY_COMPLETED = "PARTIALLY_COMPLETED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Orders in these states can still be assigned to a trip
ASSIGNABLE_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.PARTIALLY_COMPLETED)
