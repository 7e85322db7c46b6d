"""
Pending delivery database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Enum
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.trip_enums import PendingDeliveryStatus


class PendingDelivery(Base):
    """
    Delivery requirement seeded from the order when a trip is assigned.

    One row per ship-to / product combination of the order.
    """
    __tablename__ = "pending_deliveries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey('trips.id', ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=False)
    ship_to = Column(String(500), nullable=True)
    product = Column(String(100), nullable=False)
    required_qty = Column(Numeric(14, 3), nullable=False)
    status = Column(Enum(PendingDeliveryStatus), default=PendingDeliveryStatus.PENDING, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<PendingDelivery(id={self.id}, trip_id={self.trip_id}, status='{self.status.value}')>"
