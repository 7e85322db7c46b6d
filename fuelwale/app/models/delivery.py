"""
Completed delivery database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base


class Delivery(Base):
    """
    Delivery confirmed by the driver against one pending requirement.

    Read-only once written. `amount` is qty x rate kept at full precision;
    `dc_no` is the delivery-note number `DC<tripNo>-<nn>`.
    """
    __tablename__ = "deliveries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey('trips.id'), nullable=False, index=True)
    pending_delivery_id = Column(Integer, ForeignKey('pending_deliveries.id'), unique=True, nullable=False)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=False)
    ship_to = Column(String(500), nullable=True)
    product = Column(String(100), nullable=False)

    qty = Column(Numeric(14, 3), nullable=False)
    rate = Column(Numeric(12, 2), nullable=False)
    amount = Column(Numeric(20, 5), nullable=False)

    dc_no = Column(String(50), unique=True, index=True, nullable=False)
    recorded_by = Column(Integer, ForeignKey('users.id'), nullable=True)
    delivered_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Delivery(id={self.id}, dc_no='{self.dc_no}', qty={self.qty})>"
