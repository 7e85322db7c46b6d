"""
Bowser inventory database model.
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Numeric, CheckConstraint
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base


class BowserInventory(Base):
    """
    Remaining litres on the vehicle for one trip.

    Opened when the trip starts and decremented by a single conditional
    UPDATE per delivery, so the balance never goes negative.
    """
    __tablename__ = "bowser_inventories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey('trips.id', ondelete="CASCADE"), unique=True, nullable=False)
    opening_liters = Column(Numeric(14, 3), nullable=False)
    balance_liters = Column(Numeric(14, 3), nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint('balance_liters >= 0', name='ck_bowser_balance_non_negative'),
    )

    def __repr__(self):
        return f"<BowserInventory(trip_id={self.trip_id}, balance={self.balance_liters})>"
