"""
Fleet allocation database model.
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base


class FleetAllocation(Base):
    """
    Current driver and order allotted to a vehicle.

    One row per vehicle; trip assignment updates it.
    """
    __tablename__ = "fleet_allocations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="CASCADE"), unique=True, nullable=False)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=True)
    order_id = Column(Integer, ForeignKey('orders.id'), nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<FleetAllocation(vehicle_id={self.vehicle_id}, driver_id={self.driver_id}, order_id={self.order_id})>"
