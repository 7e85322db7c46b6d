"""
Trip database model.

A trip is one vehicle dispatch cycle from assignment to completion.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Enum
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.trip_enums import TripStatus


class Trip(Base):
    """
    Trip model.

    `trip_no` is `<state code><depot code><global serial>` and is allocated
    by the server. `vehicle_no` snapshots the canonical vehicle number at
    assignment. `capacity` is the load-to-send entered by the operator.
    """
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_no = Column(String(32), unique=True, index=True, nullable=False)

    order_id = Column(Integer, ForeignKey('orders.id'), nullable=False, index=True)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=False, index=True)
    vehicle_no = Column(String(32), nullable=False)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=False, index=True)

    capacity = Column(Numeric(14, 3), nullable=False)

    status = Column(Enum(TripStatus), default=TripStatus.ASSIGNED, nullable=False, index=True)

    # Odometer and totalizer readings
    start_km = Column(Numeric(14, 2), nullable=True)
    end_km = Column(Numeric(14, 2), nullable=True)
    totalizer_start = Column(Numeric(14, 2), nullable=True)
    totalizer_end = Column(Numeric(14, 2), nullable=True)

    remarks = Column(String(500), nullable=True)
    created_by = Column(Integer, ForeignKey('users.id'), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Trip(id={self.id}, trip_no='{self.trip_no}', status='{self.status.value}')>"
