"""
Vehicle database model.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Date, Numeric, Enum
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.enums import RecordStatus


class Vehicle(Base):
    """
    Bowser vehicle.

    `vehicle_no` is stored in canonical form (see
    `fuelwale.app.domain.vehicle_identity.canonical_vehicle_no`);
    `display_no` keeps the number as it was entered.
    `last_km` / `last_totalizer` are updated when a trip ends.
    """
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vehicle_no = Column(String(32), unique=True, index=True, nullable=False)
    display_no = Column(String(50), nullable=False)
    depot_id = Column(Integer, ForeignKey('depots.id'), nullable=False, index=True)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=True, index=True)

    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    capacity_liters = Column(Numeric(14, 3), nullable=True)
    gross_wt_kgs = Column(Numeric(14, 3), nullable=True)
    month_year = Column(String(20), nullable=True)
    totaliser_make = Column(String(100), nullable=True)
    totaliser_model = Column(String(100), nullable=True)
    has_gps = Column(Boolean, default=False, nullable=False)
    has_volume_sensor = Column(Boolean, default=False, nullable=False)
    peso_no = Column(String(50), nullable=True)

    insurance_expiry = Column(Date, nullable=True)
    fitness_expiry = Column(Date, nullable=True)
    permit_expiry = Column(Date, nullable=True)

    last_km = Column(Numeric(14, 2), nullable=True)
    last_totalizer = Column(Numeric(14, 2), nullable=True)

    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, vehicle_no='{self.vehicle_no}')>"
