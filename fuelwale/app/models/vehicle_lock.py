"""
Vehicle Lock database model.

Ensures only one ACTIVE trip per vehicle through a DB-level unique index.
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Index, text
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base


class VehicleLock(Base):
    """
    Vehicle Lock model.

    Vehicle is locked when a trip starts and released when it ends.
    """
    __tablename__ = "vehicle_locks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey('trips.id'), nullable=False, index=True)
    locked_by_user_id = Column(Integer, ForeignKey('users.id'), nullable=True)

    locked_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    released_at = Column(DateTime(timezone=True), nullable=True)

    # Only one unreleased lock per vehicle
    __table_args__ = (
        Index('ix_vehicle_locks_active', 'vehicle_id', unique=True,
              postgresql_where=text('released_at IS NULL'),
              sqlite_where=text('released_at IS NULL')),
    )

    def __repr__(self):
        return f"<VehicleLock(vehicle_id={self.vehicle_id}, trip_id={self.trip_id}, active={self.released_at is None})>"
