"""
Loading record database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base


class Loading(Base):
    """Station fill for a trip. The latest one before start opens the bowser balance."""
    __tablename__ = "loadings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey('trips.id', ondelete="CASCADE"), nullable=False, index=True)
    station_id = Column(Integer, ForeignKey('loading_stations.id'), nullable=False)
    product = Column(String(100), nullable=False)
    qty = Column(Numeric(14, 3), nullable=False)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=False)
    depot_cd = Column(String(3), nullable=True)
    recorded_by = Column(Integer, ForeignKey('users.id'), nullable=True)

    loaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Loading(id={self.id}, trip_id={self.trip_id}, qty={self.qty})>"
