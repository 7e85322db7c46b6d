"""
Route database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.enums import RecordStatus


class Route(Base):
    """Named delivery path of a depot. Vehicles and stations are registered against it."""
    __tablename__ = "routes"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    depot_id = Column(Integer, ForeignKey('depots.id'), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint('depot_id', 'name', name='uq_routes_depot_name'),
    )

    def __repr__(self):
        return f"<Route(id={self.id}, name='{self.name}', depot_id={self.depot_id})>"
