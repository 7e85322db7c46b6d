"""
Loading station (loading source) database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.enums import RecordStatus


class LoadingStation(Base):
    """Terminal or pump where bowsers are filled, listed per route."""
    __tablename__ = "loading_stations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=False, index=True)
    address = Column(String(500), nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<LoadingStation(id={self.id}, name='{self.name}')>"
