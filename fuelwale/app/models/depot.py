"""
Depot database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.enums import RecordStatus


class Depot(Base):
    """
    Regional operating base.

    `depot_cd` is the short numeric code that forms the middle three
    digits of every trip number dispatched from this depot.
    """
    __tablename__ = "depots"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    depot_cd = Column(String(3), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    state_cd = Column(String(2), nullable=True)
    gstin = Column(String(15), nullable=True)
    contact_person = Column(String(200), nullable=True)
    mobile = Column(String(20), nullable=True)
    city = Column(String(100), nullable=True)
    address = Column(String(500), nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Depot(id={self.id}, depot_cd='{self.depot_cd}', name='{self.name}')>"
