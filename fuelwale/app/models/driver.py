"""
Driver database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.enums import RecordStatus


class Driver(Base):
    """
    Bowser driver.

    `user_id` links the driver record to the login account the driver
    uses to start and end their own trips.
    """
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    peso_license_no = Column(String(50), unique=True, index=True, nullable=False)
    mobile = Column(String(20), nullable=True)
    depot_id = Column(Integer, ForeignKey('depots.id'), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), unique=True, nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.name}')>"
