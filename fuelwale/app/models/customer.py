"""
Customer database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, JSON
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.enums import RecordStatus


class Customer(Base):
    """
    Customer billed for deliveries.

    `bill_state_cd` is the free-form billing state field (e.g. "27" or
    "27-Maharashtra"); its leading digits become the trip number prefix.
    `ship_to` holds the list of delivery addresses.
    """
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    cust_cd = Column(String(20), unique=True, index=True, nullable=True)
    name = Column(String(200), nullable=False, index=True)
    depot_id = Column(Integer, ForeignKey('depots.id'), nullable=False, index=True)
    bill_state_cd = Column(String(50), nullable=True)
    bill_address = Column(String(500), nullable=True)
    ship_to = Column(JSON, nullable=False, default=list)
    gstin = Column(String(15), nullable=True)
    contact_person = Column(String(200), nullable=True)
    mobile = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}')>"
