"""
Payment receipt database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Numeric, Enum
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.enums import PaymentStatus


class Payment(Base):
    """Payment received from a customer, optionally against one trip."""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=False, index=True)
    trip_id = Column(Integer, ForeignKey('trips.id'), nullable=True, index=True)
    amount = Column(Numeric(20, 2), nullable=False)
    mode = Column(String(30), nullable=False)
    txn_type = Column(String(30), nullable=True)
    reference_no = Column(String(100), nullable=True)
    payment_date = Column(Date, nullable=False)
    remarks = Column(String(500), nullable=True)
    status = Column(Enum(PaymentStatus), default=PaymentStatus.DRAFT, nullable=False)
    created_by = Column(Integer, ForeignKey('users.id'), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Payment(id={self.id}, customer_id={self.customer_id}, status='{self.status.value}')>"
