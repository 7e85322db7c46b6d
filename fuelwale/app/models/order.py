"""
Order and order line item database models.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Numeric, Enum
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.order_enums import OrderStatus


class Order(Base):
    """
    Delivery order placed by a customer.

    Created by order intake in PENDING; advanced by delivery completion.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=False, index=True)
    ship_to = Column(String(500), nullable=True)
    delivery_date = Column(Date, nullable=True)
    time_slot = Column(String(50), nullable=True)
    order_type = Column(String(50), nullable=True)
    remarks = Column(String(500), nullable=True)
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    created_by = Column(Integer, ForeignKey('users.id'), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Order(id={self.id}, customer_id={self.customer_id}, status='{self.status.value}')>"


class OrderItem(Base):
    """Ordered product line."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete="CASCADE"), nullable=False, index=True)
    product = Column(String(100), nullable=False)
    qty = Column(Numeric(14, 3), nullable=False)
    rate = Column(Numeric(12, 2), nullable=True)
    uom = Column(String(20), nullable=False, default="L")

    def __repr__(self):
        return f"<OrderItem(order_id={self.order_id}, product='{self.product}', qty={self.qty})>"
