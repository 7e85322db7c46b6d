"""
Order intake schemas.
"""

from pydantic import Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from fuelwale.app.models.order_enums import OrderStatus
from fuelwale.app.schemas.base import CamelModel


class OrderItemIn(CamelModel):
    product: str = Field(..., min_length=1, max_length=100)
    qty: Decimal = Field(..., gt=0, max_digits=14, decimal_places=3, description="Ordered quantity")
    rate: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    uom: str = Field("L", max_length=20, description="Unit of measure")


class OrderCreate(CamelModel):
    customer_id: int
    ship_to: Optional[str] = Field(None, max_length=500)
    items: List[OrderItemIn] = Field(..., min_length=1)
    delivery_date: Optional[date] = None
    time_slot: Optional[str] = Field(None, max_length=50)
    order_type: Optional[str] = Field(None, max_length=50)
    remarks: Optional[str] = Field(None, max_length=500)


class OrderUpdate(CamelModel):
    status: Optional[OrderStatus] = None
    ship_to: Optional[str] = Field(None, max_length=500)
    delivery_date: Optional[date] = None
    time_slot: Optional[str] = Field(None, max_length=50)
    remarks: Optional[str] = Field(None, max_length=500)


class OrderItemResponse(CamelModel):
    id: int
    product: str
    qty: Decimal
    rate: Optional[Decimal]
    uom: str


class OrderResponse(CamelModel):
    id: int
    customer_id: int
    customer_name: Optional[str] = None
    ship_to: Optional[str]
    delivery_date: Optional[date]
    time_slot: Optional[str]
    order_type: Optional[str]
    remarks: Optional[str]
    status: OrderStatus
    items: List[OrderItemResponse] = []
    total_qty: Decimal = Decimal("0")
    created_at: datetime


class OrderCustomerOption(CamelModel):
    id: int
    name: str
    depot_id: int
    bill_state_cd: Optional[str]
    ship_to: List[str]
