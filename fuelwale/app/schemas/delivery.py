"""
Delivery and bowser inventory schemas.
"""

from pydantic import Field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from fuelwale.app.schemas.base import CamelModel


class DeliveryCreate(CamelModel):
    trip_id: int
    pending_delivery_id: int
    qty: Decimal = Field(..., gt=0, max_digits=14, decimal_places=3)
    rate: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class DeliveryResponse(CamelModel):
    id: int
    trip_id: int
    pending_delivery_id: int
    customer_id: int
    customer_name: Optional[str] = None
    ship_to: Optional[str]
    product: str
    qty: Decimal
    rate: Decimal
    amount: Decimal
    dc_no: str
    delivered_at: datetime


class BowserBalance(CamelModel):
    trip_id: int
    opening_liters: Decimal
    balance_liters: Decimal
