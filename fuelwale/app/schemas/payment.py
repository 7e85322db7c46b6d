"""
Payment schemas.
"""

from pydantic import Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from fuelwale.app.models.enums import PaymentStatus
from fuelwale.app.schemas.base import CamelModel


class PaymentCreate(CamelModel):
    customer_id: int
    trip_id: Optional[int] = None
    amount: Decimal = Field(..., gt=0, max_digits=20, decimal_places=2)
    mode: str = Field(..., min_length=1, max_length=30, description="Cash, UPI, NEFT, Cheque ...")
    txn_type: Optional[str] = Field(None, max_length=30)
    reference_no: Optional[str] = Field(None, max_length=100)
    payment_date: date
    remarks: Optional[str] = Field(None, max_length=500)


class PaymentUpdate(CamelModel):
    trip_id: Optional[int] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=20, decimal_places=2)
    mode: Optional[str] = Field(None, min_length=1, max_length=30)
    txn_type: Optional[str] = Field(None, max_length=30)
    reference_no: Optional[str] = Field(None, max_length=100)
    payment_date: Optional[date] = None
    remarks: Optional[str] = Field(None, max_length=500)


class PaymentResponse(CamelModel):
    id: int
    customer_id: int
    trip_id: Optional[int]
    amount: Decimal
    mode: str
    txn_type: Optional[str]
    reference_no: Optional[str]
    payment_date: date
    remarks: Optional[str]
    status: PaymentStatus
    created_at: datetime
