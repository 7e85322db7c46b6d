"""
Customer schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import List, Optional
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.schemas.base import CamelModel


class CustomerCreate(CamelModel):
    cust_cd: Optional[str] = Field(None, max_length=20)
    name: str = Field(..., min_length=1, max_length=200)
    depot_id: int
    bill_state_cd: Optional[str] = Field(None, max_length=50, description="Billing state, leading digits are the state code")
    bill_address: Optional[str] = Field(None, max_length=500)
    ship_to: List[str] = Field(default_factory=list, description="Delivery addresses")
    gstin: Optional[str] = Field(None, max_length=15)
    contact_person: Optional[str] = Field(None, max_length=200)
    mobile: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=255)
    status: RecordStatus = RecordStatus.ACTIVE


class CustomerUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    depot_id: Optional[int] = None
    bill_state_cd: Optional[str] = Field(None, max_length=50)
    bill_address: Optional[str] = Field(None, max_length=500)
    ship_to: Optional[List[str]] = None
    gstin: Optional[str] = Field(None, max_length=15)
    contact_person: Optional[str] = Field(None, max_length=200)
    mobile: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=255)
    status: Optional[RecordStatus] = None


class CustomerResponse(CamelModel):
    id: int
    cust_cd: Optional[str]
    name: str
    depot_id: int
    bill_state_cd: Optional[str]
    bill_address: Optional[str]
    ship_to: List[str]
    gstin: Optional[str]
    contact_person: Optional[str]
    mobile: Optional[str]
    email: Optional[str]
    status: RecordStatus
    created_at: datetime
