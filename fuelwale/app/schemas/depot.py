"""
Depot schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.schemas.base import CamelModel


class DepotCreate(CamelModel):
    depot_cd: str = Field(..., pattern=r"^\d{1,3}$", description="Depot code, 1-3 digits")
    name: str = Field(..., min_length=1, max_length=200)
    state_cd: Optional[str] = Field(None, pattern=r"^\d{2}$", description="Two-digit state code")
    gstin: Optional[str] = Field(None, max_length=15)
    contact_person: Optional[str] = Field(None, max_length=200)
    mobile: Optional[str] = Field(None, max_length=20)
    city: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=500)
    status: RecordStatus = RecordStatus.ACTIVE


class DepotUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    state_cd: Optional[str] = Field(None, pattern=r"^\d{2}$")
    gstin: Optional[str] = Field(None, max_length=15)
    contact_person: Optional[str] = Field(None, max_length=200)
    mobile: Optional[str] = Field(None, max_length=20)
    city: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=500)
    status: Optional[RecordStatus] = None


class DepotResponse(CamelModel):
    id: int
    depot_cd: str
    name: str
    state_cd: Optional[str]
    gstin: Optional[str]
    contact_person: Optional[str]
    mobile: Optional[str]
    city: Optional[str]
    address: Optional[str]
    status: RecordStatus
    created_at: datetime
