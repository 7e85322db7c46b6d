"""
Route schemas.
"""

from pydantic import Field
from typing import Optional
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.schemas.base import CamelModel


class RouteCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    depot_id: int
    description: Optional[str] = Field(None, max_length=500)
    status: RecordStatus = RecordStatus.ACTIVE


class RouteUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[RecordStatus] = None


class RouteResponse(CamelModel):
    id: int
    name: str
    depot_id: int
    description: Optional[str]
    status: RecordStatus
