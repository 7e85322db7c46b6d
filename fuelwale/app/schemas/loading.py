"""
Loading station and loading record schemas.
"""

from pydantic import Field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.schemas.base import CamelModel


class LoadingStationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    route_id: int
    address: Optional[str] = Field(None, max_length=500)
    status: RecordStatus = RecordStatus.ACTIVE


class LoadingStationUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    route_id: Optional[int] = None
    address: Optional[str] = Field(None, max_length=500)
    status: Optional[RecordStatus] = None


class LoadingStationResponse(CamelModel):
    id: int
    name: str
    route_id: int
    address: Optional[str]
    status: RecordStatus


class StationOption(CamelModel):
    """Station entry of GET /loadings/stations/{routeId}."""
    id: int
    name: str


class LoadingCreate(CamelModel):
    trip_id: int
    station_id: int
    product: str = Field(..., min_length=1, max_length=100)
    qty: Decimal = Field(..., gt=0, max_digits=14, decimal_places=3)
    code: Optional[str] = Field(None, description="Loading code when the policy requires one")


class LoadingResponse(CamelModel):
    id: int
    trip_id: int
    station_id: int
    product: str
    qty: Decimal
    vehicle_id: int
    depot_cd: Optional[str]
    loaded_at: datetime


class LoadingCodeRequest(CamelModel):
    trip_id: int


class LoadingCodeIssued(CamelModel):
    trip_id: int
    expires_in_seconds: int


class LoadingCodeVerify(CamelModel):
    trip_id: int
    code: str = Field(..., min_length=1, max_length=12)


class LoadingCodeVerified(CamelModel):
    trip_id: int
    verified: bool
