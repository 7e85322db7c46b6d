"""
Vehicle schemas.
"""

from pydantic import Field
from datetime import date
from decimal import Decimal
from typing import Optional
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.schemas.base import CamelModel


class VehicleCreate(CamelModel):
    """Vehicle number may be typed in any format; it is stored canonicalised."""
    vehicle_no: str = Field(..., min_length=1, max_length=50)
    depot_id: int
    route_id: Optional[int] = None
    make: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    capacity_liters: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=3)
    gross_wt_kgs: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=3)
    month_year: Optional[str] = Field(None, max_length=20)
    totaliser_make: Optional[str] = Field(None, max_length=100)
    totaliser_model: Optional[str] = Field(None, max_length=100)
    has_gps: bool = False
    has_volume_sensor: bool = False
    peso_no: Optional[str] = Field(None, max_length=50)
    insurance_expiry: Optional[date] = None
    fitness_expiry: Optional[date] = None
    permit_expiry: Optional[date] = None
    status: RecordStatus = RecordStatus.ACTIVE


class VehicleUpdate(CamelModel):
    vehicle_no: Optional[str] = Field(None, min_length=1, max_length=50)
    depot_id: Optional[int] = None
    route_id: Optional[int] = None
    make: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    capacity_liters: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=3)
    gross_wt_kgs: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=3)
    month_year: Optional[str] = Field(None, max_length=20)
    totaliser_make: Optional[str] = Field(None, max_length=100)
    totaliser_model: Optional[str] = Field(None, max_length=100)
    has_gps: Optional[bool] = None
    has_volume_sensor: Optional[bool] = None
    peso_no: Optional[str] = Field(None, max_length=50)
    insurance_expiry: Optional[date] = None
    fitness_expiry: Optional[date] = None
    permit_expiry: Optional[date] = None
    status: Optional[RecordStatus] = None


class VehicleResponse(CamelModel):
    id: int
    vehicle_no: str
    display_no: str
    depot_id: int
    route_id: Optional[int]
    make: Optional[str]
    model: Optional[str]
    capacity_liters: Optional[Decimal]
    gross_wt_kgs: Optional[Decimal]
    month_year: Optional[str]
    totaliser_make: Optional[str]
    totaliser_model: Optional[str]
    has_gps: bool
    has_volume_sensor: bool
    peso_no: Optional[str]
    insurance_expiry: Optional[date]
    fitness_expiry: Optional[date]
    permit_expiry: Optional[date]
    last_km: Optional[Decimal]
    last_totalizer: Optional[Decimal]
    status: RecordStatus
