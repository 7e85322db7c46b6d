"""
Trip lifecycle schemas.
"""

from pydantic import Field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from fuelwale.app.models.trip_enums import TripStatus, PendingDeliveryStatus
from fuelwale.app.schemas.base import CamelModel


class TripNumberPreview(CamelModel):
    """Candidate trip number; the server allocates the real one on assignment."""
    trip_no: str
    state_cd: str
    depot_cd: str
    serial: int


class TripAssign(CamelModel):
    trip_no: Optional[str] = Field(None, description="Client preview, informational only")
    order_id: int
    route_id: int
    vehicle_no: str = Field(..., min_length=1)
    driver_id: int
    capacity: Decimal = Field(..., gt=0, max_digits=14, decimal_places=3, description="Load to send in litres")


class TripAssignResponse(CamelModel):
    trip_id: int
    trip_no: str
    seeded_deliveries_count: int


class TripStart(CamelModel):
    trip_id: int
    start_km: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    totalizer_start: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    route_id: Optional[int] = None
    remarks: Optional[str] = Field(None, max_length=500)


class PendingDeliveryResponse(CamelModel):
    id: int
    trip_id: int
    customer_id: int
    customer_name: Optional[str] = None
    ship_to: Optional[str]
    product: str
    required_qty: Decimal
    status: PendingDeliveryStatus


class TripStartResponse(CamelModel):
    trip_id: int
    status: TripStatus
    diesel_opening: Decimal
    deliveries: List[PendingDeliveryResponse]


class TripEnd(CamelModel):
    trip_id: int
    end_km: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    totalizer_end: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)


class TripEndResponse(CamelModel):
    trip_id: int
    status: TripStatus
    completed_at: datetime
    undelivered_count: int


class VehicleSnapshot(CamelModel):
    id: int
    vehicle_no: str
    display_no: str


class TripListItem(CamelModel):
    id: int
    trip_no: str
    status: TripStatus
    order_id: int
    customer_name: Optional[str] = None
    route_id: int
    route_name: Optional[str] = None
    vehicle_no: str
    driver_id: int
    driver_name: Optional[str] = None
    capacity: Decimal
    created_at: datetime
    completed_at: Optional[datetime] = None


class TripDetail(TripListItem):
    vehicle: Optional[VehicleSnapshot] = None
    start_km: Optional[Decimal] = None
    end_km: Optional[Decimal] = None
    totalizer_start: Optional[Decimal] = None
    totalizer_end: Optional[Decimal] = None
    remarks: Optional[str] = None
    started_at: Optional[datetime] = None
    balance_liters: Optional[Decimal] = None
