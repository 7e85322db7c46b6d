"""
Fleet allocation schemas.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from fuelwale.app.schemas.base import CamelModel


class FleetRow(CamelModel):
    """One vehicle with its current driver and order allotment."""
    vehicle_id: int
    vehicle_no: str
    make: Optional[str] = None
    model: Optional[str] = None
    capacity_liters: Optional[Decimal] = None
    gross_wt_kgs: Optional[Decimal] = None
    month_year: Optional[str] = None
    totaliser_make: Optional[str] = None
    totaliser_model: Optional[str] = None
    has_gps: bool = False
    has_volume_sensor: bool = False
    peso_no: Optional[str] = None
    insurance_expiry: Optional[date] = None
    fitness_expiry: Optional[date] = None
    permit_expiry: Optional[date] = None
    depot_cd: Optional[str] = None
    driver_id: Optional[int] = None
    driver_name: Optional[str] = None
    order_id: Optional[int] = None
    order_delivery_date: Optional[date] = None
    order_time_slot: Optional[str] = None
    order_customer: Optional[str] = None


class FleetDriverAssign(CamelModel):
    vehicle_id: int
    driver_id: int


class FleetDriverRelease(CamelModel):
    vehicle_id: int


class FleetOrderAllocate(CamelModel):
    order_id: int
