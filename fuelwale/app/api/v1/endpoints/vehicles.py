"""
Vehicle master endpoints.

Vehicle numbers are canonicalised here, at write time. Every other
lookup compares canonical forms with plain equality.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from fuelwale.app.db.session import get_db
from fuelwale.app.models.depot import Depot
from fuelwale.app.models.route import Route
from fuelwale.app.models.vehicle import Vehicle
from fuelwale.app.schemas.vehicle import VehicleCreate, VehicleUpdate, VehicleResponse
from fuelwale.app.core.dependencies import get_current_user
from fuelwale.app.core.exceptions import BusinessRuleError, ConflictError
from fuelwale.app.core.guards import require_role, FLEET_EDITORS
from fuelwale.app.domain.vehicle_identity import canonical_vehicle_no
from fuelwale.app.services.lookups import get_or_404, apply_updates

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


async def _claim_number(db: AsyncSession, raw: str, exclude_id: Optional[int] = None) -> str:
    canonical = canonical_vehicle_no(raw)
    if not canonical:
        raise BusinessRuleError("Vehicle number is required")
    query = select(Vehicle.id).where(Vehicle.vehicle_no == canonical)
    if exclude_id:
        query = query.where(Vehicle.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none() is not None:
        raise ConflictError(f"Vehicle {canonical} is already registered")
    return canonical


@router.get("", response_model=List[VehicleResponse])
async def list_vehicles(
    search: Optional[str] = Query(None),
    route_id: Optional[int] = Query(None, alias="routeId"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(Vehicle).order_by(Vehicle.vehicle_no)
    if search:
        pattern = f"%{canonical_vehicle_no(search)}%"
        query = query.where(or_(Vehicle.vehicle_no.ilike(pattern), Vehicle.make.ilike(f"%{search.strip()}%")))
    if route_id:
        query = query.where(Vehicle.route_id == route_id)
    result = await db.execute(query)
    return [VehicleResponse.model_validate(v) for v in result.scalars().all()]


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    data: VehicleCreate,
    current_user: dict = Depends(require_role(FLEET_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    await get_or_404(db, Depot, data.depot_id)
    if data.route_id:
        await get_or_404(db, Route, data.route_id)
    canonical = await _claim_number(db, data.vehicle_no)

    vehicle = Vehicle(
        **data.model_dump(exclude={"vehicle_no"}),
        vehicle_no=canonical,
        display_no=data.vehicle_no.strip(),
    )
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)
    return VehicleResponse.model_validate(vehicle)


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return VehicleResponse.model_validate(await get_or_404(db, Vehicle, vehicle_id))


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    current_user: dict = Depends(require_role(FLEET_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await get_or_404(db, Vehicle, vehicle_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("depot_id"):
        await get_or_404(db, Depot, changes["depot_id"])
    if changes.get("route_id"):
        await get_or_404(db, Route, changes["route_id"])
    if changes.get("vehicle_no"):
        raw = changes.pop("vehicle_no")
        vehicle.vehicle_no = await _claim_number(db, raw, exclude_id=vehicle.id)
        vehicle.display_no = raw.strip()

    apply_updates(vehicle, changes)
    await db.commit()
    await db.refresh(vehicle)
    return VehicleResponse.model_validate(vehicle)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: int,
    current_user: dict = Depends(require_role(FLEET_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await get_or_404(db, Vehicle, vehicle_id)
    await db.delete(vehicle)
    await db.commit()
