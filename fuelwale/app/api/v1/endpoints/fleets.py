"""
Fleet allocation endpoints.

One allocation row per vehicle holds its current driver and order.
Trip assignment writes it too; ending or deleting the trip clears the order.
"""

from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fuelwale.app.db.session import get_db
from fuelwale.app.models.driver import Driver
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.models.fleet_allocation import FleetAllocation
from fuelwale.app.models.order import Order
from fuelwale.app.models.order_enums import ASSIGNABLE_ORDER_STATUSES
from fuelwale.app.models.vehicle import Vehicle
from fuelwale.app.schemas.fleet import FleetRow, FleetDriverAssign, FleetDriverRelease, FleetOrderAllocate
from fuelwale.app.core.exceptions import BusinessRuleError, ConflictError, ResourceNotFoundError
from fuelwale.app.core.guards import require_role, FLEET_EDITORS, FLEET_VIEWERS
from fuelwale.app.services.audit import log_user_action, AuditAction
from fuelwale.app.services.fleet_export import fleet_to_csv
from fuelwale.app.services.listings import fleet_rows
from fuelwale.app.services.lookups import get_or_404

router = APIRouter(prefix="/fleets", tags=["Fleets"])


async def _allocation_for(db: AsyncSession, vehicle_id: int) -> FleetAllocation:
    """Allocation row of a vehicle, created empty if it has none yet."""
    await get_or_404(db, Vehicle, vehicle_id)
    result = await db.execute(select(FleetAllocation).where(FleetAllocation.vehicle_id == vehicle_id))
    allocation = result.scalar_one_or_none()
    if allocation is None:
        allocation = FleetAllocation(vehicle_id=vehicle_id)
        db.add(allocation)
    return allocation


async def _row_for(db: AsyncSession, vehicle_id: int) -> FleetRow:
    for row in await fleet_rows(db):
        if row.vehicle_id == vehicle_id:
            return row
    raise ResourceNotFoundError("Vehicle", vehicle_id)


@router.get("", response_model=List[FleetRow])
async def list_fleet(
    search: Optional[str] = Query(None),
    current_user: dict = Depends(require_role(FLEET_VIEWERS)),
    db: AsyncSession = Depends(get_db)
):
    return await fleet_rows(db, search)


@router.get("/export")
async def export_fleet(
    search: Optional[str] = Query(None),
    current_user: dict = Depends(require_role(FLEET_VIEWERS)),
    db: AsyncSession = Depends(get_db)
):
    """Fleet listing as CSV, same columns and order as the listing screen."""
    content = fleet_to_csv(await fleet_rows(db, search))
    filename = f"fleet_{datetime.now().strftime('%Y%m%d')}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.put("/assign-driver", response_model=FleetRow)
async def assign_driver(
    data: FleetDriverAssign,
    current_user: dict = Depends(require_role(FLEET_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    driver = await get_or_404(db, Driver, data.driver_id)
    if driver.status != RecordStatus.ACTIVE:
        raise BusinessRuleError(f"Driver {driver.name} is not active")

    result = await db.execute(
        select(FleetAllocation.vehicle_id).where(
            FleetAllocation.driver_id == driver.id, FleetAllocation.vehicle_id != data.vehicle_id
        )
    )
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"Driver {driver.name} is already allotted to another vehicle")

    allocation = await _allocation_for(db, data.vehicle_id)
    allocation.driver_id = driver.id
    await db.commit()

    await log_user_action(db, current_user, AuditAction.FLEET_DRIVER_ASSIGNED, "vehicle", data.vehicle_id,
                          {"driver_id": driver.id})
    return await _row_for(db, data.vehicle_id)


@router.put("/release-driver", response_model=FleetRow)
async def release_driver(
    data: FleetDriverRelease,
    current_user: dict = Depends(require_role(FLEET_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    allocation = await _allocation_for(db, data.vehicle_id)
    allocation.driver_id = None
    await db.commit()

    await log_user_action(db, current_user, AuditAction.FLEET_DRIVER_RELEASED, "vehicle", data.vehicle_id)
    return await _row_for(db, data.vehicle_id)


@router.put("/{vehicle_id}/allocate", response_model=FleetRow)
async def allocate_order(
    data: FleetOrderAllocate,
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: dict = Depends(require_role(FLEET_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    order = await get_or_404(db, Order, data.order_id)
    if order.status not in ASSIGNABLE_ORDER_STATUSES:
        raise BusinessRuleError(f"Order {order.id} is {order.status.value} and cannot be allotted")

    allocation = await _allocation_for(db, vehicle_id)
    allocation.order_id = order.id
    await db.commit()

    await log_user_action(db, current_user, AuditAction.FLEET_ORDER_ALLOCATED, "vehicle", vehicle_id,
                          {"order_id": order.id})
    return await _row_for(db, vehicle_id)


@router.put("/{vehicle_id}/release", response_model=FleetRow)
async def release_order(
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: dict = Depends(require_role(FLEET_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    allocation = await _allocation_for(db, vehicle_id)
    allocation.order_id = None
    await db.commit()

    await log_user_action(db, current_user, AuditAction.FLEET_ORDER_RELEASED, "vehicle", vehicle_id)
    return await _row_for(db, vehicle_id)
