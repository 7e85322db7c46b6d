"""
Delivery fulfillment and bowser balance endpoints.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Header, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from fuelwale.app.db.session import get_db
from fuelwale.app.models.trip import Trip
from fuelwale.app.schemas.delivery import DeliveryCreate, DeliveryResponse, BowserBalance
from fuelwale.app.schemas.trip import PendingDeliveryResponse
from fuelwale.app.core.exceptions import ResourceNotFoundError
from fuelwale.app.core.guards import require_role, TRIP_ROLES
from fuelwale.app.domain.trips.lifecycle_service import TripLifecycleService
from fuelwale.app.services.audit import log_user_action, AuditAction
from fuelwale.app.services.idempotency import IdempotencyService
from fuelwale.app.services.listings import pending_for_trip, completed_for_trip, bowser_for_trip
from fuelwale.app.services.lookups import get_or_404

router = APIRouter(prefix="/deliveries", tags=["Deliveries"])
bowser_router = APIRouter(prefix="/bowserinventories", tags=["Deliveries"])


async def _accessible_trip(db: AsyncSession, trip_id: int, current_user: dict) -> Trip:
    trip = await get_or_404(db, Trip, trip_id)
    await TripLifecycleService.ensure_trip_access(db, trip, current_user)
    return trip


@router.get("/pending/{trip_id}", response_model=List[PendingDeliveryResponse])
async def pending_deliveries(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    await _accessible_trip(db, trip_id, current_user)
    return await pending_for_trip(db, trip_id)


@router.get("/completed/{trip_id}", response_model=List[DeliveryResponse])
async def completed_deliveries(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    await _accessible_trip(db, trip_id, current_user)
    return await completed_for_trip(db, trip_id)


@router.post("", response_model=DeliveryResponse, status_code=status.HTTP_201_CREATED)
async def record_delivery(
    data: DeliveryCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """
    Confirm a delivery against a pending entry of an ACTIVE trip.

    Fails with 409 when the bowser balance is lower than the quantity.
    """
    cached = await IdempotencyService.get("delivery", current_user["user_id"], idempotency_key)
    if cached is not None:
        return cached

    delivery = await TripLifecycleService.deliver(db, data, current_user)
    response = DeliveryResponse.model_validate(delivery)

    await IdempotencyService.store(
        "delivery", current_user["user_id"], idempotency_key, response.model_dump(mode="json", by_alias=True)
    )
    await log_user_action(db, current_user, AuditAction.DELIVERY_RECORDED, "trip", response.trip_id, {
        "delivery_id": response.id,
        "dc_no": response.dc_no,
        "qty": str(response.qty),
        "rate": str(response.rate),
    })
    return response


@bowser_router.get("/{trip_id}", response_model=BowserBalance)
async def bowser_balance(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """Remaining litres in the bowser of a started trip."""
    await _accessible_trip(db, trip_id, current_user)
    bowser = await bowser_for_trip(db, trip_id)
    if bowser is None:
        raise ResourceNotFoundError("Bowser inventory for trip", trip_id)
    return BowserBalance.model_validate(bowser)
