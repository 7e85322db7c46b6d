"""
Trip lifecycle API endpoints.

Assignment, start ("trip login"), end ("trip logout"), listings and the
invoice PDF of a completed trip. State transitions live in
`TripLifecycleService`; this module handles access, idempotency
replay and audit logging.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Header, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from fuelwale.app.db.session import get_db
from fuelwale.app.models.customer import Customer
from fuelwale.app.models.enums import UserRole
from fuelwale.app.models.order import Order
from fuelwale.app.models.trip import Trip
from fuelwale.app.models.trip_enums import TripStatus
from fuelwale.app.schemas.trip import (
    TripNumberPreview, TripAssign, TripAssignResponse, TripStart, TripStartResponse,
    TripEnd, TripEndResponse, TripListItem, TripDetail
)
from fuelwale.app.core.exceptions import InsufficientPermissionsError, InvalidTripTransitionError, ResourceNotFoundError
from fuelwale.app.core.guards import require_role, is_trip_supervisor, MASTER_EDITORS, ORDER_DESK, TRIP_ROLES, INVOICE_ROLES
from fuelwale.app.domain.invoicing.invoice_builder import build_invoice
from fuelwale.app.domain.invoicing.pdf_renderer import render_invoice_pdf
from fuelwale.app.domain.trips.lifecycle_service import TripLifecycleService
from fuelwale.app.services.audit import log_user_action, AuditAction
from fuelwale.app.services.idempotency import IdempotencyService
from fuelwale.app.services.listings import list_trips, trip_detail, pending_for_trip, deliveries_of
from fuelwale.app.services.lookups import get_or_404

router = APIRouter(prefix="/trips", tags=["Trips"])

TRIP_VIEWERS = TRIP_ROLES + [UserRole.TRANSPORTER, UserRole.SALES_ASSOCIATE]


async def _own_driver_id(db: AsyncSession, current_user: dict) -> Optional[int]:
    """Driver id the caller is restricted to, or None for unrestricted roles."""
    if current_user.get("role") != UserRole.DRIVER.value:
        return None
    driver = await TripLifecycleService.driver_for_user(db, current_user["user_id"])
    if driver is None:
        raise InsufficientPermissionsError("No driver profile is linked to this account")
    return driver.id


@router.get("/next-number", response_model=TripNumberPreview)
async def next_trip_number(
    order_id: int = Query(..., alias="orderId"),
    current_user: dict = Depends(require_role(ORDER_DESK)),
    db: AsyncSession = Depends(get_db)
):
    """Preview of the next trip number for an order."""
    return await TripLifecycleService.preview_trip_no(db, order_id)


@router.post("/assign", response_model=TripAssignResponse, status_code=status.HTTP_201_CREATED)
async def assign_trip(
    data: TripAssign,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    current_user: dict = Depends(require_role(ORDER_DESK)),
    db: AsyncSession = Depends(get_db)
):
    """
    Assign an order to a route, vehicle and driver.

    The trip number in the response is the one allocated by the server.
    A repeated Idempotency-Key replays the first response.
    """
    cached = await IdempotencyService.get("trip-assign", current_user["user_id"], idempotency_key)
    if cached is not None:
        return cached

    trip, seeded = await TripLifecycleService.assign(db, data, current_user)
    response = TripAssignResponse(trip_id=trip.id, trip_no=trip.trip_no, seeded_deliveries_count=seeded)

    await IdempotencyService.store(
        "trip-assign", current_user["user_id"], idempotency_key, response.model_dump(mode="json", by_alias=True)
    )
    await log_user_action(db, current_user, AuditAction.TRIP_ASSIGNED, "trip", response.trip_id, {
        "trip_no": response.trip_no,
        "order_id": data.order_id,
        "vehicle_no": data.vehicle_no,
        "driver_id": data.driver_id,
    })
    return response


@router.post("/login", response_model=TripStartResponse)
async def start_trip(
    data: TripStart,
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """
    Start an ASSIGNED trip.

    Validates:
    - Trip is ASSIGNED
    - Caller is a supervisor or the trip's driver
    - Driver has no other ACTIVE trip
    - Vehicle is not locked by another trip
    """
    trip, bowser = await TripLifecycleService.start(db, data, current_user)
    trip_id, trip_no, trip_status = trip.id, trip.trip_no, trip.status
    opening = bowser.opening_liters

    deliveries = await pending_for_trip(db, trip_id)

    await log_user_action(db, current_user, AuditAction.TRIP_STARTED, "trip", trip_id, {
        "trip_no": trip_no,
        "start_km": str(data.start_km),
        "totalizer_start": str(data.totalizer_start),
        "diesel_opening": str(opening),
    })

    return TripStartResponse(
        trip_id=trip_id,
        status=trip_status,
        diesel_opening=opening,
        deliveries=deliveries,
    )


@router.post("/logout", response_model=TripEndResponse)
async def end_trip(
    data: TripEnd,
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """End an ACTIVE trip and release its vehicle."""
    trip, undelivered = await TripLifecycleService.end(db, data, current_user)
    response = TripEndResponse(
        trip_id=trip.id,
        status=trip.status,
        completed_at=trip.completed_at,
        undelivered_count=undelivered,
    )

    await log_user_action(db, current_user, AuditAction.TRIP_COMPLETED, "trip", response.trip_id, {
        "trip_no": trip.trip_no,
        "end_km": str(data.end_km),
        "totalizer_end": str(data.totalizer_end),
        "undelivered": undelivered,
    })
    return response


@router.get("", response_model=List[TripListItem])
async def get_trips(
    search: Optional[str] = Query(None),
    status_filter: Optional[TripStatus] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    current_user: dict = Depends(require_role(TRIP_VIEWERS)),
    db: AsyncSession = Depends(get_db)
):
    """Trips, ACTIVE first, then ASSIGNED, then COMPLETED. Drivers see only their own."""
    driver_id = await _own_driver_id(db, current_user)
    return await list_trips(db, search, status_filter, date_from, date_to, driver_id)


@router.get("/assigned/{driver_id}", response_model=List[TripListItem])
async def get_assigned_trips(
    driver_id: int = Path(..., description="Driver ID"),
    current_user: dict = Depends(require_role(TRIP_VIEWERS)),
    db: AsyncSession = Depends(get_db)
):
    own = await _own_driver_id(db, current_user)
    if own is not None and own != driver_id:
        raise InsufficientPermissionsError("You can only view your own trips")
    return await list_trips(db, status=TripStatus.ASSIGNED, driver_id=driver_id)


@router.get("/{trip_id}", response_model=TripDetail)
async def get_trip(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(require_role(TRIP_VIEWERS)),
    db: AsyncSession = Depends(get_db)
):
    detail = await trip_detail(db, trip_id)
    if detail is None:
        raise ResourceNotFoundError("Trip", trip_id)

    own = await _own_driver_id(db, current_user)
    if own is not None and own != detail.driver_id:
        raise InsufficientPermissionsError("This trip is not assigned to you")
    return detail


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    """Delete a trip that has not started. Its seeded deliveries go with it."""
    trip = await TripLifecycleService.delete_assigned(db, trip_id)
    await log_user_action(db, current_user, AuditAction.TRIP_DELETED, "trip", trip_id, {"trip_no": trip.trip_no})


@router.get("/{trip_id}/invoice")
async def download_invoice(
    trip_id: int = Path(..., description="Trip ID"),
    current_user: dict = Depends(require_role(INVOICE_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """Invoice PDF of a COMPLETED trip, as an attachment."""
    trip = await get_or_404(db, Trip, trip_id)
    if trip.status != TripStatus.COMPLETED:
        raise InvalidTripTransitionError(trip.id, trip.status.value, "invoice", TripStatus.COMPLETED.value)

    order = await get_or_404(db, Order, trip.order_id)
    customer = await get_or_404(db, Customer, order.customer_id)
    invoice = build_invoice(trip, order, customer, await deliveries_of(db, trip.id))

    return Response(
        content=render_invoice_pdf(invoice),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{invoice.invoice_no}.pdf"'},
    )
