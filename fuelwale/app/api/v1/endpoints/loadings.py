"""
Loading record endpoints.

Stations per route, optional one-time loading codes and the loading
records themselves.
"""

from typing import List
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fuelwale.app.db.session import get_db
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.models.loading import Loading
from fuelwale.app.models.loading_station import LoadingStation
from fuelwale.app.models.trip import Trip
from fuelwale.app.schemas.loading import (
    StationOption, LoadingCreate, LoadingResponse,
    LoadingCodeRequest, LoadingCodeIssued, LoadingCodeVerify, LoadingCodeVerified
)
from fuelwale.app.core.config import settings
from fuelwale.app.core.guards import require_role, TRIP_ROLES
from fuelwale.app.domain.trips.lifecycle_service import TripLifecycleService
from fuelwale.app.services.audit import log_user_action, AuditAction
from fuelwale.app.services.lookups import get_or_404

router = APIRouter(prefix="/loadings", tags=["Loadings"])


@router.get("/stations/{route_id}", response_model=List[StationOption])
async def stations_for_route(
    route_id: int = Path(..., description="Route ID"),
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(LoadingStation)
        .where(LoadingStation.route_id == route_id, LoadingStation.status == RecordStatus.ACTIVE)
        .order_by(LoadingStation.name)
    )
    return [StationOption.model_validate(s) for s in result.scalars().all()]


@router.post("/generate-code", response_model=LoadingCodeIssued)
async def generate_code(
    data: LoadingCodeRequest,
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """Issue a six digit loading code for the trip. The code itself is never returned."""
    trip = await TripLifecycleService.issue_loading_code(db, data.trip_id, current_user)
    await log_user_action(db, current_user, AuditAction.LOADING_CODE_ISSUED, "trip", trip.id)
    return LoadingCodeIssued(trip_id=trip.id, expires_in_seconds=settings.loading_code_ttl_seconds)


@router.post("/verify-code", response_model=LoadingCodeVerified)
async def verify_code(
    data: LoadingCodeVerify,
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    trip = await get_or_404(db, Trip, data.trip_id)
    await TripLifecycleService.ensure_trip_access(db, trip, current_user)
    verified = await TripLifecycleService.check_loading_code(trip.id, data.code)
    return LoadingCodeVerified(trip_id=trip.id, verified=verified)


@router.post("", response_model=LoadingResponse, status_code=status.HTTP_201_CREATED)
async def record_loading(
    data: LoadingCreate,
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    loading = await TripLifecycleService.record_loading(db, data, current_user)
    response = LoadingResponse.model_validate(loading)

    await log_user_action(db, current_user, AuditAction.LOADING_RECORDED, "trip", response.trip_id, {
        "loading_id": response.id,
        "station_id": response.station_id,
        "product": response.product,
        "qty": str(response.qty),
    })
    return response


@router.get("", response_model=List[LoadingResponse])
async def list_loadings(
    trip_id: int = Query(..., alias="tripId"),
    current_user: dict = Depends(require_role(TRIP_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    trip = await get_or_404(db, Trip, trip_id)
    await TripLifecycleService.ensure_trip_access(db, trip, current_user)
    result = await db.execute(
        select(Loading).where(Loading.trip_id == trip.id).order_by(Loading.loaded_at, Loading.id)
    )
    return [LoadingResponse.model_validate(row) for row in result.scalars().all()]
