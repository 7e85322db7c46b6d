"""
Loading source / station master endpoints.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fuelwale.app.db.session import get_db
from fuelwale.app.models.loading_station import LoadingStation
from fuelwale.app.models.route import Route
from fuelwale.app.schemas.loading import LoadingStationCreate, LoadingStationUpdate, LoadingStationResponse
from fuelwale.app.core.dependencies import get_current_user
from fuelwale.app.core.guards import require_role, MASTER_EDITORS
from fuelwale.app.services.lookups import get_or_404, apply_updates

router = APIRouter(prefix="/loading-stations", tags=["Loading Stations"])


@router.get("", response_model=List[LoadingStationResponse])
async def list_stations(
    search: Optional[str] = Query(None),
    route_id: Optional[int] = Query(None, alias="routeId"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(LoadingStation).order_by(LoadingStation.name)
    if search:
        query = query.where(LoadingStation.name.ilike(f"%{search.strip()}%"))
    if route_id:
        query = query.where(LoadingStation.route_id == route_id)
    result = await db.execute(query)
    return [LoadingStationResponse.model_validate(s) for s in result.scalars().all()]


@router.post("", response_model=LoadingStationResponse, status_code=status.HTTP_201_CREATED)
async def create_station(
    data: LoadingStationCreate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    await get_or_404(db, Route, data.route_id)
    station = LoadingStation(**data.model_dump())
    db.add(station)
    await db.commit()
    await db.refresh(station)
    return LoadingStationResponse.model_validate(station)


@router.get("/{station_id}", response_model=LoadingStationResponse)
async def get_station(
    station_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return LoadingStationResponse.model_validate(await get_or_404(db, LoadingStation, station_id, "Loading station"))


@router.put("/{station_id}", response_model=LoadingStationResponse)
async def update_station(
    station_id: int,
    data: LoadingStationUpdate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    station = await get_or_404(db, LoadingStation, station_id, "Loading station")
    changes = data.model_dump(exclude_unset=True)
    if changes.get("route_id"):
        await get_or_404(db, Route, changes["route_id"])
    apply_updates(station, changes)
    await db.commit()
    await db.refresh(station)
    return LoadingStationResponse.model_validate(station)


@router.delete("/{station_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_station(
    station_id: int,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    station = await get_or_404(db, LoadingStation, station_id, "Loading station")
    await db.delete(station)
    await db.commit()
