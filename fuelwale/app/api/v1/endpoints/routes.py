"""
Route master endpoints.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fuelwale.app.db.session import get_db
from fuelwale.app.models.depot import Depot
from fuelwale.app.models.route import Route
from fuelwale.app.schemas.route import RouteCreate, RouteUpdate, RouteResponse
from fuelwale.app.core.dependencies import get_current_user
from fuelwale.app.core.exceptions import ConflictError
from fuelwale.app.core.guards import require_role, MASTER_EDITORS
from fuelwale.app.services.lookups import get_or_404, apply_updates

router = APIRouter(prefix="/routes", tags=["Routes"])


async def _ensure_unique_name(db: AsyncSession, depot_id: int, name: str, exclude_id: Optional[int] = None):
    query = select(Route.id).where(Route.depot_id == depot_id, Route.name == name)
    if exclude_id:
        query = query.where(Route.id != exclude_id)
    result = await db.execute(query)
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"Route '{name}' already exists for this depot")


@router.get("", response_model=List[RouteResponse])
async def list_routes(
    search: Optional[str] = Query(None),
    depot_id: Optional[int] = Query(None, alias="depotId"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(Route).order_by(Route.name)
    if search:
        query = query.where(Route.name.ilike(f"%{search.strip()}%"))
    if depot_id:
        query = query.where(Route.depot_id == depot_id)
    result = await db.execute(query)
    return [RouteResponse.model_validate(r) for r in result.scalars().all()]


@router.post("", response_model=RouteResponse, status_code=status.HTTP_201_CREATED)
async def create_route(
    data: RouteCreate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    await get_or_404(db, Depot, data.depot_id)
    name = data.name.strip()
    await _ensure_unique_name(db, data.depot_id, name)

    route = Route(**data.model_dump(exclude={"name"}), name=name)
    db.add(route)
    await db.commit()
    await db.refresh(route)
    return RouteResponse.model_validate(route)


@router.get("/{route_id}", response_model=RouteResponse)
async def get_route(
    route_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return RouteResponse.model_validate(await get_or_404(db, Route, route_id))


@router.put("/{route_id}", response_model=RouteResponse)
async def update_route(
    route_id: int,
    data: RouteUpdate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    route = await get_or_404(db, Route, route_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("name"):
        changes["name"] = changes["name"].strip()
        await _ensure_unique_name(db, route.depot_id, changes["name"], exclude_id=route.id)
    apply_updates(route, changes)
    await db.commit()
    await db.refresh(route)
    return RouteResponse.model_validate(route)


@router.delete("/{route_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_route(
    route_id: int,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    route = await get_or_404(db, Route, route_id)
    await db.delete(route)
    await db.commit()
