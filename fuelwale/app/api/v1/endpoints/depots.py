"""
Depot master endpoints.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from fuelwale.app.db.session import get_db
from fuelwale.app.models.depot import Depot
from fuelwale.app.schemas.depot import DepotCreate, DepotUpdate, DepotResponse
from fuelwale.app.core.dependencies import get_current_user
from fuelwale.app.core.exceptions import ConflictError
from fuelwale.app.core.guards import require_role, MASTER_EDITORS
from fuelwale.app.domain.trips.trip_numbers import depot_code
from fuelwale.app.services.lookups import get_or_404, apply_updates

router = APIRouter(prefix="/depots", tags=["Depots"])


@router.get("", response_model=List[DepotResponse])
async def list_depots(
    search: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(Depot).order_by(Depot.depot_cd)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Depot.name.ilike(pattern), Depot.depot_cd.ilike(pattern), Depot.city.ilike(pattern)))
    result = await db.execute(query)
    return [DepotResponse.model_validate(d) for d in result.scalars().all()]


@router.post("", response_model=DepotResponse, status_code=status.HTTP_201_CREATED)
async def create_depot(
    data: DepotCreate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    """Create a depot. The code is stored zero-padded to three digits."""
    code = depot_code(data.depot_cd)
    result = await db.execute(select(Depot.id).where(Depot.depot_cd == code))
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"Depot code {code} already exists")

    depot = Depot(**data.model_dump(exclude={"depot_cd"}), depot_cd=code)
    db.add(depot)
    await db.commit()
    await db.refresh(depot)
    return DepotResponse.model_validate(depot)


@router.get("/{depot_id}", response_model=DepotResponse)
async def get_depot(
    depot_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return DepotResponse.model_validate(await get_or_404(db, Depot, depot_id))


@router.put("/{depot_id}", response_model=DepotResponse)
async def update_depot(
    depot_id: int,
    data: DepotUpdate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    depot = await get_or_404(db, Depot, depot_id)
    apply_updates(depot, data.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(depot)
    return DepotResponse.model_validate(depot)


@router.delete("/{depot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_depot(
    depot_id: int,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    depot = await get_or_404(db, Depot, depot_id)
    await db.delete(depot)
    await db.commit()
