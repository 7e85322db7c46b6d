"""
Sales associate endpoints (admin only).

A sales associate is a user with role "s" and a home depot. They take
orders and assign trips, so this is a narrower view of the user master.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from fuelwale.app.db.session import get_db
from fuelwale.app.models.depot import Depot
from fuelwale.app.models.enums import UserRole, RecordStatus
from fuelwale.app.models.user import User
from fuelwale.app.schemas.user import SalesAssociateCreate, SalesAssociateUpdate, SalesAssociateResponse
from fuelwale.app.core.exceptions import ConflictError, BusinessRuleError, ResourceNotFoundError
from fuelwale.app.core.guards import require_admin
from fuelwale.app.core.security import get_password_hash
from fuelwale.app.core.token_revocation import revoke_all_user_tokens, clear_user_token_revocation
from fuelwale.app.services.audit import log_user_action, AuditAction
from fuelwale.app.services.lookups import get_or_404

router = APIRouter(prefix="/sales-associates", tags=["Sales Associates"])


async def _active_depot(db: AsyncSession, depot_id: int) -> Depot:
    depot = await get_or_404(db, Depot, depot_id)
    if depot.status != RecordStatus.ACTIVE:
        raise BusinessRuleError(f"Depot {depot.name} is not active")
    return depot


async def _get_associate(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None or user.role != UserRole.SALES_ASSOCIATE:
        raise ResourceNotFoundError("Sales associate", user_id)
    return user


def _response(user: User, depot_name: Optional[str]) -> SalesAssociateResponse:
    return SalesAssociateResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        name=user.full_name,
        depot_id=user.depot_id,
        depot_name=depot_name,
        is_active=user.is_active,
    )


@router.get("", response_model=List[SalesAssociateResponse])
async def list_sales_associates(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(User, Depot.name)
        .outerjoin(Depot, Depot.id == User.depot_id)
        .where(User.role == UserRole.SALES_ASSOCIATE)
        .order_by(User.full_name, User.username)
    )
    return [_response(user, depot_name) for user, depot_name in result.all()]


@router.post("", response_model=SalesAssociateResponse, status_code=status.HTTP_201_CREATED)
async def create_sales_associate(
    data: SalesAssociateCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    depot = await _active_depot(db, data.depot_id)

    result = await db.execute(
        select(User).where(or_(User.username == data.username, User.email == data.email))
    )
    existing = result.scalar_one_or_none()
    if existing:
        field = "Username" if existing.username == data.username else "Email"
        raise ConflictError(f"{field} already registered")

    user = User(
        email=data.email,
        username=data.username,
        full_name=data.name.strip(),
        hashed_password=get_password_hash(data.password),
        role=UserRole.SALES_ASSOCIATE,
        depot_id=depot.id,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    await log_user_action(db, current_user, AuditAction.USER_CREATED, "user", user.id,
                          {"username": user.username, "role": user.role.value, "depot_id": depot.id})
    return _response(user, depot.name)


@router.put("/{user_id}", response_model=SalesAssociateResponse)
async def update_sales_associate(
    user_id: int,
    data: SalesAssociateUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Change name, depot or password; a blank password keeps the old one."""
    user = await _get_associate(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("depot_id") is not None:
        await _active_depot(db, changes["depot_id"])
        user.depot_id = changes["depot_id"]
    if changes.get("name"):
        user.full_name = changes["name"].strip()
    if changes.get("password"):
        user.hashed_password = get_password_hash(changes["password"])

    was_active = user.is_active
    if changes.get("is_active") is not None:
        user.is_active = changes["is_active"]

    await db.commit()
    await db.refresh(user)

    if was_active and not user.is_active:
        await revoke_all_user_tokens(user.id)
        await log_user_action(db, current_user, AuditAction.USER_DEACTIVATED, "user", user.id)
    else:
        if not was_active and user.is_active:
            await clear_user_token_revocation(user.id)
        await log_user_action(db, current_user, AuditAction.USER_UPDATED, "user", user.id)

    depot = await db.get(Depot, user.depot_id) if user.depot_id else None
    return _response(user, depot.name if depot else None)
