"""
User management endpoints (admin only).
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from fuelwale.app.db.session import get_db
from fuelwale.app.models.user import User
from fuelwale.app.schemas.auth import UserResponse
from fuelwale.app.schemas.user import UserCreate, UserUpdate
from fuelwale.app.core.exceptions import ConflictError, BusinessRuleError
from fuelwale.app.core.guards import require_admin
from fuelwale.app.core.security import get_password_hash
from fuelwale.app.core.token_revocation import revoke_all_user_tokens, clear_user_token_revocation
from fuelwale.app.services.audit import log_user_action, AuditAction
from fuelwale.app.services.lookups import get_or_404

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    search: Optional[str] = Query(None),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    query = select(User).order_by(User.username)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(User.username.ilike(pattern), User.email.ilike(pattern), User.full_name.ilike(pattern)))
    result = await db.execute(query)
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
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
        full_name=data.full_name,
        hashed_password=get_password_hash(data.password),
        role=data.role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    await log_user_action(db, current_user, AuditAction.USER_CREATED, "user", user.id,
                          {"username": user.username, "role": user.role.value})
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return UserResponse.model_validate(await get_or_404(db, User, user_id))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Update profile, role or active flag.

    Deactivating a user revokes every token they hold; reactivating
    clears that revocation.
    """
    user = await get_or_404(db, User, user_id)
    changes = data.model_dump(exclude_unset=True)

    if user.id == current_user["user_id"] and changes.get("is_active") is False:
        raise BusinessRuleError("You cannot deactivate your own account")

    old_role = user.role
    was_active = user.is_active

    password = changes.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)
    for name, value in changes.items():
        setattr(user, name, value)

    await db.commit()
    await db.refresh(user)

    if was_active and not user.is_active:
        await revoke_all_user_tokens(user.id)
        await log_user_action(db, current_user, AuditAction.USER_DEACTIVATED, "user", user.id)
    elif not was_active and user.is_active:
        await clear_user_token_revocation(user.id)

    if old_role != user.role:
        await log_user_action(db, current_user, AuditAction.ROLE_CHANGED, "user", user.id,
                              {"old_role": old_role.value, "new_role": user.role.value})
    else:
        await log_user_action(db, current_user, AuditAction.USER_UPDATED, "user", user.id)

    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await get_or_404(db, User, user_id)
    if user.id == current_user["user_id"]:
        raise BusinessRuleError("You cannot delete your own account")

    username = user.username
    await db.delete(user)
    await db.commit()
    await revoke_all_user_tokens(user_id)

    await log_user_action(db, current_user, AuditAction.USER_DELETED, "user", user_id, {"username": username})
