"""
Security guards for role-based access control.

Every endpoint declares the roles allowed to call it; the console's
role-based screen table is only a convenience on top of this.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from fuelwale.app.models.enums import UserRole
from fuelwale.app.core.dependencies import get_current_user

# Roles that may act on any trip, not just their own
TRIP_SUPERVISOR_ROLES = [UserRole.ADMIN, UserRole.EXECUTIVE]

# Roles that drive the trip lifecycle
TRIP_ROLES = [UserRole.ADMIN, UserRole.EXECUTIVE, UserRole.DRIVER]


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/depots")
        async def create_depot(current_user: dict = Depends(require_role([UserRole.ADMIN]))):
            ...

    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        user_role_str = current_user.get("role")

        if not user_role_str:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Role information missing from token"
            )

        try:
            user_role = UserRole(user_role_str)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )

        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Dependency for admin-only endpoints."""
    if current_user.get("role") != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


def is_trip_supervisor(current_user: dict) -> bool:
    return current_user.get("role") in {r.value for r in TRIP_SUPERVISOR_ROLES}

# Reference data and order intake
MASTER_EDITORS = [UserRole.ADMIN, UserRole.EXECUTIVE]

# Order taking and trip assignment
ORDER_DESK = MASTER_EDITORS + [UserRole.SALES_ASSOCIATE]

FLEET_EDITORS = [UserRole.ADMIN, UserRole.EXECUTIVE, UserRole.VEHICLE_ADMIN]
FLEET_VIEWERS = FLEET_EDITORS + [UserRole.TRANSPORTER]

PAYMENT_ROLES = [UserRole.ADMIN, UserRole.ACCOUNTS]
INVOICE_ROLES = [UserRole.ADMIN, UserRole.EXECUTIVE, UserRole.ACCOUNTS]
