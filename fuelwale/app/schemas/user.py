"""
User management schemas (admin only).
"""

from pydantic import EmailStr, Field
from typing import Optional
from fuelwale.app.models.enums import UserRole
from fuelwale.app.schemas.base import CamelModel


class UserCreate(CamelModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = Field(None, max_length=200)
    role: UserRole = UserRole.DRIVER


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, max_length=200)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6)


class SalesAssociateCreate(CamelModel):
    """A login with the sales-associate role, tied to one depot."""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)
    depot_id: int
    password: str = Field(..., min_length=6)


class SalesAssociateUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    depot_id: Optional[int] = None
    password: Optional[str] = Field(None, min_length=6)
    is_active: Optional[bool] = None


class SalesAssociateResponse(CamelModel):
    id: int
    username: str
    email: str
    name: Optional[str] = None
    depot_id: Optional[int] = None
    depot_name: Optional[str] = None
    is_active: bool
