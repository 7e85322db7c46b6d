"""
Authentication Pydantic schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional
from fuelwale.app.models.enums import UserRole
from fuelwale.app.schemas.base import CamelModel


class UserLogin(CamelModel):
    """
    Schema for user login.

    Used by POST /auth/login. Accepts either username or email.
    """
    username: str = Field(..., description="Username or email")
    password: str = Field(..., description="Password")


class TokenResponse(CamelModel):
    """
    Returned by a successful login.

    `user_id` is the login name and `user_type` the role code, the profile
    the console keeps in its session.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    id: int = Field(..., description="Database ID of the user")
    user_id: str = Field(..., description="Login name")
    user_type: UserRole = Field(..., description="Role code")


class UserResponse(CamelModel):
    """Used by GET /auth/me and the user manager."""
    id: int
    email: str
    username: str
    full_name: Optional[str] = None
    role: UserRole
    is_active: bool
    depot_id: Optional[int] = None
    created_at: datetime
