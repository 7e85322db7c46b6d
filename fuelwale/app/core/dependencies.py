"""
Request authentication.

`get_current_user` resolves the bearer token to a claims dict that the
guards and services consume: sub, user_id, role, plus the raw token under
"token" so logout can blacklist it.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from fuelwale.app.core.jwt import decode_access_token
from fuelwale.app.core.token_revocation import is_token_revoked, are_user_tokens_revoked
from fuelwale.app.db.session import get_db
from fuelwale.app.models.user import User

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    Checks, in order: signature and expiry, logout blacklist, user-wide
    revocation, then that the user still exists and is active.

    The role is re-read from the database, so a role change applies to
    tokens issued before it.
    """
    token = credentials.credentials

    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    if await is_token_revoked(token):
        raise _unauthorized("Token has been revoked")

    user_id = payload["user_id"]
    if await are_user_tokens_revoked(user_id):
        raise _unauthorized("User access has been revoked")

    user = await db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")

    return {**payload, "role": user.role.value, "token": token}
