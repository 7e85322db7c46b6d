"""
Access tokens.

A token carries the login name (`sub`), the numeric user id and the role
code ("a", "e", "d", ...). Tokens missing any of these are treated as
invalid, same as a bad signature or an expired one.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from fuelwale.app.core.config import settings

REQUIRED_CLAIMS = ("sub", "user_id", "role")


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign `data` with an `exp` of now + `expires_delta` (default from settings)."""
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    now = datetime.now(timezone.utc)
    claims = {**data, "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def issue_token(user, expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token(
        {"sub": user.username, "user_id": user.id, "role": user.role.value},
        expires_delta,
    )


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Claims of a valid token, or None."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if any(payload.get(claim) in (None, "") for claim in REQUIRED_CLAIMS):
        return None
    return payload


def seconds_until_expiry(payload: Dict[str, Any]) -> int:
    """Remaining lifetime of a decoded token, never below 1."""
    exp = payload.get("exp")
    if exp is None:
        return settings.access_token_expire_minutes * 60
    return max(int(exp - time.time()), 1)
