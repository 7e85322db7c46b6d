"""
Token revocation in Redis.

Two kinds of marker:
  blacklist:token:{jwt}          one token, set on logout
  user:tokens:{user_id}:revoked  every token of a user, set on deactivation

Markers expire with the longest possible token lifetime. Lookups fail open:
when Redis is down a token is treated as not revoked and the error is logged.
"""

import logging
from typing import Optional

from redis.exceptions import RedisError

import fuelwale.app.core.redis_client as redis_module
from fuelwale.app.core.config import settings

logger = logging.getLogger("fuelwale.auth")

TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
USER_TOKENS_PREFIX = "user:tokens:"


def _token_key(token: str) -> str:
    return f"{TOKEN_BLACKLIST_PREFIX}{token}"


def _user_key(user_id: int) -> str:
    return f"{USER_TOKENS_PREFIX}{user_id}:revoked"


async def _mark(key: str, value: str, ttl: Optional[int]) -> bool:
    try:
        await redis_module.redis_client.setex(key, ttl or settings.access_token_expire_minutes * 60, value)
        return True
    except (RedisError, OSError) as exc:
        logger.error("Could not write revocation marker %s: %s", key.split(":")[0], exc)
        return False


async def _is_marked(key: str) -> bool:
    try:
        return await redis_module.redis_client.exists(key) > 0
    except (RedisError, OSError) as exc:
        logger.error("Revocation lookup failed, allowing request: %s", exc)
        return False


async def revoke_token(token: str, user_id: int, ttl: Optional[int] = None) -> bool:
    """Blacklist one token for `ttl` seconds (its remaining lifetime)."""
    return await _mark(_token_key(token), str(user_id), ttl)


async def is_token_revoked(token: str) -> bool:
    return await _is_marked(_token_key(token))


async def revoke_all_user_tokens(user_id: int) -> bool:
    revoked = await _mark(_user_key(user_id), "1", None)
    if revoked:
        logger.info("All tokens of user %s revoked", user_id)
    return revoked


async def are_user_tokens_revoked(user_id: int) -> bool:
    return await _is_marked(_user_key(user_id))


async def clear_user_token_revocation(user_id: int) -> bool:
    """Lift the user-wide marker after reactivation."""
    try:
        await redis_module.redis_client.delete(_user_key(user_id))
        return True
    except (RedisError, OSError) as exc:
        logger.error("Could not clear token revocation for user %s: %s", user_id, exc)
        return False
