"""
Redis client initialization and connection management.

Redis backs token revocation, idempotency records and loading codes.
"""

import redis.asyncio as redis
from fuelwale.app.core.config import settings


# Create async Redis client
redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


def get_redis():
    """
    Return the active Redis client.

    Looked up on each call so tests can swap the module-level client.
    """
    return redis_client


async def ping_redis() -> bool:
    """
    Test Redis connection.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        return await get_redis().ping()
    except Exception:
        return False
