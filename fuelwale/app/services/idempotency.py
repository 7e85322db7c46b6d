"""
Idempotency records for mutating requests.

A client may send an `Idempotency-Key` header with trip assignment and
delivery confirmation. The first successful response is stored in Redis
and replayed for any repeat of the same key by the same user.
"""

import json
import logging
from typing import Any, Optional

import fuelwale.app.core.redis_client as redis_module
from fuelwale.app.core.config import settings

logger = logging.getLogger("fuelwale.idempotency")

IDEMPOTENCY_PREFIX = "idem:"


class IdempotencyService:

    @staticmethod
    def make_key(scope: str, user_id: int, key: str) -> str:
        return f"{IDEMPOTENCY_PREFIX}{scope}:{user_id}:{key}"

    @staticmethod
    async def get(scope: str, user_id: int, key: Optional[str]) -> Optional[Any]:
        """Return the stored response for this key, or None."""
        if not key:
            return None
        raw = await redis_module.redis_client.get(IdempotencyService.make_key(scope, user_id, key))
        if raw is None:
            return None
        logger.info("Replaying %s response for idempotency key %s", scope, key)
        return json.loads(raw)

    @staticmethod
    async def store(scope: str, user_id: int, key: Optional[str], response: Any) -> None:
        if not key:
            return
        await redis_module.redis_client.set(
            IdempotencyService.make_key(scope, user_id, key),
            json.dumps(response),
            ex=settings.idempotency_ttl_seconds,
        )
