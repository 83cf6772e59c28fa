"""
backend/kycgate/verification/cache.py

Last Known Good Evaluations

Keeps the most recent successfully derived evaluation per (user, role) in Redis
so a status read can still answer, marked stale, while the backend is down.
Cache failures are logged and never fail the caller.
"""

import logging
from uuid import UUID

import redis.asyncio as redis
from pydantic import ValidationError as PydanticValidationError

from kycgate.catalog.catalog import known_roles
from kycgate.core.cache import DEFAULT_CACHE_TTL, cache_key, redis_client
from kycgate.database.enums import Role
from kycgate.verification.schemas import EvaluationRead

logger = logging.getLogger(__name__)

EVALUATION_NAMESPACE = "evaluation"


def evaluation_key(user_id: UUID, role: Role) -> str:
    return cache_key(EVALUATION_NAMESPACE, user_id, role.value)


class EvaluationCache:
    """Redis-backed store of last known good evaluations."""

    def __init__(self, client: redis.Redis | None = redis_client, ttl: int = DEFAULT_CACHE_TTL) -> None:  # type: ignore[type-arg]
        self.client = client
        self.ttl = ttl

    async def get(self, user_id: UUID, role: Role) -> EvaluationRead | None:
        if self.client is None:
            return None
        key = evaluation_key(user_id, role)
        try:
            raw = await self.client.get(key)
        except (redis.RedisError, OSError) as e:
            logger.error(f"[CACHE] Read failed for {key}: {e}")
            return None
        if raw is None:
            logger.debug(f"[CACHE] Miss for {key}")
            return None
        try:
            return EvaluationRead.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"[CACHE] Discarding unreadable entry {key}: {e}")
            return None

    async def store(self, evaluation: EvaluationRead) -> None:
        if self.client is None:
            return
        key = evaluation_key(evaluation.user_id, evaluation.role)
        try:
            await self.client.set(key, evaluation.model_dump_json(), ex=self.ttl)
            logger.debug(f"[CACHE] Stored {key}")
        except (redis.RedisError, OSError) as e:
            logger.error(f"[CACHE] Write failed for {key}: {e}")

    async def invalidate(self, user_id: UUID) -> None:
        """Drop every cached evaluation of `user_id`."""
        if self.client is None:
            return
        keys = [evaluation_key(user_id, role) for role in known_roles()]
        try:
            await self.client.delete(*keys)
            logger.debug(f"[CACHE] Invalidated keys: {keys}")
        except (redis.RedisError, OSError) as e:
            logger.error(f"[CACHE] Invalidation failed for {keys}: {e}")


# ---------------------------------------------------
# Dependency
# ---------------------------------------------------
def get_evaluation_cache() -> EvaluationCache:
    """FastAPI dependency providing the shared evaluation cache."""
    return EvaluationCache()
