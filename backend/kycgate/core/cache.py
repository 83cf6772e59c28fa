"""
backend/kycgate/core/cache.py

Async Redis Client and Cache Key Helpers

Initializes the shared asynchronous Redis client used for caching:
- Stores last known good verification evaluations
- Provides namespaced key builders
Redis is optional: when disabled or unreachable, callers skip caching.
"""

import logging
from typing import Any

import redis.asyncio as redis

from kycgate.core.config import settings

# ---------------------------------------------------
# Logger Configuration
# ---------------------------------------------------
logger = logging.getLogger(__name__)

# ---------------------------------------------------
# Redis Client Initialization
# ---------------------------------------------------
redis_client: redis.Redis | None = None  # type: ignore[type-arg]

if settings.REDIS_ENABLED:
    try:
        redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            decode_responses=True,
        )
        logger.info(
            f"[REDIS ASYNC] Initialized async Redis client for {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
        )
    except redis.RedisError as e:
        logger.error(f"[REDIS ASYNC] Initialization failed: {e}")
        redis_client = None
else:
    logger.info("[REDIS ASYNC] Redis disabled by configuration, caching off.")

CACHE_PREFIX = settings.CACHE_PREFIX
DEFAULT_CACHE_TTL = settings.DEFAULT_CACHE_TTL


# ---------------------------------------------------
# Key Helpers
# ---------------------------------------------------
def cache_key(namespace: str, *identifiers: Any) -> str:
    """Generate a namespaced cache key, e.g. `cache:kycgate:evaluation:<user>:<role>`."""
    suffix = ":".join(str(i) for i in identifiers)
    return f"{CACHE_PREFIX}{namespace}:{suffix}"
