"""Redis client and connection pool management for the cache backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from redis.asyncio import Redis

    from rbac_service.core.config import Settings


logger = get_logger(__name__)


class _RedisState:
    pool: ConnectionPool[Any] | None = None
    client: Redis[Any] | None = None


async def init_redis(settings: Settings) -> Redis[Any]:
    """Create the cache connection pool and verify it with PING.

    Should be called during application startup (lifespan).

    Raises:
        redis.ConnectionError: If Redis cannot be reached.
    """
    logger.info(
        "Initializing Redis connection",
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.cache_db,
    )

    _RedisState.pool = ConnectionPool.from_url(
        settings.redis_cache_url,
        max_connections=settings.redis.max_connections,
        decode_responses=True,
    )
    client = redis.Redis(connection_pool=_RedisState.pool)
    _RedisState.client = client

    try:
        await client.ping()
    except redis.ConnectionError:
        logger.exception("Failed to connect to Redis")
        await close_redis()
        raise

    logger.info("Redis connection established")
    return client


async def close_redis() -> None:
    """Close the client and disconnect the pool."""
    if _RedisState.client is not None:
        await _RedisState.client.aclose()
        _RedisState.client = None

    if _RedisState.pool is not None:
        await _RedisState.pool.disconnect()
        _RedisState.pool = None

