"""PostgreSQL connection pool management (asyncpg)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncpg

from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool

    from rbac_service.core.config import Settings


logger = get_logger(__name__)

_pool: Pool | None = None


async def init_database_pool(settings: Settings) -> Pool:
    """Create the connection pool and verify it with ``SELECT 1``.

    Should be called during application startup (lifespan).
    """
    global _pool  # noqa: PLW0603

    logger.info(
        "Initializing database connection pool",
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
    )

    pool = await asyncpg.create_pool(
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
        user=settings.database.user,
        password=settings.DATABASE_PASSWORD or None,
        min_size=settings.database.min_pool_size,
        max_size=settings.database.max_pool_size,
        command_timeout=settings.database.command_timeout,
        ssl=True if settings.database.ssl else None,
    )

    try:
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except asyncpg.PostgresError:
        logger.exception("Failed to connect to database")
        await pool.close()
        raise

    _pool = pool
    logger.info("Database connection established")
    return pool


async def close_database_pool() -> None:
    """Close the connection pool if one is open."""
    global _pool  # noqa: PLW0603

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Database connection pool closed")


def get_database_pool() -> Pool:
    """Return the pool.

    Raises:
        RuntimeError: If the pool is not initialized.
    """
    if _pool is None:
        msg = "Database pool not initialized. Call init_database_pool() first."
        raise RuntimeError(msg)
    return _pool


async def check_database_health() -> str:
    """Return "healthy", "unhealthy" or "not_initialized"."""
    if _pool is None:
        return "not_initialized"
    try:
        async with _pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except (asyncpg.PostgresError, OSError):
        return "unhealthy"
    return "healthy"
