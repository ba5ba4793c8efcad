"""Application lifespan event handlers.

This module defines the lifespan context manager that handles:
- Application startup: logging, cache backend, database, service wiring, seeding
- Application shutdown: closing the Redis and PostgreSQL pools
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from rbac_service.cache.backends import MemoryCacheBackend, RedisCacheBackend
from rbac_service.cache.redis import close_redis, init_redis
from rbac_service.core.config import CacheBackend, DatabaseBackend, Settings, get_settings
from rbac_service.core.container import (
    Repositories,
    build_container,
    memory_repositories,
    postgres_repositories,
)
from rbac_service.database.connection import close_database_pool, init_database_pool
from rbac_service.database.schema import ensure_schema
from rbac_service.observability.logging import get_logger, setup_logging


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

    from rbac_service.cache import backends


logger = get_logger(__name__)


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize all application services during startup.

    Args:
        app: The FastAPI application instance.
        settings: Application settings.
    """
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        cache_backend=settings.cache.backend,
        database_backend=settings.database.backend,
    )

    cache_backend = await _init_cache(settings)

    # Database is critical: startup fails without it.
    repositories = await _init_database(settings)

    services = build_container(
        settings, cache_backend=cache_backend, repositories=repositories
    )
    app.state.services = services

    if settings.seed.enabled:
        await services.seeder.run()

    logger.info("Application startup complete")


async def _init_cache(settings: Settings) -> backends.CacheBackend:
    """Return the configured cache backend, falling back to memory if Redis is down."""
    if settings.cache.backend == CacheBackend.REDIS:
        try:
            client = await init_redis(settings)
            return RedisCacheBackend(client, namespace=settings.cache.namespace)
        except Exception:
            logger.exception("Failed to initialize Redis - falling back to in-memory cache")
    return MemoryCacheBackend(max_items=settings.cache.max_items)


async def _init_database(settings: Settings) -> Repositories:
    if settings.database.backend == DatabaseBackend.MEMORY:
        logger.warning("Using in-memory database - data is lost on restart")
        return memory_repositories()

    pool = await init_database_pool(settings)
    await ensure_schema(pool)
    return postgres_repositories(pool)


async def _shutdown(app: FastAPI) -> None:
    """Shutdown all application services.

    Args:
        app: The FastAPI application instance.
    """
    logger.info("Shutting down application")
    app.state.services = None

    await close_database_pool()
    await close_redis()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Settings are taken from ``app.state.settings`` when the factory put them
    there, otherwise from ``get_settings()``.

    Args:
        app: The FastAPI application instance.

    Yields:
        None - control returns to the application to handle requests.
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    await _startup(app, settings)
    try:
        yield
    finally:
        await _shutdown(app)
