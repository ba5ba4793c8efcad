"""Unit tests for application startup and shutdown.

Tests cover:
- In-memory startup wires services onto app.state
- Redis failure falls back to the in-memory cache
- PostgreSQL startup creates the schema
- Seeding on startup
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI

from rbac_service.cache.backends import MemoryCacheBackend, RedisCacheBackend
from rbac_service.core.config.settings import CacheSettings, DatabaseSettings, SeedSettings
from rbac_service.core.events.lifespan import lifespan


if TYPE_CHECKING:
    from collections.abc import Callable

    from rbac_service.core.config import Settings


pytestmark = pytest.mark.unit

LIFESPAN = "rbac_service.core.events.lifespan"


def _app(settings: Settings) -> FastAPI:
    app = FastAPI()
    app.state.settings = settings
    return app


class TestLifespan:
    """Tests for the lifespan context manager."""

    async def test_memory_startup_and_shutdown(self, settings: Settings) -> None:
        """Should expose services while running and drop them on shutdown."""
        app = _app(settings)

        async with lifespan(app):
            services = app.state.services
            assert isinstance(services.cache.backend, MemoryCacheBackend)
            assert await services.roles.find_all() == []

        assert app.state.services is None

    async def test_redis_backend(self, settings_factory: Callable[..., Settings]) -> None:
        """Should use Redis when it is reachable."""
        app = _app(settings_factory(cache=CacheSettings(backend="redis", namespace="t")))
        client = MagicMock()

        with (
            patch(f"{LIFESPAN}.init_redis", AsyncMock(return_value=client)),
            patch(f"{LIFESPAN}.close_redis", AsyncMock()) as close_redis,
        ):
            async with lifespan(app):
                backend = app.state.services.cache.backend
                assert isinstance(backend, RedisCacheBackend)
                assert backend.namespace == "t"

        close_redis.assert_awaited_once()

    async def test_redis_failure_falls_back_to_memory(
        self, settings_factory: Callable[..., Settings]
    ) -> None:
        """Should keep starting with an in-memory cache when Redis is down."""
        app = _app(settings_factory(cache=CacheSettings(backend="redis")))

        with patch(f"{LIFESPAN}.init_redis", AsyncMock(side_effect=ConnectionError("down"))):
            async with lifespan(app):
                assert isinstance(app.state.services.cache.backend, MemoryCacheBackend)

    async def test_postgres_startup(self, settings_factory: Callable[..., Settings]) -> None:
        """Should open the pool and ensure the schema."""
        app = _app(settings_factory(database=DatabaseSettings(backend="postgres")))
        pool = MagicMock()

        with (
            patch(f"{LIFESPAN}.init_database_pool", AsyncMock(return_value=pool)) as init_pool,
            patch(f"{LIFESPAN}.ensure_schema", AsyncMock()) as ensure_schema,
            patch(f"{LIFESPAN}.close_database_pool", AsyncMock()) as close_pool,
        ):
            async with lifespan(app):
                assert app.state.services is not None

        init_pool.assert_awaited_once()
        ensure_schema.assert_awaited_once_with(pool)
        close_pool.assert_awaited_once()

    async def test_database_failure_aborts_startup(
        self, settings_factory: Callable[..., Settings]
    ) -> None:
        """Should propagate a database connection failure."""
        app = _app(settings_factory(database=DatabaseSettings(backend="postgres")))

        with (
            patch(f"{LIFESPAN}.init_database_pool", AsyncMock(side_effect=OSError("refused"))),
            pytest.raises(OSError, match="refused"),
        ):
            async with lifespan(app):
                pass

    async def test_seeds_on_startup(
        self, settings_factory: Callable[..., Settings], password: str
    ) -> None:
        """Should seed defaults and the super-admin when enabled."""
        app = _app(
            settings_factory(
                seed=SeedSettings(enabled=True, super_admin_email="root@example.com"),
                SUPER_ADMIN_PASSWORD=password,
            )
        )

        async with lifespan(app):
            services = app.state.services
            admin = await services.users.find_by_email_with_roles("root@example.com")
            assert [r.name for r in admin.roles] == ["super_admin"]
            assert len(await services.roles.find_all()) == 4
