"""Unit tests for service wiring."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest

from rbac_service.cache.backends import MemoryCacheBackend
from rbac_service.core.config.settings import CacheSettings, CacheTtlSettings
from rbac_service.core.container import (
    build_container,
    memory_repositories,
    resolve_jwt_secret,
)
from rbac_service.core.exceptions import ConfigurationError


if TYPE_CHECKING:
    from collections.abc import Callable

    from rbac_service.core.config import Settings


pytestmark = pytest.mark.unit


class TestResolveJwtSecret:
    """Tests for resolve_jwt_secret."""

    def test_configured_secret(self, settings: Settings) -> None:
        """Should return the configured secret."""
        assert resolve_jwt_secret(settings) == settings.JWT_SECRET_KEY

    def test_missing_in_production(self, settings_factory: Callable[..., Settings]) -> None:
        """Should refuse to start production without a secret."""
        settings = settings_factory(APP_ENV="production", JWT_SECRET_KEY="")

        with pytest.raises(ConfigurationError, match="JWT_SECRET_KEY"):
            resolve_jwt_secret(settings)

    def test_random_outside_production(self, settings_factory: Callable[..., Settings]) -> None:
        """Should generate a distinct random secret per call."""
        settings = settings_factory(APP_ENV="development", JWT_SECRET_KEY="")

        first = resolve_jwt_secret(settings)
        second = resolve_jwt_secret(settings)

        assert len(first) >= 32
        assert first != second


class TestBuildContainer:
    """Tests for build_container."""

    def test_defaults_to_memory(self, settings: Settings) -> None:
        """Should use an in-memory cache sized from settings."""
        container = build_container(settings)

        assert isinstance(container.cache.backend, MemoryCacheBackend)
        assert container.cache.default_ttl == settings.cache.ttl.medium
        assert container.settings is settings

    def test_uses_given_backend(self, settings: Settings) -> None:
        """Should wire a supplied backend and repositories."""
        backend = MemoryCacheBackend(max_items=5)

        container = build_container(
            settings, cache_backend=backend, repositories=memory_repositories()
        )

        assert container.cache.backend is backend

    def test_cascade_flag(self, settings_factory: Callable[..., Settings]) -> None:
        """Should pass the cascade flag to the invalidator."""
        settings = settings_factory(cache=CacheSettings(cascade_role_changes=True))

        assert build_container(settings).invalidator.cascade_role_changes is True

    async def test_ttl_tiers(self, settings_factory: Callable[..., Settings]) -> None:
        """Should cache permission name lookups for the very long tier."""
        settings = settings_factory(
            cache=CacheSettings(ttl=CacheTtlSettings(long=100, very_long=777))
        )
        backend = MemoryCacheBackend(max_items=100)
        container = build_container(settings, cache_backend=backend)
        await container.permissions.seed_defaults()
        backend.set = AsyncMock(wraps=backend.set)

        permission = await container.permissions.find_by_name("user:read")
        await container.permissions.find_one(permission.id)

        ttls = {call.args[0]: call.args[2] for call in backend.set.await_args_list}
        assert ttls == {"permission:name:user:read": 777, f"permission:id:{permission.id}": 100}

    async def test_issued_tokens_verify(self, seeded_container, make_user) -> None:
        """Should verify a token issued by the same container."""
        await make_user("alice@example.com", "user")

        issued = await seeded_container.issuer.issue("alice@example.com")

        claims = seeded_container.validator.verify(issued.access_token)
        assert claims.email == "alice@example.com"
        assert "user:read" in claims.permissions
