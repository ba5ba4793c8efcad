"""Shared test fixtures for the RBAC service tests.

Provides settings for an isolated in-process setup (memory cache, memory
database, metrics off), a fully wired service container, and helpers to
create users holding the default roles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from rbac_service.core.config import Settings
from rbac_service.core.config.settings import (
    AuthSettings,
    CacheSettings,
    DatabaseSettings,
    LoggingSettings,
    MetricsSettings,
    ObservabilitySettings,
    PasswordSettings,
    SeedSettings,
)
from rbac_service.core.container import build_container
from rbac_service.schemas.user import UserCreate


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from rbac_service.core.container import ServiceContainer
    from rbac_service.database.models import UserData


TEST_JWT_SECRET = "test-jwt-secret-key-minimum-32-characters-long"
TEST_PASSWORD = "Str0ng!Passw0rd"


def make_settings(**overrides: object) -> Settings:
    """Test settings; keyword arguments replace whole sections or secrets."""
    values: dict[str, object] = {
        "APP_ENV": "test",
        "JWT_SECRET_KEY": TEST_JWT_SECRET,
        "auth": AuthSettings(password=PasswordSettings(bcrypt_rounds=4)),
        "cache": CacheSettings(backend="memory"),
        "database": DatabaseSettings(backend="memory"),
        "seed": SeedSettings(enabled=False),
        "logging": LoggingSettings(level="WARNING", format="text"),
        "observability": ObservabilitySettings(metrics=MetricsSettings(enabled=False)),
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build test settings with section overrides."""
    return make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def container(settings: Settings) -> ServiceContainer:
    """Services over a fresh in-memory database and cache."""
    return build_container(settings)


@pytest.fixture
async def seeded_container(container: ServiceContainer) -> ServiceContainer:
    """Container with the default permissions and roles in place."""
    await container.permissions.seed_defaults()
    await container.seeder.seed_roles()
    return container


@pytest.fixture
def make_user(
    seeded_container: ServiceContainer,
) -> Callable[..., Awaitable[UserData]]:
    """Factory creating a user and assigning default roles by name."""

    async def _make_user(
        email: str,
        *roles: str,
        password: str = TEST_PASSWORD,
        is_active: bool = True,
    ) -> UserData:
        services = seeded_container
        user = await services.users.create(
            UserCreate(
                email=email,
                password=password,
                first_name="Test",
                last_name="User",
                is_active=is_active,
            )
        )
        for role_name in roles:
            role = await services.roles.find_by_name(role_name)
            assert role is not None, f"unknown role {role_name}"
            user = await services.users.assign_role(user.id, role.id)
        return user

    return _make_user
