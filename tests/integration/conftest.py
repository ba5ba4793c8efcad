"""Integration test fixtures.

Provides the assembled application (middleware, exception handlers,
routers) over a seeded in-memory container, an HTTP client bound to it and
helpers that issue tokens for seeded users.

ASGITransport does not run the lifespan, so the container is attached to
``app.state`` directly.
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from prometheus_client import REGISTRY

from rbac_service.factory import create_app


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable, Generator

    from fastapi import FastAPI

    from rbac_service.core.config import Settings
    from rbac_service.core.container import ServiceContainer


pytestmark = pytest.mark.integration

API = "/api/v1"


@pytest.fixture
def app(settings: Settings, seeded_container: ServiceContainer) -> FastAPI:
    """Create the FastAPI app with seeded services attached."""
    app = create_app(settings)
    app.state.services = seeded_container
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def auth_headers(
    seeded_container: ServiceContainer,
) -> Callable[[str], Awaitable[dict[str, str]]]:
    """Issue a token for an existing user and return the Authorization header."""

    async def _headers(email: str) -> dict[str, str]:
        issued = await seeded_container.issuer.issue(email)
        return {"Authorization": f"Bearer {issued.access_token}"}

    return _headers


@pytest.fixture
async def admin_headers(make_user, auth_headers) -> dict[str, str]:
    """Headers for a user holding the admin role."""
    await make_user("admin@example.com", "admin")
    return await auth_headers("admin@example.com")


@pytest.fixture
async def super_admin_headers(make_user, auth_headers) -> dict[str, str]:
    """Headers for a user holding the super_admin role."""
    await make_user("root@example.com", "super_admin")
    return await auth_headers("root@example.com")


@pytest.fixture
async def user_headers(make_user, auth_headers) -> dict[str, str]:
    """Headers for a user holding only the user role."""
    await make_user("user@example.com", "user")
    return await auth_headers("user@example.com")


@pytest.fixture
def reset_metrics_registry() -> Generator[None]:
    """Unregister Prometheus collectors created during the test."""
    before = set(REGISTRY._names_to_collectors.keys())
    yield
    for name in set(REGISTRY._names_to_collectors.keys()) - before:
        collector = REGISTRY._names_to_collectors.get(name)
        if collector is not None:
            with contextlib.suppress(KeyError):
                REGISTRY.unregister(collector)
