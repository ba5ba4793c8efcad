"""FastAPI dependencies for service access.

Services are built during application startup and stored on
``app.state.services``.
"""

from __future__ import annotations

from fastapi import Request

from rbac_service.core.config import Settings, get_settings
from rbac_service.core.container import ServiceContainer
from rbac_service.core.exceptions import ServiceUnavailableError
from rbac_service.services.permission import PermissionService
from rbac_service.services.role import RoleService
from rbac_service.services.user import UserService


def get_services(request: Request) -> ServiceContainer:
    """Get the service container from app state.

    Raises:
        ServiceUnavailableError: 503 if startup has not completed.
    """
    services: ServiceContainer | None = getattr(request.app.state, "services", None)
    if services is None:
        raise ServiceUnavailableError("Services not initialized")
    return services


def get_user_service(request: Request) -> UserService:
    return get_services(request).users


def get_role_service(request: Request) -> RoleService:
    return get_services(request).roles


def get_permission_service(request: Request) -> PermissionService:
    return get_services(request).permissions


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with, falling back to the global settings."""
    settings: Settings | None = getattr(request.app.state, "settings", None)
    return settings or get_settings()
