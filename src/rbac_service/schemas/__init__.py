"""Request and response schemas."""

from rbac_service.schemas.auth import ClaimsResponse, LoginRequest, TokenResponse
from rbac_service.schemas.base import APIRequest, APIResponse
from rbac_service.schemas.health import HealthResponse, ReadinessResponse
from rbac_service.schemas.permission import (
    PermissionCreate,
    PermissionResponse,
    PermissionUpdate,
)
from rbac_service.schemas.role import RoleCreate, RoleResponse, RoleUpdate
from rbac_service.schemas.user import UserCreate, UserResponse, UserUpdate


__all__ = [
    "APIRequest",
    "APIResponse",
    "ClaimsResponse",
    "HealthResponse",
    "LoginRequest",
    "PermissionCreate",
    "PermissionResponse",
    "PermissionUpdate",
    "ReadinessResponse",
    "RoleCreate",
    "RoleResponse",
    "RoleUpdate",
    "TokenResponse",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
