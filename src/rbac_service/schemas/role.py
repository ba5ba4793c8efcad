"""Role request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from rbac_service.schemas.base import APIRequest, APIResponse
from rbac_service.schemas.permission import PermissionResponse


class RoleCreate(APIRequest):
    """Body for creating a role."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    permission_ids: list[str] = Field(default_factory=list)


class RoleUpdate(APIRequest):
    """Partial update. ``permission_ids``, when given, replaces the whole set."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    is_active: bool | None = None
    permission_ids: list[str] | None = None


class RoleResponse(APIResponse):
    """A role with its permissions."""

    id: str
    name: str
    description: str | None = None
    is_active: bool
    permissions: list[PermissionResponse] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None
