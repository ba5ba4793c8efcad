"""Permission request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from rbac_service.auth.permissions import PermissionAction, PermissionResource
from rbac_service.schemas.base import APIRequest, APIResponse


class PermissionCreate(APIRequest):
    """Body for creating a permission."""

    name: str = Field(..., min_length=1, description="Unique name, e.g. user:read")
    action: PermissionAction
    resource: PermissionResource
    description: str | None = None


class PermissionUpdate(APIRequest):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1)
    action: PermissionAction | None = None
    resource: PermissionResource | None = None
    description: str | None = None
    is_active: bool | None = None


class PermissionResponse(APIResponse):
    """A permission."""

    id: str
    name: str
    action: PermissionAction
    resource: PermissionResource
    description: str | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
