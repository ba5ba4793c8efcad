"""User request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field

from rbac_service.schemas.base import APIRequest, APIResponse
from rbac_service.schemas.role import RoleResponse


class UserCreate(APIRequest):
    """Body for creating a user."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    is_active: bool = True


class UserUpdate(APIRequest):
    """Partial update; omitted fields are left unchanged."""

    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=1)
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None


class UserResponse(APIResponse):
    """A user. Never includes the password hash."""

    id: str
    email: str
    first_name: str
    last_name: str
    is_active: bool
    last_login: datetime | None = None
    roles: list[RoleResponse] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None
