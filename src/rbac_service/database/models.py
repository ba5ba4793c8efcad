"""Persistence records.

Repositories return these with references populated: a role carries its
permissions, a user carries its roles (each with permissions).
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from rbac_service.auth.permissions import PermissionAction, PermissionResource


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


class PermissionData(BaseModel):
    """A single ``resource:action`` grant."""

    id: str
    name: str
    action: PermissionAction
    resource: PermissionResource
    description: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoleData(BaseModel):
    """A named bundle of permissions. Permission ids are unique within a role."""

    id: str
    name: str
    description: str | None = None
    is_active: bool = True
    permissions: list[PermissionData] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def permission_ids(self) -> list[str]:
        return [p.id for p in self.permissions]


class UserData(BaseModel):
    """A user account.

    ``password_hash`` is excluded from every dump, so cached and serialized
    copies never carry it.
    """

    id: str
    email: str
    first_name: str
    last_name: str
    is_active: bool = True
    last_login: datetime | None = None
    roles: list[RoleData] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None
    password_hash: str | None = Field(default=None, exclude=True, repr=False)

    @property
    def role_ids(self) -> list[str]:
        return [r.id for r in self.roles]

    def without_password(self) -> UserData:
        return self.model_copy(update={"password_hash": None})
