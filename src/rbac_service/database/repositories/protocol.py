"""Repository interfaces used by the services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable


if TYPE_CHECKING:
    from datetime import datetime

    from rbac_service.database.models import PermissionData, RoleData, UserData


@runtime_checkable
class PermissionRepository(Protocol):
    async def list_all(self, *, active_only: bool = True) -> list[PermissionData]: ...

    async def get(self, permission_id: str) -> PermissionData | None: ...

    async def get_by_name(self, name: str) -> PermissionData | None: ...

    async def get_by_action_and_resource(
        self, action: str, resource: str, *, active_only: bool = True
    ) -> PermissionData | None: ...

    async def create(
        self, *, name: str, action: str, resource: str, description: str | None
    ) -> PermissionData: ...

    async def update(self, permission_id: str, changes: dict[str, Any]) -> PermissionData | None: ...


@runtime_checkable
class RoleRepository(Protocol):
    async def list_all(self, *, active_only: bool = True) -> list[RoleData]: ...

    async def get(self, role_id: str) -> RoleData | None: ...

    async def get_by_name(self, name: str) -> RoleData | None: ...

    async def create(
        self, *, name: str, description: str | None, permission_ids: list[str]
    ) -> RoleData: ...

    async def update(self, role_id: str, changes: dict[str, Any]) -> RoleData | None:
        """Apply column changes; a ``permission_ids`` key replaces the permission set."""
        ...

    async def add_permission(self, role_id: str, permission_id: str) -> RoleData | None: ...

    async def remove_permission(self, role_id: str, permission_id: str) -> RoleData | None: ...


@runtime_checkable
class UserRepository(Protocol):
    async def list_all(self) -> list[UserData]: ...

    async def get(self, user_id: str) -> UserData | None: ...

    async def get_by_email(self, email: str) -> UserData | None:
        """Look up by lower-cased email; the result includes the password hash."""
        ...

    async def create(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        is_active: bool,
    ) -> UserData: ...

    async def update(self, user_id: str, changes: dict[str, Any]) -> UserData | None: ...

    async def delete(self, user_id: str) -> UserData | None: ...

    async def add_role(self, user_id: str, role_id: str) -> UserData | None: ...

    async def remove_role(self, user_id: str, role_id: str) -> UserData | None: ...

    async def touch_last_login(self, user_id: str, at: datetime) -> None: ...
