"""In-memory repositories.

Used when ``database.backend`` is ``memory`` (local runs, tests). All three
repositories share one ``InMemoryDatabase`` so references resolve across
them the way joins do in PostgreSQL. Operations contain no awaits, so each
one is atomic with respect to other tasks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rbac_service.core.exceptions import ConflictError
from rbac_service.database.models import (
    PermissionData,
    RoleData,
    UserData,
    new_id,
    utcnow,
)


if TYPE_CHECKING:
    from datetime import datetime


class InMemoryDatabase:
    """Row storage keyed by id, with ordered link lists for role/permission refs."""

    def __init__(self) -> None:
        self.permissions: dict[str, dict[str, Any]] = {}
        self.roles: dict[str, dict[str, Any]] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.role_permissions: dict[str, list[str]] = {}
        self.user_roles: dict[str, list[str]] = {}

    def permission(self, permission_id: str) -> PermissionData | None:
        row = self.permissions.get(permission_id)
        return PermissionData(**row) if row else None

    def role(self, role_id: str) -> RoleData | None:
        row = self.roles.get(role_id)
        if row is None:
            return None
        permissions = [
            p
            for pid in self.role_permissions.get(role_id, [])
            if (p := self.permission(pid)) is not None
        ]
        return RoleData(**row, permissions=permissions)

    def user(self, user_id: str) -> UserData | None:
        row = self.users.get(user_id)
        if row is None:
            return None
        roles = [
            r for rid in self.user_roles.get(user_id, []) if (r := self.role(rid)) is not None
        ]
        return UserData(**row, roles=roles)

    def _ensure_unique(
        self, table: dict[str, dict[str, Any]], column: str, value: Any, exclude_id: str | None
    ) -> None:
        for row_id, row in table.items():
            if row_id != exclude_id and row[column] == value:
                msg = f"{column} '{value}' already exists"
                raise ConflictError(msg)


class InMemoryPermissionRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    async def list_all(self, *, active_only: bool = True) -> list[PermissionData]:
        records = [self._db.permission(pid) for pid in self._db.permissions]
        return [p for p in records if p is not None and (p.is_active or not active_only)]

    async def get(self, permission_id: str) -> PermissionData | None:
        return self._db.permission(permission_id)

    async def get_by_name(self, name: str) -> PermissionData | None:
        for pid, row in self._db.permissions.items():
            if row["name"] == name:
                return self._db.permission(pid)
        return None

    async def get_by_action_and_resource(
        self, action: str, resource: str, *, active_only: bool = True
    ) -> PermissionData | None:
        for permission in await self.list_all(active_only=active_only):
            if permission.action == action and permission.resource == resource:
                return permission
        return None

    async def create(
        self, *, name: str, action: str, resource: str, description: str | None
    ) -> PermissionData:
        self._db._ensure_unique(self._db.permissions, "name", name, None)
        now = utcnow()
        permission_id = new_id()
        self._db.permissions[permission_id] = {
            "id": permission_id,
            "name": name,
            "action": action,
            "resource": resource,
            "description": description,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        return self._db.permission(permission_id)  # type: ignore[return-value]

    async def update(self, permission_id: str, changes: dict[str, Any]) -> PermissionData | None:
        row = self._db.permissions.get(permission_id)
        if row is None:
            return None
        if "name" in changes:
            self._db._ensure_unique(self._db.permissions, "name", changes["name"], permission_id)
        row.update(changes, updated_at=utcnow())
        return self._db.permission(permission_id)


class InMemoryRoleRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    async def list_all(self, *, active_only: bool = True) -> list[RoleData]:
        records = [self._db.role(rid) for rid in self._db.roles]
        return [r for r in records if r is not None and (r.is_active or not active_only)]

    async def get(self, role_id: str) -> RoleData | None:
        return self._db.role(role_id)

    async def get_by_name(self, name: str) -> RoleData | None:
        for rid, row in self._db.roles.items():
            if row["name"] == name:
                return self._db.role(rid)
        return None

    async def create(
        self, *, name: str, description: str | None, permission_ids: list[str]
    ) -> RoleData:
        self._db._ensure_unique(self._db.roles, "name", name, None)
        now = utcnow()
        role_id = new_id()
        self._db.roles[role_id] = {
            "id": role_id,
            "name": name,
            "description": description,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        self._db.role_permissions[role_id] = list(dict.fromkeys(permission_ids))
        return self._db.role(role_id)  # type: ignore[return-value]

    async def update(self, role_id: str, changes: dict[str, Any]) -> RoleData | None:
        row = self._db.roles.get(role_id)
        if row is None:
            return None
        changes = dict(changes)
        permission_ids = changes.pop("permission_ids", None)
        if "name" in changes:
            self._db._ensure_unique(self._db.roles, "name", changes["name"], role_id)
        row.update(changes, updated_at=utcnow())
        if permission_ids is not None:
            self._db.role_permissions[role_id] = list(dict.fromkeys(permission_ids))
        return self._db.role(role_id)

    async def add_permission(self, role_id: str, permission_id: str) -> RoleData | None:
        if role_id not in self._db.roles:
            return None
        linked = self._db.role_permissions.setdefault(role_id, [])
        if permission_id not in linked:
            linked.append(permission_id)
            self._db.roles[role_id]["updated_at"] = utcnow()
        return self._db.role(role_id)

    async def remove_permission(self, role_id: str, permission_id: str) -> RoleData | None:
        if role_id not in self._db.roles:
            return None
        linked = self._db.role_permissions.setdefault(role_id, [])
        if permission_id in linked:
            linked.remove(permission_id)
            self._db.roles[role_id]["updated_at"] = utcnow()
        return self._db.role(role_id)


class InMemoryUserRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    async def list_all(self) -> list[UserData]:
        records = [self._db.user(uid) for uid in self._db.users]
        return [u for u in records if u is not None]

    async def get(self, user_id: str) -> UserData | None:
        return self._db.user(user_id)

    async def get_by_email(self, email: str) -> UserData | None:
        email = email.lower()
        for uid, row in self._db.users.items():
            if row["email"] == email:
                return self._db.user(uid)
        return None

    async def create(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        is_active: bool,
    ) -> UserData:
        email = email.lower()
        self._db._ensure_unique(self._db.users, "email", email, None)
        now = utcnow()
        user_id = new_id()
        self._db.users[user_id] = {
            "id": user_id,
            "email": email,
            "password_hash": password_hash,
            "first_name": first_name,
            "last_name": last_name,
            "is_active": is_active,
            "last_login": None,
            "created_at": now,
            "updated_at": now,
        }
        self._db.user_roles[user_id] = []
        return self._db.user(user_id)  # type: ignore[return-value]

    async def update(self, user_id: str, changes: dict[str, Any]) -> UserData | None:
        row = self._db.users.get(user_id)
        if row is None:
            return None
        changes = dict(changes)
        if "email" in changes:
            changes["email"] = changes["email"].lower()
            self._db._ensure_unique(self._db.users, "email", changes["email"], user_id)
        row.update(changes, updated_at=utcnow())
        return self._db.user(user_id)

    async def delete(self, user_id: str) -> UserData | None:
        user = self._db.user(user_id)
        if user is None:
            return None
        del self._db.users[user_id]
        self._db.user_roles.pop(user_id, None)
        return user

    async def add_role(self, user_id: str, role_id: str) -> UserData | None:
        if user_id not in self._db.users:
            return None
        linked = self._db.user_roles.setdefault(user_id, [])
        if role_id not in linked:
            linked.append(role_id)
            self._db.users[user_id]["updated_at"] = utcnow()
        return self._db.user(user_id)

    async def remove_role(self, user_id: str, role_id: str) -> UserData | None:
        if user_id not in self._db.users:
            return None
        linked = self._db.user_roles.setdefault(user_id, [])
        if role_id in linked:
            linked.remove(role_id)
            self._db.users[user_id]["updated_at"] = utcnow()
        return self._db.user(user_id)

    async def touch_last_login(self, user_id: str, at: datetime) -> None:
        row = self._db.users.get(user_id)
        if row is not None:
            row["last_login"] = at
