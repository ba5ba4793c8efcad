"""Role repository (PostgreSQL)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import asyncpg

from rbac_service.core.exceptions import ConflictError
from rbac_service.database.models import RoleData, new_id
from rbac_service.database.repositories.base import (
    PostgresRepository,
    build_roles,
    build_update,
)


if TYPE_CHECKING:
    from asyncpg import Connection


_COLUMNS = "id, name, description, is_active, created_at, updated_at"

_UPDATABLE = ("name", "description", "is_active")

_LINK_PERMISSIONS = """
    INSERT INTO role_permissions (role_id, permission_id)
    SELECT $1, unnest($2::text[])
    ON CONFLICT DO NOTHING
"""


class PostgresRoleRepository(PostgresRepository):
    """Roles in ``roles``, their permission sets in ``role_permissions``."""

    async def list_all(self, *, active_only: bool = True) -> list[RoleData]:
        query = f"SELECT {_COLUMNS} FROM roles"  # noqa: S608
        if active_only:
            query += " WHERE is_active"
        query += " ORDER BY created_at, name"
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query)
            return await build_roles(conn, rows)

    async def get(self, role_id: str) -> RoleData | None:
        async with self.pool.acquire() as conn:
            return await self._get(conn, "id = $1", role_id)

    async def get_by_name(self, name: str) -> RoleData | None:
        async with self.pool.acquire() as conn:
            return await self._get(conn, "name = $1", name)

    async def _get(self, conn: Connection, where: str, *args: Any) -> RoleData | None:
        query = f"SELECT {_COLUMNS} FROM roles WHERE {where} LIMIT 1"  # noqa: S608
        row = await conn.fetchrow(query, *args)
        if row is None:
            return None
        roles = await build_roles(conn, [row])
        return roles[0]

    async def create(
        self, *, name: str, description: str | None, permission_ids: list[str]
    ) -> RoleData:
        role_id = new_id()
        try:
            async with self.pool.acquire() as conn, conn.transaction():
                await conn.execute(
                    "INSERT INTO roles (id, name, description) VALUES ($1, $2, $3)",
                    role_id,
                    name,
                    description,
                )
                if permission_ids:
                    await conn.execute(_LINK_PERMISSIONS, role_id, list(dict.fromkeys(permission_ids)))
                role = await self._get(conn, "id = $1", role_id)
        except asyncpg.UniqueViolationError as e:
            msg = f"Role with name '{name}' already exists"
            raise ConflictError(msg) from e
        assert role is not None
        return role

    async def update(self, role_id: str, changes: dict[str, Any]) -> RoleData | None:
        statement = build_update("roles", changes, _UPDATABLE)
        permission_ids = changes.get("permission_ids")
        try:
            async with self.pool.acquire() as conn, conn.transaction():
                if statement is not None:
                    query, args = statement
                    if await conn.fetchval(query, role_id, *args) is None:
                        return None
                if permission_ids is not None:
                    await conn.execute("DELETE FROM role_permissions WHERE role_id = $1", role_id)
                    await conn.execute(_LINK_PERMISSIONS, role_id, list(dict.fromkeys(permission_ids)))
                    await conn.execute("UPDATE roles SET updated_at = now() WHERE id = $1", role_id)
                return await self._get(conn, "id = $1", role_id)
        except asyncpg.UniqueViolationError as e:
            msg = f"Role with name '{changes.get('name')}' already exists"
            raise ConflictError(msg) from e

    async def add_permission(self, role_id: str, permission_id: str) -> RoleData | None:
        async with self.pool.acquire() as conn, conn.transaction():
            if await conn.fetchval("SELECT 1 FROM roles WHERE id = $1", role_id) is None:
                return None
            await conn.execute(_LINK_PERMISSIONS, role_id, [permission_id])
            await conn.execute("UPDATE roles SET updated_at = now() WHERE id = $1", role_id)
            return await self._get(conn, "id = $1", role_id)

    async def remove_permission(self, role_id: str, permission_id: str) -> RoleData | None:
        async with self.pool.acquire() as conn, conn.transaction():
            if await conn.fetchval("SELECT 1 FROM roles WHERE id = $1", role_id) is None:
                return None
            await conn.execute(
                "DELETE FROM role_permissions WHERE role_id = $1 AND permission_id = $2",
                role_id,
                permission_id,
            )
            await conn.execute("UPDATE roles SET updated_at = now() WHERE id = $1", role_id)
            return await self._get(conn, "id = $1", role_id)
