"""Permission repository (PostgreSQL)."""

from __future__ import annotations

from typing import Any

import asyncpg

from rbac_service.core.exceptions import ConflictError
from rbac_service.database.models import PermissionData, new_id
from rbac_service.database.repositories.base import PostgresRepository, build_update


_COLUMNS = "id, name, action, resource, description, is_active, created_at, updated_at"

_UPDATABLE = ("name", "action", "resource", "description", "is_active")


class PostgresPermissionRepository(PostgresRepository):
    """Permissions stored in the ``permissions`` table."""

    async def list_all(self, *, active_only: bool = True) -> list[PermissionData]:
        query = f"SELECT {_COLUMNS} FROM permissions"  # noqa: S608
        if active_only:
            query += " WHERE is_active"
        query += " ORDER BY created_at, name"
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query)
        return [PermissionData(**dict(row)) for row in rows]

    async def get(self, permission_id: str) -> PermissionData | None:
        return await self._fetch_one("id = $1", permission_id)

    async def get_by_name(self, name: str) -> PermissionData | None:
        return await self._fetch_one("name = $1", name)

    async def get_by_action_and_resource(
        self, action: str, resource: str, *, active_only: bool = True
    ) -> PermissionData | None:
        where = "action = $1 AND resource = $2"
        if active_only:
            where += " AND is_active"
        return await self._fetch_one(where, action, resource)

    async def _fetch_one(self, where: str, *args: Any) -> PermissionData | None:
        query = f"SELECT {_COLUMNS} FROM permissions WHERE {where} LIMIT 1"  # noqa: S608
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *args)
        return PermissionData(**dict(row)) if row else None

    async def create(
        self, *, name: str, action: str, resource: str, description: str | None
    ) -> PermissionData:
        query = f"""
            INSERT INTO permissions (id, name, action, resource, description)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING {_COLUMNS}
        """  # noqa: S608
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, new_id(), name, action, resource, description)
        except asyncpg.UniqueViolationError as e:
            msg = f"Permission with name '{name}' already exists"
            raise ConflictError(msg) from e
        return PermissionData(**dict(row))

    async def update(self, permission_id: str, changes: dict[str, Any]) -> PermissionData | None:
        statement = build_update("permissions", changes, _UPDATABLE)
        if statement is None:
            return await self.get(permission_id)
        query, args = statement
        try:
            async with self.pool.acquire() as conn:
                updated = await conn.fetchval(query, permission_id, *args)
        except asyncpg.UniqueViolationError as e:
            msg = f"Permission with name '{changes.get('name')}' already exists"
            raise ConflictError(msg) from e
        if updated is None:
            return None
        return await self.get(permission_id)
