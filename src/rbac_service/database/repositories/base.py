"""Shared plumbing for asyncpg repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rbac_service.database.connection import get_database_pool
from rbac_service.database.models import PermissionData, RoleData


if TYPE_CHECKING:
    from collections.abc import Iterable

    from asyncpg import Connection, Pool, Record


class PostgresRepository:
    """Base for repositories using raw asyncpg queries."""

    def __init__(self, pool: Pool | None = None) -> None:
        """Initialize repository with optional connection pool.

        Args:
            pool: asyncpg connection pool. If None, uses global pool.
        """
        self._pool = pool

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()


def build_update(
    table: str,
    changes: dict[str, Any],
    allowed: Iterable[str],
) -> tuple[str, list[Any]] | None:
    """Build ``UPDATE .. SET .. WHERE id = $1 RETURNING id`` for whitelisted columns.

    Returns:
        (query, args) where args[0] is reserved for the id, or None when
        nothing applicable changed.
    """
    columns = [c for c in allowed if c in changes]
    if not columns:
        return None
    assignments = ", ".join(f"{col} = ${i}" for i, col in enumerate(columns, start=2))
    query = (
        f"UPDATE {table} SET {assignments}, updated_at = now() "  # noqa: S608
        "WHERE id = $1 RETURNING id"
    )
    return query, [changes[c] for c in columns]


async def fetch_permissions_for_roles(
    conn: Connection, role_ids: list[str]
) -> dict[str, list[PermissionData]]:
    """Permissions of each role, in the order they were added."""

    result: dict[str, list[PermissionData]] = {rid: [] for rid in role_ids}
    if not role_ids:
        return result
    rows = await conn.fetch(
        """
        SELECT rp.role_id, p.id, p.name, p.action, p.resource, p.description,
               p.is_active, p.created_at, p.updated_at
        FROM role_permissions rp
        JOIN permissions p ON p.id = rp.permission_id
        WHERE rp.role_id = ANY($1::text[])
        ORDER BY rp.added_at
        """,
        role_ids,
    )
    for row in rows:
        data = dict(row)
        role_id = data.pop("role_id")
        result[role_id].append(PermissionData(**data))
    return result


async def build_roles(conn: Connection, rows: list[Record]) -> list[RoleData]:
    """Populate role rows with their permissions."""

    permissions = await fetch_permissions_for_roles(conn, [row["id"] for row in rows])
    return [RoleData(**dict(row), permissions=permissions[row["id"]]) for row in rows]
