"""User repository (PostgreSQL)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import asyncpg

from rbac_service.core.exceptions import ConflictError
from rbac_service.database.models import UserData, new_id
from rbac_service.database.repositories.base import (
    PostgresRepository,
    build_roles,
    build_update,
)


if TYPE_CHECKING:
    from datetime import datetime

    from asyncpg import Connection, Record


_COLUMNS = (
    "id, email, password_hash, first_name, last_name, is_active, last_login, "
    "created_at, updated_at"
)

_UPDATABLE = ("email", "password_hash", "first_name", "last_name", "is_active")


class PostgresUserRepository(PostgresRepository):
    """Users in ``users``, role assignments in ``user_roles``."""

    async def _populate(self, conn: Connection, rows: list[Record]) -> list[UserData]:
        if not rows:
            return []
        links = await conn.fetch(
            """
            SELECT ur.user_id, r.id, r.name, r.description, r.is_active,
                   r.created_at, r.updated_at
            FROM user_roles ur
            JOIN roles r ON r.id = ur.role_id
            WHERE ur.user_id = ANY($1::text[])
            ORDER BY ur.added_at
            """,
            [row["id"] for row in rows],
        )
        roles = {role.id: role for role in await build_roles(conn, links)}
        by_user: dict[str, list[str]] = {}
        for link in links:
            by_user.setdefault(link["user_id"], []).append(link["id"])

        # Link rows carry user_id as well; RoleData ignores unknown fields.
        return [
            UserData(
                **dict(row),
                roles=[roles[rid].model_copy() for rid in by_user.get(row["id"], [])],
            )
            for row in rows
        ]

    async def _get(self, conn: Connection, where: str, *args: Any) -> UserData | None:
        query = f"SELECT {_COLUMNS} FROM users WHERE {where} LIMIT 1"  # noqa: S608
        row = await conn.fetchrow(query, *args)
        if row is None:
            return None
        users = await self._populate(conn, [row])
        return users[0]

    async def list_all(self) -> list[UserData]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(f"SELECT {_COLUMNS} FROM users ORDER BY created_at")  # noqa: S608
            return await self._populate(conn, rows)

    async def get(self, user_id: str) -> UserData | None:
        async with self.pool.acquire() as conn:
            return await self._get(conn, "id = $1", user_id)

    async def get_by_email(self, email: str) -> UserData | None:
        async with self.pool.acquire() as conn:
            return await self._get(conn, "lower(email) = lower($1)", email)

    async def create(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        is_active: bool,
    ) -> UserData:
        user_id = new_id()
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO users (id, email, password_hash, first_name, last_name, is_active)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    """,
                    user_id,
                    email.lower(),
                    password_hash,
                    first_name,
                    last_name,
                    is_active,
                )
                user = await self._get(conn, "id = $1", user_id)
        except asyncpg.UniqueViolationError as e:
            msg = f"User with email '{email}' already exists"
            raise ConflictError(msg) from e
        assert user is not None
        return user

    async def update(self, user_id: str, changes: dict[str, Any]) -> UserData | None:
        changes = dict(changes)
        if "email" in changes:
            changes["email"] = changes["email"].lower()
        statement = build_update("users", changes, _UPDATABLE)
        try:
            async with self.pool.acquire() as conn:
                if statement is not None:
                    query, args = statement
                    if await conn.fetchval(query, user_id, *args) is None:
                        return None
                return await self._get(conn, "id = $1", user_id)
        except asyncpg.UniqueViolationError as e:
            msg = f"User with email '{changes.get('email')}' already exists"
            raise ConflictError(msg) from e

    async def delete(self, user_id: str) -> UserData | None:
        async with self.pool.acquire() as conn, conn.transaction():
            user = await self._get(conn, "id = $1", user_id)
            if user is None:
                return None
            await conn.execute("DELETE FROM users WHERE id = $1", user_id)
            return user

    async def add_role(self, user_id: str, role_id: str) -> UserData | None:
        async with self.pool.acquire() as conn, conn.transaction():
            if await conn.fetchval("SELECT 1 FROM users WHERE id = $1", user_id) is None:
                return None
            await conn.execute(
                "INSERT INTO user_roles (user_id, role_id) VALUES ($1, $2) ON CONFLICT DO NOTHING",
                user_id,
                role_id,
            )
            await conn.execute("UPDATE users SET updated_at = now() WHERE id = $1", user_id)
            return await self._get(conn, "id = $1", user_id)

    async def remove_role(self, user_id: str, role_id: str) -> UserData | None:
        async with self.pool.acquire() as conn, conn.transaction():
            if await conn.fetchval("SELECT 1 FROM users WHERE id = $1", user_id) is None:
                return None
            await conn.execute(
                "DELETE FROM user_roles WHERE user_id = $1 AND role_id = $2",
                user_id,
                role_id,
            )
            await conn.execute("UPDATE users SET updated_at = now() WHERE id = $1", user_id)
            return await self._get(conn, "id = $1", user_id)

    async def touch_last_login(self, user_id: str, at: datetime) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute("UPDATE users SET last_login = $2 WHERE id = $1", user_id, at)
