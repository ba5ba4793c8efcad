"""PostgreSQL schema for users, roles and permissions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool


logger = get_logger(__name__)


SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS permissions (
        id          TEXT PRIMARY KEY,
        name        TEXT NOT NULL UNIQUE,
        action      TEXT NOT NULL,
        resource    TEXT NOT NULL,
        description TEXT,
        is_active   BOOLEAN NOT NULL DEFAULT TRUE,
        created_at  TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at  TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS roles (
        id          TEXT PRIMARY KEY,
        name        TEXT NOT NULL UNIQUE,
        description TEXT,
        is_active   BOOLEAN NOT NULL DEFAULT TRUE,
        created_at  TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at  TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS role_permissions (
        role_id       TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
        permission_id TEXT NOT NULL REFERENCES permissions(id) ON DELETE CASCADE,
        added_at      TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
        PRIMARY KEY (role_id, permission_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id            TEXT PRIMARY KEY,
        email         TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        first_name    TEXT NOT NULL,
        last_name     TEXT NOT NULL,
        is_active     BOOLEAN NOT NULL DEFAULT TRUE,
        last_login    TIMESTAMPTZ,
        created_at    TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at    TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS users_email_lower_idx ON users (lower(email))",
    """
    CREATE TABLE IF NOT EXISTS user_roles (
        user_id  TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        role_id  TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
        added_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp(),
        PRIMARY KEY (user_id, role_id)
    )
    """,
)


async def ensure_schema(pool: Pool) -> None:
    """Create tables and indexes that do not exist yet."""
    async with pool.acquire() as conn, conn.transaction():
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)
    logger.info("Database schema ensured", statements=len(SCHEMA_STATEMENTS))
