"""Database repositories: PostgreSQL and in-memory implementations."""

from rbac_service.database.repositories.memory import (
    InMemoryDatabase,
    InMemoryPermissionRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
)
from rbac_service.database.repositories.permission import PostgresPermissionRepository
from rbac_service.database.repositories.protocol import (
    PermissionRepository,
    RoleRepository,
    UserRepository,
)
from rbac_service.database.repositories.role import PostgresRoleRepository
from rbac_service.database.repositories.user import PostgresUserRepository


__all__ = [
    "InMemoryDatabase",
    "InMemoryPermissionRepository",
    "InMemoryRoleRepository",
    "InMemoryUserRepository",
    "PermissionRepository",
    "PostgresPermissionRepository",
    "PostgresRoleRepository",
    "PostgresUserRepository",
    "RoleRepository",
    "UserRepository",
]
