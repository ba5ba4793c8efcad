"""Persistence layer.

This module provides:
- asyncpg connection pool management and schema creation
- Records for permissions, roles and users
- Repository protocols with PostgreSQL and in-memory implementations
"""

from rbac_service.database.connection import (
    check_database_health,
    close_database_pool,
    get_database_pool,
    init_database_pool,
)
from rbac_service.database.models import PermissionData, RoleData, UserData
from rbac_service.database.schema import ensure_schema


__all__ = [
    "PermissionData",
    "RoleData",
    "UserData",
    "check_database_health",
    "close_database_pool",
    "ensure_schema",
    "get_database_pool",
    "init_database_pool",
]
