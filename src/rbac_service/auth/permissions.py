"""Permission vocabulary and default grants.

Permissions are named ``resource:action``. Two sentinel names bypass all
specific checks: the permission ``all:manage`` and the role ``super_admin``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import NamedTuple


class PermissionAction(StrEnum):
    """Actions a permission can grant."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


class PermissionResource(StrEnum):
    """Resources a permission can apply to."""

    USER = "user"
    ROLE = "role"
    PERMISSION = "permission"
    METRICS = "metrics"
    ALL = "all"


def permission_name(resource: PermissionResource | str, action: PermissionAction | str) -> str:
    """Build the canonical ``resource:action`` name."""
    return f"{resource}:{action}"


class Permission(StrEnum):
    """Permissions the API itself requires."""

    USER_CREATE = "user:create"
    USER_READ = "user:read"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"
    USER_MANAGE = "user:manage"

    ROLE_CREATE = "role:create"
    ROLE_READ = "role:read"
    ROLE_UPDATE = "role:update"
    ROLE_DELETE = "role:delete"
    ROLE_MANAGE = "role:manage"

    PERMISSION_CREATE = "permission:create"
    PERMISSION_READ = "permission:read"
    PERMISSION_UPDATE = "permission:update"
    PERMISSION_DELETE = "permission:delete"
    PERMISSION_MANAGE = "permission:manage"

    METRICS_READ = "metrics:read"

    ALL_MANAGE = "all:manage"


class Role(StrEnum):
    """Roles created by the seed process."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    USER_MANAGER = "user_manager"
    USER = "user"


SUPER_ADMIN_PERMISSION = Permission.ALL_MANAGE.value
SUPER_ADMIN_ROLE = Role.SUPER_ADMIN.value


class PermissionSeed(NamedTuple):
    name: str
    action: PermissionAction
    resource: PermissionResource
    description: str


def _crud_manage(resource: PermissionResource) -> list[PermissionSeed]:
    return [
        PermissionSeed(
            name=permission_name(resource, action),
            action=action,
            resource=resource,
            description=f"{action.value.capitalize()} {resource.value}s",
        )
        for action in PermissionAction
    ]


DEFAULT_PERMISSIONS: list[PermissionSeed] = [
    *_crud_manage(PermissionResource.USER),
    *_crud_manage(PermissionResource.ROLE),
    *_crud_manage(PermissionResource.PERMISSION),
    PermissionSeed(
        name=Permission.METRICS_READ,
        action=PermissionAction.READ,
        resource=PermissionResource.METRICS,
        description="Read service metrics",
    ),
    PermissionSeed(
        name=Permission.ALL_MANAGE,
        action=PermissionAction.MANAGE,
        resource=PermissionResource.ALL,
        description="Full access to every resource",
    ),
]


class RoleSeed(NamedTuple):
    name: str
    description: str
    permissions: tuple[str, ...]


DEFAULT_ROLES: list[RoleSeed] = [
    RoleSeed(
        name=Role.SUPER_ADMIN,
        description="Unrestricted access",
        permissions=(Permission.ALL_MANAGE,),
    ),
    RoleSeed(
        name=Role.ADMIN,
        description="Manages users and reads roles, permissions and metrics",
        # user:manage does not imply the individual user actions.
        permissions=(
            Permission.USER_MANAGE,
            Permission.USER_CREATE,
            Permission.USER_READ,
            Permission.USER_UPDATE,
            Permission.USER_DELETE,
            Permission.ROLE_READ,
            Permission.PERMISSION_READ,
            Permission.METRICS_READ,
        ),
    ),
    RoleSeed(
        name=Role.USER_MANAGER,
        description="Creates, reads, updates and deletes users",
        permissions=(
            Permission.USER_CREATE,
            Permission.USER_READ,
            Permission.USER_UPDATE,
            Permission.USER_DELETE,
        ),
    ),
    RoleSeed(
        name=Role.USER,
        description="Basic read access to users",
        permissions=(Permission.USER_READ,),
    ),
]
