"""Permission management with cache-aside reads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from rbac_service.auth.permissions import DEFAULT_PERMISSIONS
from rbac_service.cache.keys import CacheKeys
from rbac_service.core.exceptions import ConflictError, NotFoundError
from rbac_service.database.models import PermissionData
from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from rbac_service.cache.invalidation import CacheInvalidator
    from rbac_service.cache.store import CacheStore
    from rbac_service.database.repositories import PermissionRepository
    from rbac_service.schemas.permission import PermissionCreate, PermissionUpdate


logger = get_logger(__name__)

_ONE = TypeAdapter(PermissionData)
_MANY = TypeAdapter(list[PermissionData])


class PermissionService:
    """CRUD over permissions.

    Reads go through the cache with the long TTL, name lookups with
    ``name_ttl`` since names rarely change. Every write invalidates the
    permission's id and name keys plus ``permission:all`` before returning.
    """

    def __init__(
        self,
        repository: PermissionRepository,
        cache: CacheStore,
        invalidator: CacheInvalidator,
        *,
        ttl: int = 3600,
        name_ttl: int = 86400,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._invalidator = invalidator
        self._ttl = ttl
        self._name_ttl = name_ttl

    async def create(self, data: PermissionCreate) -> PermissionData:
        """Create a permission.

        Raises:
            ConflictError: If the name is taken, or an active permission
                already covers the same action and resource.
        """
        if await self._repository.get_by_name(data.name) is not None:
            msg = f"Permission '{data.name}' already exists"
            raise ConflictError(msg)

        existing = await self._repository.get_by_action_and_resource(data.action, data.resource)
        if existing is not None:
            msg = (
                f"Permission for action '{data.action}' on resource '{data.resource}' "
                f"already exists as '{existing.name}'"
            )
            raise ConflictError(msg)

        permission = await self._repository.create(
            name=data.name,
            action=data.action,
            resource=data.resource,
            description=data.description,
        )
        await self._invalidator.invalidate_permission(permission.id, permission.name)
        logger.info("Permission created", permission_id=permission.id, name=permission.name)
        return permission

    async def find_all(self) -> list[PermissionData]:
        """Active permissions."""
        permissions = await self._cache.wrap_model(
            CacheKeys.permission.all(), _MANY, self._repository.list_all, self._ttl
        )
        return permissions or []

    async def find_one(self, permission_id: str) -> PermissionData:
        """Raises ``NotFoundError`` if no permission has this id."""
        permission = await self._cache.wrap_model(
            CacheKeys.permission.by_id(permission_id),
            _ONE,
            lambda: self._repository.get(permission_id),
            self._ttl,
        )
        if permission is None:
            raise NotFoundError("Permission", permission_id)
        return permission

    async def find_by_name(self, name: str) -> PermissionData | None:
        return await self._cache.wrap_model(
            CacheKeys.permission.by_name(name),
            _ONE,
            lambda: self._repository.get_by_name(name),
            self._name_ttl,
        )

    async def find_by_action_and_resource(
        self, action: str, resource: str
    ) -> PermissionData | None:
        return await self._repository.get_by_action_and_resource(action, resource)

    async def update(self, permission_id: str, data: PermissionUpdate) -> PermissionData:
        """Apply the fields set in ``data``.

        Raises:
            NotFoundError: If the permission does not exist.
            ConflictError: If the new name is taken.
        """
        current = await self._repository.get(permission_id)
        if current is None:
            raise NotFoundError("Permission", permission_id)

        changes = data.model_dump(exclude_unset=True, by_alias=False)
        if "name" in changes and changes["name"] != current.name:
            if await self._repository.get_by_name(changes["name"]) is not None:
                msg = f"Permission '{changes['name']}' already exists"
                raise ConflictError(msg)

        updated = await self._repository.update(permission_id, changes)
        if updated is None:
            raise NotFoundError("Permission", permission_id)

        await self._invalidator.invalidate_permission(permission_id, current.name)
        if updated.name != current.name:
            await self._invalidator.invalidate_permission(permission_id, updated.name)
        logger.info("Permission updated", permission_id=permission_id, fields=sorted(changes))
        return updated

    async def remove(self, permission_id: str) -> PermissionData:
        """Soft-delete: mark the permission inactive.

        Raises:
            NotFoundError: If the permission does not exist.
        """
        removed = await self._repository.update(permission_id, {"is_active": False})
        if removed is None:
            raise NotFoundError("Permission", permission_id)
        await self._invalidator.invalidate_permission(permission_id, removed.name)
        logger.info("Permission deactivated", permission_id=permission_id)
        return removed

    async def seed_defaults(self) -> list[PermissionData]:
        """Create every default permission that does not exist yet."""
        created: list[PermissionData] = []
        for seed in DEFAULT_PERMISSIONS:
            if await self._repository.get_by_name(seed.name) is not None:
                continue
            permission = await self._repository.create(
                name=seed.name,
                action=seed.action,
                resource=seed.resource,
                description=seed.description,
            )
            await self._invalidator.invalidate_permission(permission.id, permission.name)
            created.append(permission)

        if created:
            logger.info("Default permissions seeded", created=len(created))
        return created
