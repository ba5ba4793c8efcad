"""Role management with cache-aside reads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from rbac_service.cache.keys import CacheKeys
from rbac_service.core.exceptions import ConflictError, NotFoundError
from rbac_service.database.models import RoleData
from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from rbac_service.cache.invalidation import CacheInvalidator
    from rbac_service.cache.store import CacheStore
    from rbac_service.database.repositories import PermissionRepository, RoleRepository
    from rbac_service.schemas.role import RoleCreate, RoleUpdate


logger = get_logger(__name__)

_ONE = TypeAdapter(RoleData)
_MANY = TypeAdapter(list[RoleData])


class RoleService:
    """CRUD over roles and their permission sets.

    A role's permissions have set semantics: adding a permission it already
    holds is a no-op, and permission id lists are deduplicated.
    """

    def __init__(
        self,
        repository: RoleRepository,
        permissions: PermissionRepository,
        cache: CacheStore,
        invalidator: CacheInvalidator,
        *,
        ttl: int = 300,
    ) -> None:
        self._repository = repository
        self._permissions = permissions
        self._cache = cache
        self._invalidator = invalidator
        self._ttl = ttl

    async def create(self, data: RoleCreate) -> RoleData:
        """Create a role with an initial permission set.

        Raises:
            ConflictError: If the name is taken.
            NotFoundError: If a permission id does not exist.
        """
        if await self._repository.get_by_name(data.name) is not None:
            msg = f"Role '{data.name}' already exists"
            raise ConflictError(msg)

        permission_ids = await self._resolve_permission_ids(data.permission_ids)
        role = await self._repository.create(
            name=data.name,
            description=data.description,
            permission_ids=permission_ids,
        )
        await self._invalidator.invalidate_role(role.id, role.name)
        logger.info("Role created", role_id=role.id, name=role.name)
        return role

    async def find_all(self) -> list[RoleData]:
        """Active roles with their permissions."""
        roles = await self._cache.wrap_model(
            CacheKeys.role.all(), _MANY, self._repository.list_all, self._ttl
        )
        return roles or []

    async def find_one(self, role_id: str) -> RoleData:
        """Raises ``NotFoundError`` if no role has this id."""
        role = await self._cache.wrap_model(
            CacheKeys.role.by_id(role_id),
            _ONE,
            lambda: self._repository.get(role_id),
            self._ttl,
        )
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    async def find_by_name(self, name: str) -> RoleData | None:
        return await self._cache.wrap_model(
            CacheKeys.role.by_name(name),
            _ONE,
            lambda: self._repository.get_by_name(name),
            self._ttl,
        )

    async def update(self, role_id: str, data: RoleUpdate) -> RoleData:
        """Apply the fields set in ``data``; ``permission_ids`` replaces the set.

        Raises:
            NotFoundError: If the role or a listed permission does not exist.
            ConflictError: If the new name is taken.
        """
        current = await self._repository.get(role_id)
        if current is None:
            raise NotFoundError("Role", role_id)

        changes = data.model_dump(exclude_unset=True, by_alias=False)
        if "name" in changes and changes["name"] != current.name:
            if await self._repository.get_by_name(changes["name"]) is not None:
                msg = f"Role '{changes['name']}' already exists"
                raise ConflictError(msg)
        if changes.get("permission_ids") is not None:
            changes["permission_ids"] = await self._resolve_permission_ids(
                changes["permission_ids"]
            )
        else:
            changes.pop("permission_ids", None)

        updated = await self._repository.update(role_id, changes)
        if updated is None:
            raise NotFoundError("Role", role_id)

        await self._invalidator.invalidate_role(role_id, current.name)
        if updated.name != current.name:
            await self._invalidator.invalidate_role(role_id, updated.name)
        logger.info("Role updated", role_id=role_id, fields=sorted(changes))
        return updated

    async def remove(self, role_id: str) -> RoleData:
        """Soft-delete: mark the role inactive.

        Raises:
            NotFoundError: If the role does not exist.
        """
        removed = await self._repository.update(role_id, {"is_active": False})
        if removed is None:
            raise NotFoundError("Role", role_id)
        await self._invalidator.invalidate_role(role_id, removed.name)
        logger.info("Role deactivated", role_id=role_id)
        return removed

    async def add_permission(self, role_id: str, permission_id: str) -> RoleData:
        """Grant a permission to a role. Granting a held permission changes nothing."""
        await self._require_permission(permission_id)
        role = await self._repository.add_permission(role_id, permission_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        await self._invalidator.invalidate_role(role_id, role.name)
        logger.info("Permission added to role", role_id=role_id, permission_id=permission_id)
        return role

    async def remove_permission(self, role_id: str, permission_id: str) -> RoleData:
        """Revoke a permission from a role.

        Tokens issued before the revocation keep the permission until they
        expire.
        """
        await self._require_permission(permission_id)
        role = await self._repository.remove_permission(role_id, permission_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        await self._invalidator.invalidate_role(role_id, role.name)
        logger.info(
            "Permission removed from role", role_id=role_id, permission_id=permission_id
        )
        return role

    async def _require_permission(self, permission_id: str) -> None:
        if await self._permissions.get(permission_id) is None:
            raise NotFoundError("Permission", permission_id)

    async def _resolve_permission_ids(self, permission_ids: list[str]) -> list[str]:
        unique = list(dict.fromkeys(permission_ids))
        for permission_id in unique:
            await self._require_permission(permission_id)
        return unique
