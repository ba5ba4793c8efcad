"""Cache invalidation after writes to users, roles and permissions.

Services await one of these calls after every successful write and before
returning, so the next read observes the write. Deletion is by explicit key
list; there is no dependency tracking between entries.

With ``cascade_role_changes`` disabled (the default), changing a role or a
permission leaves cached user projections (``user:roles:*``, ``user:id:*``)
in place until their TTL runs out, and changing a permission leaves roles that
embed it cached. With it enabled, those projections are dropped by prefix.
Already-issued tokens are unaffected either way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rbac_service.cache.keys import CacheKeys
from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from rbac_service.cache.store import CacheStore


logger = get_logger(__name__)


class CacheInvalidator:
    """Deletes every cached alias of a mutated entity."""

    def __init__(self, cache: CacheStore, *, cascade_role_changes: bool = False) -> None:
        self.cache = cache
        self.cascade_role_changes = cascade_role_changes

    async def invalidate_user(self, user_id: str, email: str | None = None) -> None:
        """Drop ``user:id:<id>``, ``user:all`` and, given an email, its aliases."""
        keys = [CacheKeys.user.by_id(user_id), CacheKeys.user.all()]
        if email:
            keys += [CacheKeys.user.by_email(email), CacheKeys.user.with_roles(email)]
        await self.cache.delete(*keys)
        logger.debug("Invalidated user cache", user_id=user_id, keys=keys)

    async def invalidate_role(self, role_id: str, name: str | None = None) -> None:
        """Drop ``role:id:<id>``, ``role:all`` and, given a name, ``role:name:<name>``."""
        keys = [CacheKeys.role.by_id(role_id), CacheKeys.role.all()]
        if name:
            keys.append(CacheKeys.role.by_name(name))
        await self.cache.delete(*keys)
        logger.debug("Invalidated role cache", role_id=role_id, keys=keys)

        if self.cascade_role_changes:
            await self._drop_user_projections()

    async def invalidate_permission(
        self, permission_id: str, name: str | None = None
    ) -> None:
        """Drop ``permission:id:<id>``, ``permission:all`` and ``permission:name:<name>``."""
        keys = [CacheKeys.permission.by_id(permission_id), CacheKeys.permission.all()]
        if name:
            keys.append(CacheKeys.permission.by_name(name))
        await self.cache.delete(*keys)
        logger.debug("Invalidated permission cache", permission_id=permission_id, keys=keys)

        if self.cascade_role_changes:
            removed = await self.cache.delete_prefix(CacheKeys.role.prefix())
            logger.debug("Cascaded permission change to roles", removed=removed)
            await self._drop_user_projections()

    async def invalidate_all(self) -> None:
        """Clear the whole store."""
        await self.cache.clear()
        logger.warning("Cleared entire cache")

    async def _drop_user_projections(self) -> None:
        removed = await self.cache.delete_prefix(CacheKeys.user.with_roles_prefix())
        removed += await self.cache.delete_prefix(CacheKeys.user.by_id_prefix())
        removed += await self.cache.delete(CacheKeys.user.all())
        logger.debug("Cascaded role change to user projections", removed=removed)
