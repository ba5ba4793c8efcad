"""Cache key builders.

Keys follow ``<entity>:<selector>:<value>`` so that every alias of an entity
shares the ``<entity>:`` prefix and every selector has its own
``<entity>:<selector>:`` prefix.
"""

from __future__ import annotations


SEPARATOR = ":"


def cache_key(*parts: object) -> str:
    """Join key parts with ':'.

    Example:
        cache_key("role", "id", "42")  # "role:id:42"
    """
    return SEPARATOR.join(str(p) for p in parts)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserKeys:
    """Keys for cached user projections."""

    ENTITY = "user"

    @staticmethod
    def by_id(user_id: str) -> str:
        return cache_key(UserKeys.ENTITY, "id", user_id)

    @staticmethod
    def by_email(email: str) -> str:
        return cache_key(UserKeys.ENTITY, "email", normalize_email(email))

    @staticmethod
    def with_roles(email: str) -> str:
        """User with roles and nested permissions populated."""
        return cache_key(UserKeys.ENTITY, "roles", normalize_email(email))

    @staticmethod
    def all() -> str:
        return cache_key(UserKeys.ENTITY, "all")

    @staticmethod
    def by_id_prefix() -> str:
        return cache_key(UserKeys.ENTITY, "id", "")

    @staticmethod
    def with_roles_prefix() -> str:
        return cache_key(UserKeys.ENTITY, "roles", "")


class RoleKeys:
    """Keys for cached roles."""

    ENTITY = "role"

    @staticmethod
    def by_id(role_id: str) -> str:
        return cache_key(RoleKeys.ENTITY, "id", role_id)

    @staticmethod
    def by_name(name: str) -> str:
        return cache_key(RoleKeys.ENTITY, "name", name)

    @staticmethod
    def all() -> str:
        return cache_key(RoleKeys.ENTITY, "all")

    @staticmethod
    def prefix() -> str:
        return cache_key(RoleKeys.ENTITY, "")


class PermissionKeys:
    """Keys for cached permissions."""

    ENTITY = "permission"

    @staticmethod
    def by_id(permission_id: str) -> str:
        return cache_key(PermissionKeys.ENTITY, "id", permission_id)

    @staticmethod
    def by_name(name: str) -> str:
        return cache_key(PermissionKeys.ENTITY, "name", name)

    @staticmethod
    def all() -> str:
        return cache_key(PermissionKeys.ENTITY, "all")


class CacheKeys:
    """Entry point: ``CacheKeys.role.by_id(...)``, ``CacheKeys.user.with_roles(...)``."""

    user = UserKeys
    role = RoleKeys
    permission = PermissionKeys
