"""Service wiring.

``build_container`` assembles every component from settings plus the two
pieces chosen at startup: a cache backend and a set of repositories. The
lifespan handler stores the result on ``app.state.services``; tests build
one directly around in-memory backends.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

from rbac_service.auth.credentials import CredentialVerifier
from rbac_service.auth.deactivation import DeactivationRegistry
from rbac_service.auth.issuer import TokenIssuer
from rbac_service.auth.passwords import PasswordHasher
from rbac_service.auth.validator import TokenValidator
from rbac_service.cache.backends import MemoryCacheBackend
from rbac_service.cache.invalidation import CacheInvalidator
from rbac_service.cache.store import CacheStore
from rbac_service.core.exceptions import ConfigurationError
from rbac_service.database.repositories import (
    InMemoryDatabase,
    InMemoryPermissionRepository,
    InMemoryRoleRepository,
    InMemoryUserRepository,
    PostgresPermissionRepository,
    PostgresRoleRepository,
    PostgresUserRepository,
)
from rbac_service.observability.logging import get_logger
from rbac_service.services.permission import PermissionService
from rbac_service.services.role import RoleService
from rbac_service.services.seed import SeedService
from rbac_service.services.user import UserService


if TYPE_CHECKING:
    from asyncpg import Pool

    from rbac_service.cache.backends import CacheBackend
    from rbac_service.core.config import Settings
    from rbac_service.database.repositories import (
        PermissionRepository,
        RoleRepository,
        UserRepository,
    )


logger = get_logger(__name__)


class Repositories(NamedTuple):
    permissions: PermissionRepository
    roles: RoleRepository
    users: UserRepository


def memory_repositories() -> Repositories:
    """Repositories sharing one fresh in-memory database."""
    db = InMemoryDatabase()
    return Repositories(
        permissions=InMemoryPermissionRepository(db),
        roles=InMemoryRoleRepository(db),
        users=InMemoryUserRepository(db),
    )


def postgres_repositories(pool: Pool | None = None) -> Repositories:
    """Repositories over ``pool``, or over the global pool when None."""
    return Repositories(
        permissions=PostgresPermissionRepository(pool),
        roles=PostgresRoleRepository(pool),
        users=PostgresUserRepository(pool),
    )


def resolve_jwt_secret(settings: Settings) -> str:
    """Return the signing secret.

    Outside production a missing secret is replaced by a random per-process
    key, so tokens do not survive a restart.

    Raises:
        ConfigurationError: If no secret is configured in production.
    """
    if settings.JWT_SECRET_KEY:
        return settings.JWT_SECRET_KEY
    if settings.is_production:
        msg = "JWT_SECRET_KEY must be set in production"
        raise ConfigurationError(msg)
    logger.warning("JWT_SECRET_KEY not set, using a random per-process signing key")
    return secrets.token_urlsafe(48)


@dataclass
class ServiceContainer:
    """Every long-lived component, built once per application."""

    settings: Settings
    cache: CacheStore
    invalidator: CacheInvalidator
    deactivations: DeactivationRegistry
    hasher: PasswordHasher
    permissions: PermissionService
    roles: RoleService
    users: UserService
    seeder: SeedService
    credentials: CredentialVerifier
    issuer: TokenIssuer
    validator: TokenValidator


def build_container(
    settings: Settings,
    *,
    cache_backend: CacheBackend | None = None,
    repositories: Repositories | None = None,
) -> ServiceContainer:
    """Wire the services.

    Args:
        settings: Application settings.
        cache_backend: Storage for the cache-aside store; defaults to an
            in-process LRU sized by ``cache.max_items``.
        repositories: Persistence; defaults to a fresh in-memory database.
    """
    if cache_backend is None:
        cache_backend = MemoryCacheBackend(max_items=settings.cache.max_items)
    if repositories is None:
        repositories = memory_repositories()

    ttl = settings.cache.ttl
    jwt_settings = settings.auth.jwt
    secret_key = resolve_jwt_secret(settings)

    cache = CacheStore(cache_backend, default_ttl=ttl.medium)
    invalidator = CacheInvalidator(
        cache, cascade_role_changes=settings.cache.cascade_role_changes
    )
    deactivations = DeactivationRegistry(
        retention_seconds=jwt_settings.access_token_expire_seconds
    )
    hasher = PasswordHasher(rounds=settings.auth.password.bcrypt_rounds)

    permissions = PermissionService(
        repositories.permissions,
        cache,
        invalidator,
        ttl=ttl.long,
        name_ttl=ttl.very_long,
    )
    roles = RoleService(
        repositories.roles, repositories.permissions, cache, invalidator, ttl=ttl.medium
    )
    users = UserService(
        repositories.users,
        repositories.roles,
        cache,
        invalidator,
        hasher,
        deactivations=deactivations,
        list_ttl=ttl.short,
        ttl=ttl.medium,
    )

    return ServiceContainer(
        settings=settings,
        cache=cache,
        invalidator=invalidator,
        deactivations=deactivations,
        hasher=hasher,
        permissions=permissions,
        roles=roles,
        users=users,
        seeder=SeedService(
            permissions,
            roles,
            users,
            super_admin_email=settings.seed.super_admin_email,
            super_admin_password=settings.SUPER_ADMIN_PASSWORD,
        ),
        credentials=CredentialVerifier(users, hasher),
        issuer=TokenIssuer(
            users,
            secret_key=secret_key,
            algorithm=jwt_settings.algorithm,
            expires_in=jwt_settings.access_token_expire_seconds,
        ),
        validator=TokenValidator(
            secret_key=secret_key,
            algorithm=jwt_settings.algorithm,
            deactivations=deactivations,
        ),
    )
