"""User management with cache-aside reads."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from rbac_service.cache.keys import CacheKeys, normalize_email
from rbac_service.core.exceptions import ConflictError, NotFoundError
from rbac_service.database.models import UserData, utcnow
from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from rbac_service.auth.deactivation import DeactivationRegistry
    from rbac_service.auth.passwords import PasswordHasher
    from rbac_service.cache.invalidation import CacheInvalidator
    from rbac_service.cache.store import CacheStore
    from rbac_service.database.repositories import RoleRepository, UserRepository
    from rbac_service.schemas.user import UserCreate, UserUpdate


logger = get_logger(__name__)

_ONE = TypeAdapter(UserData)
_MANY = TypeAdapter(list[UserData])


class UserService:
    """CRUD over user accounts and their role assignments.

    Cached projections never contain the password hash; the one read that
    needs it, ``find_credentials_by_email``, bypasses the cache.

    Deactivating or deleting a user records it in the deactivation registry
    so that tokens issued earlier are refused by this process.
    """

    def __init__(
        self,
        repository: UserRepository,
        roles: RoleRepository,
        cache: CacheStore,
        invalidator: CacheInvalidator,
        hasher: PasswordHasher,
        *,
        deactivations: DeactivationRegistry | None = None,
        list_ttl: int = 60,
        ttl: int = 300,
    ) -> None:
        self._repository = repository
        self._roles = roles
        self._cache = cache
        self._invalidator = invalidator
        self._hasher = hasher
        self._deactivations = deactivations
        self._list_ttl = list_ttl
        self._ttl = ttl

    async def create(self, data: UserCreate) -> UserData:
        """Create an account with a hashed password.

        Raises:
            InvalidInputError: If the password breaks the strength policy.
            ConflictError: If the email is taken.
        """
        email = normalize_email(data.email)
        if await self._repository.get_by_email(email) is not None:
            msg = f"User with email '{email}' already exists"
            raise ConflictError(msg)

        password_hash = await self._hasher.hash(data.password)
        user = await self._repository.create(
            email=email,
            password_hash=password_hash,
            first_name=data.first_name,
            last_name=data.last_name,
            is_active=data.is_active,
        )
        await self._invalidator.invalidate_user(user.id, user.email)
        logger.info("User created", user_id=user.id)
        return user.without_password()

    async def find_all(self) -> list[UserData]:
        users = await self._cache.wrap_model(
            CacheKeys.user.all(), _MANY, self._repository.list_all, self._list_ttl
        )
        return users or []

    async def find_by_id(self, user_id: str) -> UserData:
        """Raises ``NotFoundError`` if no user has this id."""
        user = await self._cache.wrap_model(
            CacheKeys.user.by_id(user_id),
            _ONE,
            lambda: self._repository.get(user_id),
            self._ttl,
        )
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def find_by_email_with_roles(self, email: str) -> UserData:
        """User with roles and their permissions populated, for token issuance.

        Raises:
            NotFoundError: If no user has this email.
        """
        email = normalize_email(email)
        user = await self._cache.wrap_model(
            CacheKeys.user.with_roles(email),
            _ONE,
            lambda: self._repository.get_by_email(email),
            self._ttl,
        )
        if user is None:
            raise NotFoundError("User", email)
        return user

    async def find_credentials_by_email(self, email: str) -> UserData | None:
        """Uncached lookup that includes the password hash."""
        return await self._repository.get_by_email(normalize_email(email))

    async def update(self, user_id: str, data: UserUpdate) -> UserData:
        """Apply the fields set in ``data``.

        Raises:
            NotFoundError: If the user does not exist.
            ConflictError: If the new email is taken.
            InvalidInputError: If a new password breaks the strength policy.
        """
        current = await self._repository.get(user_id)
        if current is None:
            raise NotFoundError("User", user_id)

        changes: dict[str, Any] = data.model_dump(exclude_unset=True, by_alias=False)
        if changes.get("email") is not None:
            changes["email"] = normalize_email(changes["email"])
            if changes["email"] != current.email:
                if await self._repository.get_by_email(changes["email"]) is not None:
                    msg = f"User with email '{changes['email']}' already exists"
                    raise ConflictError(msg)
        password = changes.pop("password", None)
        if password is not None:
            changes["password_hash"] = await self._hasher.hash(password)
        changes = {k: v for k, v in changes.items() if v is not None}

        updated = await self._repository.update(user_id, changes)
        if updated is None:
            raise NotFoundError("User", user_id)

        await self._invalidator.invalidate_user(user_id, current.email)
        if updated.email != current.email:
            await self._invalidator.invalidate_user(user_id, updated.email)
        self._track_activation(current, updated)

        logger.info("User updated", user_id=user_id, fields=sorted(changes))
        return updated.without_password()

    async def delete(self, user_id: str) -> UserData:
        """Hard-delete the account.

        Raises:
            NotFoundError: If the user does not exist.
        """
        deleted = await self._repository.delete(user_id)
        if deleted is None:
            raise NotFoundError("User", user_id)
        await self._invalidator.invalidate_user(user_id, deleted.email)
        if self._deactivations is not None:
            self._deactivations.mark(user_id)
        logger.info("User deleted", user_id=user_id)
        return deleted.without_password()

    async def assign_role(self, user_id: str, role_id: str) -> UserData:
        """Give a user a role. Assigning a held role changes nothing."""
        await self._require_role(role_id)
        user = await self._repository.add_role(user_id, role_id)
        if user is None:
            raise NotFoundError("User", user_id)
        await self._invalidator.invalidate_user(user_id, user.email)
        logger.info("Role assigned", user_id=user_id, role_id=role_id)
        return user.without_password()

    async def remove_role(self, user_id: str, role_id: str) -> UserData:
        await self._require_role(role_id)
        user = await self._repository.remove_role(user_id, role_id)
        if user is None:
            raise NotFoundError("User", user_id)
        await self._invalidator.invalidate_user(user_id, user.email)
        logger.info("Role removed", user_id=user_id, role_id=role_id)
        return user.without_password()

    async def update_last_login(self, user_id: str, email: str) -> None:
        await self._repository.touch_last_login(user_id, utcnow())
        await self._invalidator.invalidate_user(user_id, email)

    async def _require_role(self, role_id: str) -> None:
        if await self._roles.get(role_id) is None:
            raise NotFoundError("Role", role_id)

    def _track_activation(self, before: UserData, after: UserData) -> None:
        if self._deactivations is None or before.is_active == after.is_active:
            return
        if after.is_active:
            self._deactivations.clear(after.id)
        else:
            self._deactivations.mark(after.id)
            logger.info("User deactivated", user_id=after.id)
