"""Startup seeding of default permissions, roles and the super-admin account."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rbac_service.auth.permissions import DEFAULT_ROLES, SUPER_ADMIN_ROLE
from rbac_service.core.exceptions import ConfigurationError, InvalidInputError
from rbac_service.observability.logging import get_logger
from rbac_service.schemas.role import RoleCreate
from rbac_service.schemas.user import UserCreate


if TYPE_CHECKING:
    from rbac_service.database.models import RoleData
    from rbac_service.services.permission import PermissionService
    from rbac_service.services.role import RoleService
    from rbac_service.services.user import UserService


logger = get_logger(__name__)


class SeedService:
    """Creates whatever default data is missing. Safe to run on every startup."""

    def __init__(
        self,
        permissions: PermissionService,
        roles: RoleService,
        users: UserService,
        *,
        super_admin_email: str,
        super_admin_password: str = "",
    ) -> None:
        self._permissions = permissions
        self._roles = roles
        self._users = users
        self._super_admin_email = super_admin_email
        self._super_admin_password = super_admin_password

    async def run(self) -> None:
        await self._permissions.seed_defaults()
        await self.seed_roles()
        await self.seed_super_admin()

    async def seed_roles(self) -> list[RoleData]:
        """Create each default role that does not exist, resolving permission names."""
        created: list[RoleData] = []
        for seed in DEFAULT_ROLES:
            if await self._roles.find_by_name(seed.name) is not None:
                continue

            permission_ids: list[str] = []
            for name in seed.permissions:
                permission = await self._permissions.find_by_name(name)
                if permission is None:
                    logger.warning("Seed permission missing", role=seed.name, permission=name)
                    continue
                permission_ids.append(permission.id)

            role = await self._roles.create(
                RoleCreate(
                    name=seed.name,
                    description=seed.description,
                    permission_ids=permission_ids,
                )
            )
            created.append(role)

        if created:
            logger.info("Default roles seeded", roles=[r.name for r in created])
        return created

    async def seed_super_admin(self) -> None:
        """Ensure the super-admin account exists and holds the super-admin role.

        Skipped when no super-admin password is configured.

        Raises:
            ConfigurationError: If the configured password breaks the policy.
        """
        if not self._super_admin_password:
            logger.info("Super admin seeding skipped, no password configured")
            return

        role = await self._roles.find_by_name(SUPER_ADMIN_ROLE)
        if role is None:
            logger.warning("Super admin role missing, account not seeded")
            return

        user = await self._users.find_credentials_by_email(self._super_admin_email)
        if user is None:
            try:
                user = await self._users.create(
                    UserCreate(
                        email=self._super_admin_email,
                        password=self._super_admin_password,
                        first_name="Super",
                        last_name="Admin",
                    )
                )
            except InvalidInputError as e:
                msg = f"SUPER_ADMIN_PASSWORD rejected: {e.message}"
                raise ConfigurationError(msg) from e
            logger.info("Super admin account created", user_id=user.id)

        if role.id not in user.role_ids:
            await self._users.assign_role(user.id, role.id)
