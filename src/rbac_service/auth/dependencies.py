"""FastAPI security dependencies.

Routers that need authentication attach ``get_current_claims`` (directly or
through ``RequirePermissions`` / ``RequireRoles``); public routes simply do
not, which is what marks them as skipping token validation.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rbac_service.api.dependencies import get_services
from rbac_service.auth.authorization import authorize, authorize_by_role
from rbac_service.auth.jwt import TokenClaims
from rbac_service.auth.permissions import Permission, Role
from rbac_service.core.container import ServiceContainer


bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="JWT Bearer token authentication",
    auto_error=False,
)


async def get_current_claims(
    services: Annotated[ServiceContainer, Depends(get_services)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenClaims:
    """Verify the bearer token and return its claims.

    Raises:
        UnauthorizedError: 401 if the token is missing, invalid, expired or
            belongs to a deactivated account.
    """
    token = credentials.credentials if credentials else None
    return services.validator.verify(token)


CurrentClaims = Annotated[TokenClaims, Depends(get_current_claims)]


class RequirePermissions:
    """Dependency requiring every listed permission.

    Usage:
        @router.get("/role")
        async def list_roles(
            claims: Annotated[TokenClaims, Depends(RequirePermissions(Permission.ROLE_READ))],
        ):
            ...
    """

    def __init__(self, *permissions: Permission | str) -> None:
        self.permissions = [str(p) for p in permissions]

    async def __call__(self, claims: CurrentClaims) -> TokenClaims:
        """Return the claims if they hold every required permission.

        Raises:
            ForbiddenError: 403 naming the missing permissions.
        """
        authorize(claims, self.permissions)
        return claims


class RequireRoles:
    """Dependency requiring at least one of the listed roles."""

    def __init__(self, *roles: Role | str) -> None:
        self.roles = [str(r) for r in roles]

    async def __call__(self, claims: CurrentClaims) -> TokenClaims:
        """Return the claims if they hold any of the required roles.

        Raises:
            ForbiddenError: 403 listing the acceptable roles.
        """
        authorize_by_role(claims, self.roles)
        return claims
