"""Access-token issuance.

Roles and permissions are resolved once, at issuance, and embedded in the
token. Authorization checks on later requests read them from the token
without touching the database, so a permission revoked after issuance stays
effective until the token expires.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from pydantic import BaseModel

from rbac_service.auth.jwt import TokenClaims, encode_token
from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from rbac_service.database.models import UserData
    from rbac_service.services.user import UserService


logger = get_logger(__name__)


class AccessToken(BaseModel):
    """A signed token and the claims inside it."""

    access_token: str
    claims: TokenClaims
    expires_in: int


def build_claims(user: UserData, issued_at: datetime, expires_at: datetime) -> TokenClaims:
    """Flatten a user with populated roles into token claims.

    Inactive roles and inactive permissions grant nothing. Permission names
    are deduplicated, keeping the first occurrence.
    """
    active_roles = [role for role in user.roles if role.is_active]
    permissions = [
        permission.name
        for role in active_roles
        for permission in role.permissions
        if permission.is_active
    ]
    return TokenClaims(
        email=user.email,
        user_id=user.id,
        roles=[role.name for role in active_roles],
        permissions=list(dict.fromkeys(permissions)),
        is_active=user.is_active,
        issued_at=issued_at,
        expires_at=expires_at,
    )


class TokenIssuer:
    """Signs access tokens for users looked up by email."""

    def __init__(
        self,
        users: UserService,
        *,
        secret_key: str,
        algorithm: str = "HS256",
        expires_in: int = 3600,
    ) -> None:
        self._users = users
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_in = expires_in

    async def issue(self, email: str) -> AccessToken:
        """Resolve roles and permissions for ``email`` and sign a token.

        Raises:
            NotFoundError: If no user has this email.
        """
        user = await self._users.find_by_email_with_roles(email)

        # Whole seconds: the JWT carries integer timestamps.
        issued_at = datetime.now(UTC).replace(microsecond=0)
        claims = build_claims(user, issued_at, issued_at + timedelta(seconds=self.expires_in))
        token = encode_token(claims, secret_key=self._secret_key, algorithm=self.algorithm)

        logger.info(
            "Access token issued",
            user_id=user.id,
            roles=claims.roles,
            permission_count=len(claims.permissions),
        )
        return AccessToken(access_token=token, claims=claims, expires_in=self.expires_in)
