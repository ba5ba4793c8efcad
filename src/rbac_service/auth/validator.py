"""Access-token verification.

Verification is CPU-only: signature and expiry are checked, claims are read
from the token as-is, and the only extra input is the in-process
``DeactivationRegistry``. The database is never queried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from rbac_service.auth.jwt import TokenClaims, TokenExpiredError, TokenInvalidError, decode_token
from rbac_service.core.exceptions import UnauthorizedError
from rbac_service.observability.logging import bind_context, get_logger
from rbac_service.observability.metrics import TOKEN_VERIFICATIONS


if TYPE_CHECKING:
    from rbac_service.auth.deactivation import DeactivationRegistry


logger = get_logger(__name__)

MISSING_TOKEN = "Not authenticated"
EXPIRED_TOKEN = "Token has expired"
INVALID_TOKEN = "Invalid token"
DEACTIVATED_ACCOUNT = "Account is deactivated"


class TokenVerification(BaseModel):
    """Result of checking a token: claims on success, a reason otherwise."""

    model_config = ConfigDict(frozen=True)

    claims: TokenClaims | None = None
    reason: str | None = None
    outcome: str = "valid"

    @property
    def ok(self) -> bool:
        return self.claims is not None


class TokenValidator:
    """Verifies bearer tokens and extracts their claims."""

    def __init__(
        self,
        *,
        secret_key: str,
        algorithm: str = "HS256",
        deactivations: DeactivationRegistry | None = None,
    ) -> None:
        self._secret_key = secret_key
        self.algorithm = algorithm
        self._deactivations = deactivations

    def check(self, token: str | None) -> TokenVerification:
        """Verify ``token`` without raising."""
        if not token:
            return TokenVerification(reason=MISSING_TOKEN, outcome="missing")

        try:
            claims = decode_token(token, secret_key=self._secret_key, algorithm=self.algorithm)
        except TokenExpiredError:
            return TokenVerification(reason=EXPIRED_TOKEN, outcome="expired")
        except TokenInvalidError:
            return TokenVerification(reason=INVALID_TOKEN, outcome="invalid")

        if not claims.is_active:
            return TokenVerification(reason=DEACTIVATED_ACCOUNT, outcome="inactive")
        if self._deactivations is not None and self._deactivations.is_deactivated(claims.user_id):
            return TokenVerification(reason=DEACTIVATED_ACCOUNT, outcome="inactive")

        return TokenVerification(claims=claims)

    def verify(self, token: str | None) -> TokenClaims:
        """Verify ``token`` and return its claims.

        Raises:
            UnauthorizedError: If the token is missing, malformed, tampered
                with, expired, or belongs to a deactivated account.
        """
        result = self.check(token)
        TOKEN_VERIFICATIONS.labels(outcome=result.outcome).inc()

        if result.claims is None:
            logger.debug("Token rejected", outcome=result.outcome)
            raise UnauthorizedError(result.reason or INVALID_TOKEN)

        bind_context(user_id=result.claims.user_id)
        return result.claims
