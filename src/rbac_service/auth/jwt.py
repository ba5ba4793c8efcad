"""JWT encoding and decoding of access-token claims.

Tokens are HS256-signed by default. The payload carries the claims model
under its camelCase aliases plus the standard ``sub``, ``iat`` and ``exp``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rbac_service.observability.logging import get_logger


logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"


class TokenClaims(BaseModel):
    """Claims embedded in an access token at issuance.

    Immutable for the life of the token: permission changes made after
    issuance are not reflected until the holder obtains a new token.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    email: str
    user_id: str = Field(alias="userId")
    roles: list[str] = []
    permissions: list[str] = []
    is_active: bool = Field(default=True, alias="isActive")
    issued_at: datetime = Field(alias="iat")
    expires_at: datetime = Field(alias="exp")
    type: str = ACCESS_TOKEN_TYPE

    def to_payload(self) -> dict[str, Any]:
        """JWT payload for these claims."""
        payload = self.model_dump(by_alias=True)
        payload["sub"] = self.user_id
        return payload


class TokenError(Exception):
    """Base exception for token-related errors."""


class TokenExpiredError(TokenError):
    """Raised when a token has expired."""


class TokenInvalidError(TokenError):
    """Raised when a token is malformed, tampered with or of the wrong type."""


def encode_token(claims: TokenClaims, *, secret_key: str, algorithm: str) -> str:
    """Sign claims into a compact JWT."""
    return jwt.encode(claims.to_payload(), secret_key, algorithm=algorithm)


def decode_token(
    token: str,
    *,
    secret_key: str,
    algorithm: str,
    verify_type: str | None = ACCESS_TOKEN_TYPE,
) -> TokenClaims:
    """Verify signature and expiry, then parse the claims.

    Args:
        token: The encoded JWT.
        secret_key: Signing secret.
        algorithm: Expected signing algorithm.
        verify_type: Required ``type`` claim, or None to skip the check.

    Returns:
        The parsed claims.

    Raises:
        TokenExpiredError: If the token has expired.
        TokenInvalidError: If the token is invalid for any other reason.
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except JWTError as e:
        logger.warning("Invalid token", error=str(e))
        raise TokenInvalidError("Invalid token") from e

    try:
        claims = TokenClaims.model_validate(payload)
    except ValidationError as e:
        logger.warning("Token claims malformed", errors=e.error_count())
        raise TokenInvalidError("Malformed token claims") from e

    if verify_type and claims.type != verify_type:
        msg = f"Invalid token type. Expected {verify_type}, got {claims.type}"
        raise TokenInvalidError(msg)

    return claims
