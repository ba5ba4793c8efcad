"""Unit tests for token verification.

Tests cover:
- Valid tokens yield their claims unchanged
- Missing, malformed, tampered and expired tokens are refused
- Deactivated accounts (claim or registry) are refused
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time

from rbac_service.auth.deactivation import DeactivationRegistry
from rbac_service.auth.jwt import TokenClaims, encode_token
from rbac_service.auth.validator import (
    DEACTIVATED_ACCOUNT,
    EXPIRED_TOKEN,
    INVALID_TOKEN,
    MISSING_TOKEN,
    TokenValidator,
)
from rbac_service.core.exceptions import UnauthorizedError
from rbac_service.observability.logging import clear_context, get_context


pytestmark = pytest.mark.unit

SECRET = "test-secret-key-minimum-32-characters-long"


def _token(*, is_active: bool = True, lifetime: timedelta = timedelta(hours=1)) -> str:
    issued = datetime.now(UTC).replace(microsecond=0)
    claims = TokenClaims(
        email="alice@example.com",
        user_id="user-1",
        roles=["user"],
        permissions=["user:read"],
        is_active=is_active,
        issued_at=issued,
        expires_at=issued + lifetime,
    )
    return encode_token(claims, secret_key=SECRET, algorithm="HS256")


@pytest.fixture
def registry() -> DeactivationRegistry:
    return DeactivationRegistry(retention_seconds=3600)


@pytest.fixture
def validator(registry: DeactivationRegistry) -> TokenValidator:
    return TokenValidator(secret_key=SECRET, deactivations=registry)


class TestCheck:
    """Tests for TokenValidator.check."""

    def test_valid_token(self, validator: TokenValidator) -> None:
        """Should return the embedded claims."""
        result = validator.check(_token())

        assert result.ok is True
        assert result.claims is not None
        assert result.claims.permissions == ["user:read"]

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, validator: TokenValidator, token: str | None) -> None:
        """Should report a missing token."""
        result = validator.check(token)

        assert result.ok is False
        assert result.reason == MISSING_TOKEN
        assert result.outcome == "missing"

    def test_malformed_token(self, validator: TokenValidator) -> None:
        """Should report an invalid token."""
        result = validator.check("abc.def.ghi")

        assert result.reason == INVALID_TOKEN

    def test_expired_token(self, validator: TokenValidator) -> None:
        """Should report expiry once exp has passed."""
        token = _token(lifetime=timedelta(minutes=5))

        with freeze_time(datetime.now(UTC) + timedelta(minutes=6)):
            result = validator.check(token)

        assert result.reason == EXPIRED_TOKEN

    def test_inactive_claim(self, validator: TokenValidator) -> None:
        """Should refuse a token whose claims say the account is inactive."""
        result = validator.check(_token(is_active=False))

        assert result.reason == DEACTIVATED_ACCOUNT

    def test_deactivated_after_issuance(
        self, validator: TokenValidator, registry: DeactivationRegistry
    ) -> None:
        """Should refuse a still-valid token once the account is deactivated."""
        token = _token()
        assert validator.check(token).ok is True

        registry.mark("user-1")

        assert validator.check(token).reason == DEACTIVATED_ACCOUNT

    def test_works_without_registry(self) -> None:
        """Should rely on the claim alone when no registry is configured."""
        validator = TokenValidator(secret_key=SECRET)

        assert validator.check(_token()).ok is True


class TestVerify:
    """Tests for TokenValidator.verify."""

    def test_returns_claims_and_binds_user(self, validator: TokenValidator) -> None:
        """Should return claims and bind the user id to the log context."""
        clear_context()

        claims = validator.verify(_token())

        assert claims.user_id == "user-1"
        assert get_context()["user_id"] == "user-1"
        clear_context()

    @pytest.mark.parametrize(
        ("token", "reason"),
        [(None, MISSING_TOKEN), ("garbage", INVALID_TOKEN)],
    )
    def test_raises_unauthorized(
        self, validator: TokenValidator, token: str | None, reason: str
    ) -> None:
        """Should raise UnauthorizedError with the reason."""
        with pytest.raises(UnauthorizedError) as exc_info:
            validator.verify(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.reason == reason
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    def test_raises_for_deactivated_account(self, validator: TokenValidator) -> None:
        """Should raise UnauthorizedError for an inactive claim."""
        with pytest.raises(UnauthorizedError, match=DEACTIVATED_ACCOUNT):
            validator.verify(_token(is_active=False))
