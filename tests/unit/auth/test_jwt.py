"""Unit tests for JWT encoding and decoding.

Tests cover:
- Payload shape (camelCase claims plus sub/iat/exp)
- Round trip of claims
- Expiry, tampering and wrong token type
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time
from jose import jwt

from rbac_service.auth.jwt import (
    TokenClaims,
    TokenExpiredError,
    TokenInvalidError,
    decode_token,
    encode_token,
)


pytestmark = pytest.mark.unit

SECRET = "test-secret-key-minimum-32-characters-long"
OTHER_SECRET = "another-secret-key-minimum-32-characters"


@pytest.fixture
def claims() -> TokenClaims:
    issued = datetime.now(UTC).replace(microsecond=0)
    return TokenClaims(
        email="alice@example.com",
        user_id="user-123",
        roles=["admin"],
        permissions=["user:read", "role:read"],
        is_active=True,
        issued_at=issued,
        expires_at=issued + timedelta(minutes=30),
    )


class TestEncodeToken:
    """Tests for encode_token."""

    def test_payload_uses_camel_case_claims(self, claims: TokenClaims) -> None:
        """Should carry userId, isActive and sub in the payload."""
        token = encode_token(claims, secret_key=SECRET, algorithm="HS256")

        payload = jwt.get_unverified_claims(token)
        assert payload["userId"] == "user-123"
        assert payload["sub"] == "user-123"
        assert payload["isActive"] is True
        assert payload["type"] == "access"
        assert isinstance(payload["exp"], int)
        assert isinstance(payload["iat"], int)

    def test_round_trip(self, claims: TokenClaims) -> None:
        """Should decode to the same claims."""
        token = encode_token(claims, secret_key=SECRET, algorithm="HS256")

        decoded = decode_token(token, secret_key=SECRET, algorithm="HS256")

        assert decoded == claims


class TestDecodeToken:
    """Tests for decode_token."""

    def test_rejects_expired_token(self, claims: TokenClaims) -> None:
        """Should raise TokenExpiredError after exp."""
        token = encode_token(claims, secret_key=SECRET, algorithm="HS256")

        with (
            freeze_time(claims.expires_at + timedelta(seconds=1)),
            pytest.raises(TokenExpiredError),
        ):
            decode_token(token, secret_key=SECRET, algorithm="HS256")

    def test_accepts_token_just_before_expiry(self, claims: TokenClaims) -> None:
        """Should accept the token until exp."""
        token = encode_token(claims, secret_key=SECRET, algorithm="HS256")

        with freeze_time(claims.expires_at - timedelta(seconds=5)):
            assert decode_token(token, secret_key=SECRET, algorithm="HS256").email == claims.email

    def test_rejects_wrong_secret(self, claims: TokenClaims) -> None:
        """Should raise TokenInvalidError for a bad signature."""
        token = encode_token(claims, secret_key=OTHER_SECRET, algorithm="HS256")

        with pytest.raises(TokenInvalidError):
            decode_token(token, secret_key=SECRET, algorithm="HS256")

    def test_rejects_garbage(self) -> None:
        """Should raise TokenInvalidError for a malformed token."""
        with pytest.raises(TokenInvalidError):
            decode_token("not-a-jwt", secret_key=SECRET, algorithm="HS256")

    def test_rejects_tampered_payload(self, claims: TokenClaims) -> None:
        """Should reject a token whose payload was modified."""
        token = encode_token(claims, secret_key=SECRET, algorithm="HS256")
        header, _payload, signature = token.split(".")
        forged = jwt.encode(
            {**claims.to_payload(), "permissions": ["all:manage"]},
            OTHER_SECRET,
            algorithm="HS256",
        ).split(".")[1]

        with pytest.raises(TokenInvalidError):
            decode_token(
                f"{header}.{forged}.{signature}", secret_key=SECRET, algorithm="HS256"
            )

    def test_rejects_missing_claims(self) -> None:
        """Should raise TokenInvalidError when required claims are absent."""
        token = jwt.encode(
            {"sub": "user-123", "exp": datetime.now(UTC) + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError, match="Malformed"):
            decode_token(token, secret_key=SECRET, algorithm="HS256")

    def test_rejects_wrong_token_type(self, claims: TokenClaims) -> None:
        """Should raise TokenInvalidError for a non-access token."""
        refresh = claims.model_copy(update={"type": "refresh"})
        token = encode_token(refresh, secret_key=SECRET, algorithm="HS256")

        with pytest.raises(TokenInvalidError, match="Expected access"):
            decode_token(token, secret_key=SECRET, algorithm="HS256")

    def test_type_check_can_be_skipped(self, claims: TokenClaims) -> None:
        """Should skip the type check when verify_type is None."""
        refresh = claims.model_copy(update={"type": "refresh"})
        token = encode_token(refresh, secret_key=SECRET, algorithm="HS256")

        decoded = decode_token(token, secret_key=SECRET, algorithm="HS256", verify_type=None)

        assert decoded.type == "refresh"
