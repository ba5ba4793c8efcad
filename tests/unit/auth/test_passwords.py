"""Unit tests for password hashing and the strength policy."""

from __future__ import annotations

import pytest

from rbac_service.auth.passwords import PasswordHasher, check_password_strength
from rbac_service.core.exceptions import InvalidInputError


pytestmark = pytest.mark.unit


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


class TestCheckPasswordStrength:
    """Tests for check_password_strength."""

    def test_accepts_strong_password(self) -> None:
        """Should accept a password meeting every rule."""
        check_password_strength("Str0ng!Passw0rd")

    @pytest.mark.parametrize(
        ("password", "expected"),
        [
            ("Sh0rt!", "at least 8"),
            ("alllower1!", "an uppercase letter"),
            ("ALLUPPER1!", "a lowercase letter"),
            ("NoDigits!!", "a digit"),
            ("NoSpecial123", "a special character"),
        ],
    )
    def test_rejects_weak_password(self, password: str, expected: str) -> None:
        """Should raise InvalidInputError naming the broken rule."""
        with pytest.raises(InvalidInputError, match=expected) as exc_info:
            check_password_strength(password)

        assert exc_info.value.details is not None
        assert exc_info.value.details[0].field == "password"

    def test_rejects_password_over_bcrypt_limit(self) -> None:
        """Should reject passwords bcrypt would truncate."""
        with pytest.raises(InvalidInputError, match="at most 72 bytes"):
            check_password_strength("Aa1!" + "x" * 80)


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    async def test_hash_and_verify(self, hasher: PasswordHasher) -> None:
        """Should verify the original password against its hash."""
        password_hash = await hasher.hash("Str0ng!Passw0rd")

        assert password_hash.startswith("$2")
        assert await hasher.verify("Str0ng!Passw0rd", password_hash) is True

    async def test_wrong_password_fails(self, hasher: PasswordHasher) -> None:
        """Should reject a different password."""
        password_hash = await hasher.hash("Str0ng!Passw0rd")

        assert await hasher.verify("Wr0ng!Passw0rd", password_hash) is False

    async def test_hashes_are_salted(self, hasher: PasswordHasher) -> None:
        """Should produce a different hash each time."""
        first = await hasher.hash("Str0ng!Passw0rd")
        second = await hasher.hash("Str0ng!Passw0rd")

        assert first != second

    async def test_hash_enforces_policy(self, hasher: PasswordHasher) -> None:
        """Should refuse to hash a weak password."""
        with pytest.raises(InvalidInputError):
            await hasher.hash("weak")

    def test_malformed_hash_does_not_verify(self, hasher: PasswordHasher) -> None:
        """Should return False rather than raise for a corrupt stored hash."""
        assert hasher.verify_sync("Str0ng!Passw0rd", "not-a-bcrypt-hash") is False
