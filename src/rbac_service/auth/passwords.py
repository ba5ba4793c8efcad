"""Password hashing and strength policy (bcrypt)."""

from __future__ import annotations

import asyncio
import re

import bcrypt

from rbac_service.core.exceptions import InvalidInputError


MIN_PASSWORD_LENGTH = 8

# bcrypt ignores input beyond 72 bytes.
MAX_PASSWORD_BYTES = 72

_COMPLEXITY_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[a-z]"), "a lowercase letter"),
    (re.compile(r"[A-Z]"), "an uppercase letter"),
    (re.compile(r"\d"), "a digit"),
    (re.compile(r"[^A-Za-z0-9]"), "a special character"),
)


def check_password_strength(password: str) -> None:
    """Raise ``InvalidInputError`` if the password breaks the policy."""
    if len(password) < MIN_PASSWORD_LENGTH:
        msg = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        raise InvalidInputError(msg, field="password")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        msg = f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"
        raise InvalidInputError(msg, field="password")

    missing = [label for pattern, label in _COMPLEXITY_RULES if not pattern.search(password)]
    if missing:
        msg = f"Password must contain {', '.join(missing)}"
        raise InvalidInputError(msg, field="password")


class PasswordHasher:
    """bcrypt hashing run off the event loop."""

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash_sync(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify_sync(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except ValueError:
            # Malformed stored hash, or a password bcrypt refuses.
            return False

    async def hash(self, password: str) -> str:
        """Check the strength policy and hash the password."""
        check_password_strength(password)
        return await asyncio.to_thread(self.hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison of a password against a stored hash."""
        return await asyncio.to_thread(self.verify_sync, password, password_hash)
