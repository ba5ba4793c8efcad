"""Credential verification for login."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NoReturn

from rbac_service.core.exceptions import InvalidCredentialsError, InvalidInputError
from rbac_service.observability.logging import get_logger
from rbac_service.observability.metrics import LOGIN_ATTEMPTS


if TYPE_CHECKING:
    from rbac_service.auth.passwords import PasswordHasher
    from rbac_service.database.models import UserData
    from rbac_service.services.user import UserService


logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class CredentialVerifier:
    """Checks an email/password pair against the stored bcrypt hash.

    Unknown email, inactive account and wrong password all raise the same
    ``InvalidCredentialsError``; the distinction is only logged.
    """

    def __init__(self, users: UserService, hasher: PasswordHasher) -> None:
        self._users = users
        self._hasher = hasher

    async def validate(self, email: str, password: str) -> UserData:
        """Verify credentials and record the login.

        Args:
            email: Account email, matched case-insensitively.
            password: Plain-text password.

        Returns:
            The user record without its password hash.

        Raises:
            InvalidInputError: If email or password is empty, or the email is malformed.
            InvalidCredentialsError: If the credentials do not identify an active user.
        """
        email = (email or "").strip()
        if not email:
            raise InvalidInputError("Email is required", field="email")
        if not password or not password.strip():
            raise InvalidInputError("Password is required", field="password")
        if not EMAIL_PATTERN.match(email):
            raise InvalidInputError("Invalid email format", field="email")

        user = await self._users.find_credentials_by_email(email)

        if user is None:
            self._reject("unknown_email", email)
        if not user.is_active:
            self._reject("inactive", email, user_id=user.id)
        if not user.password_hash or not await self._hasher.verify(password, user.password_hash):
            self._reject("wrong_password", email, user_id=user.id)

        await self._record_login(user)
        LOGIN_ATTEMPTS.labels(outcome="success").inc()
        logger.info("Login succeeded", user_id=user.id)
        return user.without_password()

    def _reject(self, reason: str, email: str, user_id: str | None = None) -> NoReturn:
        LOGIN_ATTEMPTS.labels(outcome="failure").inc()
        logger.info("Login failed", reason=reason, email=email, user_id=user_id)
        raise InvalidCredentialsError

    async def _record_login(self, user: UserData) -> None:
        # A failed lastLogin write must not fail the login.
        try:
            await self._users.update_last_login(user.id, user.email)
        except Exception:
            logger.exception("Failed to record last login", user_id=user.id)
