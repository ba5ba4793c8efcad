"""Authorization decisions over verified token claims.

Pure functions of (claims, requirement): no I/O, no caching.

- Permissions use AND semantics: every required permission must be held.
- Roles use OR semantics: any one required role suffices.
- ``all:manage`` (permissions) and ``super_admin`` (roles) allow anything.
- An empty permission requirement allows even without claims.

``evaluate_*`` return an ``AuthorizationDecision``; ``authorize*`` raise
``ForbiddenError`` on denial.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from rbac_service.auth.permissions import SUPER_ADMIN_PERMISSION, SUPER_ADMIN_ROLE
from rbac_service.core.exceptions import ForbiddenError
from rbac_service.observability.logging import get_logger
from rbac_service.observability.metrics import AUTHORIZATION_DECISIONS


if TYPE_CHECKING:
    from collections.abc import Iterable

    from rbac_service.auth.jwt import TokenClaims


logger = get_logger(__name__)

NOT_AUTHENTICATED = "User not authenticated"


class AuthorizationDecision(BaseModel):
    """Outcome of an authorization check."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: str
    missing: tuple[str, ...] = ()

    @classmethod
    def allow(cls, reason: str) -> AuthorizationDecision:
        return cls(allowed=True, reason=reason)

    @classmethod
    def deny(cls, reason: str, missing: Iterable[str] = ()) -> AuthorizationDecision:
        return cls(allowed=False, reason=reason, missing=tuple(missing))


def _is_authenticated(claims: TokenClaims | None) -> bool:
    return claims is not None and bool(claims.email)


def evaluate_permissions(
    claims: TokenClaims | None,
    required: Iterable[str],
) -> AuthorizationDecision:
    """Decide whether ``claims`` hold every permission in ``required``."""
    required = list(dict.fromkeys(required))
    if not required:
        return AuthorizationDecision.allow("No permissions required")

    if not _is_authenticated(claims):
        return AuthorizationDecision.deny(NOT_AUTHENTICATED, required)
    assert claims is not None

    held = set(claims.permissions)
    if SUPER_ADMIN_PERMISSION in held:
        return AuthorizationDecision.allow("Super admin permission")

    missing = [p for p in required if p not in held]
    if missing:
        return AuthorizationDecision.deny(
            f"Insufficient permissions. Missing: {', '.join(missing)}", missing
        )
    return AuthorizationDecision.allow("All required permissions held")


def evaluate_roles(
    claims: TokenClaims | None,
    required: Iterable[str],
) -> AuthorizationDecision:
    """Decide whether ``claims`` hold at least one role in ``required``."""
    required = list(dict.fromkeys(required))
    if not _is_authenticated(claims):
        return AuthorizationDecision.deny(NOT_AUTHENTICATED, required)
    assert claims is not None

    held = set(claims.roles)
    if SUPER_ADMIN_ROLE in held:
        return AuthorizationDecision.allow("Super admin role")

    if held.intersection(required):
        return AuthorizationDecision.allow("Matching role held")
    return AuthorizationDecision.deny(
        f"Insufficient role access. Required roles: {', '.join(required)}", required
    )


def _enforce(decision: AuthorizationDecision, claims: TokenClaims | None) -> None:
    AUTHORIZATION_DECISIONS.labels(outcome="allow" if decision.allowed else "deny").inc()
    if decision.allowed:
        return
    logger.info(
        "Authorization denied",
        user_id=claims.user_id if claims else None,
        reason=decision.reason,
        missing=list(decision.missing),
    )
    raise ForbiddenError(decision.reason, missing=decision.missing)


def authorize(claims: TokenClaims | None, required_permissions: Iterable[str]) -> None:
    """Raise ``ForbiddenError`` unless ``claims`` hold every required permission.

    Raises:
        ForbiddenError: Naming the missing permissions, or "User not
            authenticated" when claims are absent.
    """
    _enforce(evaluate_permissions(claims, required_permissions), claims)


def authorize_by_role(claims: TokenClaims | None, required_roles: Iterable[str]) -> None:
    """Raise ``ForbiddenError`` unless ``claims`` hold at least one required role.

    Raises:
        ForbiddenError: Listing the acceptable roles, or "User not
            authenticated" when claims are absent.
    """
    _enforce(evaluate_roles(claims, required_roles), claims)
