"""Authentication and authorization module.

This module provides:
- Credential verification against bcrypt hashes
- Access-token issuance and verification (JWT)
- Role/permission authorization decisions
- FastAPI security dependencies (``rbac_service.auth.dependencies``)
"""

from rbac_service.auth.authorization import (
    AuthorizationDecision,
    authorize,
    authorize_by_role,
    evaluate_permissions,
    evaluate_roles,
)
from rbac_service.auth.jwt import TokenClaims, decode_token, encode_token
from rbac_service.auth.permissions import Permission, Role


__all__ = [
    # Decisions
    "AuthorizationDecision",
    "authorize",
    "authorize_by_role",
    "evaluate_permissions",
    "evaluate_roles",
    # RBAC vocabulary
    "Permission",
    "Role",
    # JWT
    "TokenClaims",
    "decode_token",
    "encode_token",
]
