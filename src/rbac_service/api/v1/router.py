"""API v1 router aggregating all endpoint routers.

All endpoints are mounted under the ``api.v1_prefix`` configuration
(``/api/v1`` by default).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from rbac_service.api.v1.endpoints import auth, health, permissions, roles, users
from rbac_service.auth.dependencies import get_current_claims


router = APIRouter()

# Public: the only routes that skip token validation.
router.include_router(health.router)
router.include_router(auth.router)

# Protected: every route requires a verified token.
protected = [Depends(get_current_claims)]
router.include_router(users.router, dependencies=protected)
router.include_router(roles.router, dependencies=protected)
router.include_router(permissions.router, dependencies=protected)
