"""Health check endpoints.

Provides liveness and readiness checks for Kubernetes and load balancers.
Both are public.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from rbac_service.api.dependencies import get_app_settings
from rbac_service.core.config import DatabaseBackend, Settings
from rbac_service.database.connection import check_database_health
from rbac_service.schemas.health import HealthResponse, ReadinessResponse


router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Basic health check to verify the service is running.",
)
async def health_check(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """Check if the service is alive. External dependencies are not checked."""
    return HealthResponse(
        status="healthy",
        version=settings.app.version,
        environment=settings.APP_ENV,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Readiness check verifying the cache and database are available.",
)
async def readiness_check(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> ReadinessResponse:
    """Check if the service is ready to handle requests.

    An unreachable cache degrades the service but reads still work; an
    unreachable database or missing services make it not ready.
    """
    dependencies: dict[str, str] = {}
    services = getattr(request.app.state, "services", None)

    if services is None:
        dependencies["services"] = "not_initialized"
    else:
        healthy = await services.cache.ping()
        dependencies["cache"] = (
            f"{services.cache.backend.name}:{'healthy' if healthy else 'unhealthy'}"
        )

    if settings.database.backend == DatabaseBackend.MEMORY:
        dependencies["database"] = "memory"
    else:
        dependencies["database"] = await check_database_health()

    if services is None or dependencies["database"] in ("unhealthy", "not_initialized"):
        status = "not_ready"
    elif dependencies["cache"].endswith("unhealthy"):
        status = "degraded"
    else:
        status = "ready"

    return ReadinessResponse(
        status=status,
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies=dependencies,
    )
