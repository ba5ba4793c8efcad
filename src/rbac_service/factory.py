"""Application factory for creating FastAPI instances.

This module provides the create_app factory function that:
- Configures the FastAPI application with appropriate settings
- Sets up middleware stack in the correct order
- Registers exception handlers
- Mounts API routers
- Exposes Prometheus metrics behind the ``metrics:read`` permission
"""

from __future__ import annotations

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from rbac_service.api.v1.router import router as v1_router
from rbac_service.auth.dependencies import RequirePermissions
from rbac_service.auth.permissions import Permission
from rbac_service.core.config import Settings, get_settings
from rbac_service.core.events import lifespan
from rbac_service.core.exceptions import setup_exception_handlers
from rbac_service.core.middleware import LoggingMiddleware, RequestIDMiddleware
from rbac_service.observability.metrics import setup_metrics


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Optional settings override. If not provided, uses get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    expose_docs = not settings.is_production
    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Role-based access control: login, token verification and "
        "user/role/permission management",
        lifespan=lifespan,
        docs_url="/docs" if expose_docs else None,
        redoc_url="/redoc" if expose_docs else None,
        openapi_url="/openapi.json" if expose_docs else None,
        debug=settings.app.debug,
    )

    # Read by the lifespan handler and the health endpoints
    app.state.settings = settings

    setup_exception_handlers(app, expose_internal=settings.is_non_production)

    # Setup middleware (order matters - first added = last executed)
    _setup_middleware(app, settings)

    app.include_router(v1_router, prefix=settings.api.v1_prefix)

    setup_metrics(
        app,
        settings,
        dependencies=[Depends(RequirePermissions(Permission.METRICS_READ))],
    )

    return app


def _setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Order from request perspective:
    1. RequestIDMiddleware (adds request ID to logs and response)
    2. LoggingMiddleware (logs requests/responses, sets X-Process-Time)
    3. GZipMiddleware (compresses responses)
    4. CORSMiddleware (handles CORS)
    """
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Process-Time"],
        )

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
