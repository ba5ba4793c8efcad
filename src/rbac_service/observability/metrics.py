"""Prometheus metrics instrumentation.

This module provides:
- FastAPI automatic request metrics
- Counters for logins, token verification, authorization and cache lookups
- The metrics endpoint, guarded by whatever dependencies the caller supplies
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator, metrics

from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Sequence

    from fastapi import FastAPI

    from rbac_service.core.config import Settings


logger = get_logger(__name__)

METRIC_NAMESPACE = "rbac"

LOGIN_ATTEMPTS = Counter(
    "rbac_login_attempts_total",
    "Login attempts by outcome",
    ["outcome"],
)

TOKEN_VERIFICATIONS = Counter(
    "rbac_token_verifications_total",
    "Bearer token verifications by outcome",
    ["outcome"],
)

AUTHORIZATION_DECISIONS = Counter(
    "rbac_authorization_decisions_total",
    "Authorization decisions by outcome",
    ["outcome"],
)

CACHE_REQUESTS = Counter(
    "rbac_cache_requests_total",
    "Cache-aside lookups by result",
    ["result"],
)


def setup_metrics(
    app: FastAPI,
    settings: Settings,
    *,
    dependencies: Sequence[Any] = (),
) -> Instrumentator | None:
    """Instrument the app and expose ``{prefix}/metrics``.

    Args:
        app: The FastAPI application instance.
        settings: Application settings.
        dependencies: FastAPI dependencies attached to the metrics route,
            e.g. a permission requirement.

    Returns:
        The configured Instrumentator, or None when metrics are disabled.
    """
    if not settings.observability.metrics.enabled:
        logger.info("Metrics collection disabled")
        return None

    prefix = settings.api.v1_prefix
    metrics_endpoint = f"{prefix}/metrics"

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=False,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[
            f"{prefix}/health",
            f"{prefix}/ready",
            metrics_endpoint,
        ],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )

    instrumentator.add(
        metrics.default(
            metric_namespace=METRIC_NAMESPACE,
            metric_subsystem="http",
            should_only_respect_2xx_for_highr=False,
        )
    )

    instrumentator.instrument(app)
    instrumentator.expose(
        app,
        endpoint=metrics_endpoint,
        include_in_schema=True,
        tags=["monitoring"],
        dependencies=list(dependencies),
    )

    logger.info("Prometheus metrics configured", endpoint=metrics_endpoint)
    return instrumentator


__all__ = [
    "AUTHORIZATION_DECISIONS",
    "CACHE_REQUESTS",
    "LOGIN_ATTEMPTS",
    "TOKEN_VERIFICATIONS",
    "setup_metrics",
]
