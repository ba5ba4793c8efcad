"""Observability components: logging and metrics."""

from rbac_service.observability.logging import (
    bind_context,
    clear_context,
    get_context,
    get_logger,
    logger,
    setup_logging,
    unbind_context,
)
from rbac_service.observability.metrics import setup_metrics


__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "setup_logging",
    "setup_metrics",
    "unbind_context",
]
