"""HTTP middleware components."""

from rbac_service.core.middleware.logging import LoggingMiddleware
from rbac_service.core.middleware.request_id import RequestIDMiddleware


__all__ = [
    "LoggingMiddleware",
    "RequestIDMiddleware",
]
