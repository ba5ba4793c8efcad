"""Access logging middleware.

Binds method, path and client address to the log context, writes one line
when a request starts and one when it finishes with its duration, and sets
``X-Process-Time`` on every response.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from rbac_service.observability.logging import bind_context, get_logger


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp


logger = get_logger(__name__)

DEFAULT_EXCLUDED_PATHS = frozenset({"/health", "/ready", "/metrics", "/favicon.ico"})

PROCESS_TIME_HEADER = "X-Process-Time"

SLOW_REQUEST_SECONDS = 1.0


def client_ip(request: Request) -> str:
    """Best-effort client address, honouring proxy headers."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Structured request/response logging with request duration."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        exclude_paths: set[str] | frozenset[str] | None = None,
        slow_request_seconds: float = SLOW_REQUEST_SECONDS,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or DEFAULT_EXCLUDED_PATHS
        self.slow_request_seconds = slow_request_seconds

    def _is_excluded(self, path: str) -> bool:
        return any(path == p or path.endswith(p) for p in self.exclude_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        excluded = self._is_excluded(request.url.path)

        if not excluded:
            bind_context(
                method=request.method,
                path=request.url.path,
                client_ip=client_ip(request),
            )
            logger.info("Request started")

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        duration_ms = round(elapsed * 1000, 2)
        response.headers[PROCESS_TIME_HEADER] = f"{duration_ms}ms"

        if excluded:
            return response

        if response.status_code >= 500 or elapsed > self.slow_request_seconds:
            log = logger.warning
        else:
            log = logger.info
        log(
            "Request completed",
            status_code=response.status_code,
            duration_ms=duration_ms,
            slow=elapsed > self.slow_request_seconds,
        )
        return response
