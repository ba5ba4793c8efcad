"""Request ID middleware.

Propagates a caller-supplied ``X-Request-ID`` when it looks sane, otherwise
generates one, and binds it to the logging context for the whole request.
"""

from __future__ import annotations

import re
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from rbac_service.observability.logging import bind_context, clear_context


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp


_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request id to request.state, the log context and the response."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    def _resolve(self, request: Request) -> str:
        incoming = request.headers.get(self.header_name)
        if incoming and _VALID_REQUEST_ID.match(incoming):
            return incoming
        return uuid.uuid4().hex

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        clear_context()
        request_id = self._resolve(request)
        request.state.request_id = request_id
        bind_context(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            clear_context()

        response.headers[self.header_name] = request_id
        return response
