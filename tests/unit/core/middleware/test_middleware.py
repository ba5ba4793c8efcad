"""Unit tests for HTTP middleware."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from rbac_service.core.middleware import LoggingMiddleware, RequestIDMiddleware
from rbac_service.core.middleware.logging import client_ip
from rbac_service.observability.logging import get_context


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


pytestmark = pytest.mark.unit


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()

    @app.get("/echo")
    async def echo(request: Request) -> dict[str, object]:
        return {"request_id": request.state.request_id, "context": get_context()}

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestRequestIDMiddleware:
    """Tests for RequestIDMiddleware."""

    async def test_generates_id(self, client: AsyncClient) -> None:
        """Should generate an id and return it in the header."""
        response = await client.get("/echo")

        request_id = response.headers["X-Request-ID"]
        assert len(request_id) == 32
        assert response.json()["request_id"] == request_id

    async def test_propagates_valid_id(self, client: AsyncClient) -> None:
        """Should reuse a well-formed caller id."""
        response = await client.get("/echo", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    async def test_replaces_malformed_id(self, client: AsyncClient) -> None:
        """Should not echo ids with unexpected characters."""
        response = await client.get("/echo", headers={"X-Request-ID": "bad id<script>"})

        assert response.headers["X-Request-ID"] != "bad id<script>"

    async def test_binds_log_context(self, client: AsyncClient) -> None:
        """Should expose request id and path to loggers during the request."""
        response = await client.get("/echo", headers={"X-Request-ID": "ctx-1"})

        context = response.json()["context"]
        assert context["request_id"] == "ctx-1"
        assert context["path"] == "/echo"
        assert context["method"] == "GET"


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    @staticmethod
    async def _get(path: str, **options: object):
        app = FastAPI()

        @app.get("/echo")
        async def echo() -> dict[str, str]:
            return {}

        @app.get("/health")
        async def health() -> dict[str, str]:
            return {}

        app.add_middleware(LoggingMiddleware, **options)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            return await ac.get(path)

    async def test_adds_process_time(self, client: AsyncClient) -> None:
        """Should add X-Process-Time in milliseconds."""
        response = await client.get("/echo")

        assert response.headers["X-Process-Time"].endswith("ms")

    async def test_logs_duration(self) -> None:
        """Should log completion with the request duration."""
        with patch("rbac_service.core.middleware.logging.logger") as logger:
            await self._get("/echo")

        logger.info.assert_any_call("Request started")
        completed = logger.info.call_args_list[-1]
        assert completed.args == ("Request completed",)
        assert completed.kwargs["status_code"] == 200
        assert completed.kwargs["duration_ms"] >= 0
        assert completed.kwargs["slow"] is False

    async def test_warns_on_slow_request(self) -> None:
        """Should log at warning level past the slow threshold."""
        with patch("rbac_service.core.middleware.logging.logger") as logger:
            await self._get("/echo", slow_request_seconds=-1.0)

        logger.warning.assert_called_once()
        assert logger.warning.call_args.kwargs["slow"] is True

    async def test_excluded_path_is_timed_but_not_logged(self) -> None:
        """Should time health checks without logging them."""
        with patch("rbac_service.core.middleware.logging.logger") as logger:
            response = await self._get("/health")

        assert response.headers["X-Process-Time"].endswith("ms")
        logger.info.assert_not_called()


class TestClientIp:
    """Tests for client_ip."""

    def _request(self, headers: dict[str, str], host: str | None = "10.0.0.1") -> MagicMock:
        request = MagicMock()
        request.headers = headers
        request.client = MagicMock(host=host) if host else None
        return request

    def test_forwarded_for(self) -> None:
        """Should take the first X-Forwarded-For address."""
        request = self._request({"x-forwarded-for": "1.2.3.4, 5.6.7.8"})

        assert client_ip(request) == "1.2.3.4"

    def test_real_ip(self) -> None:
        """Should fall back to X-Real-IP."""
        assert client_ip(self._request({"x-real-ip": "9.9.9.9"})) == "9.9.9.9"

    def test_peer_address(self) -> None:
        """Should use the socket peer without proxy headers."""
        assert client_ip(self._request({})) == "10.0.0.1"

    def test_unknown(self) -> None:
        """Should report unknown without any source."""
        assert client_ip(self._request({}, host=None)) == "unknown"
