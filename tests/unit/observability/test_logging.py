"""Unit tests for logging helpers."""

from __future__ import annotations

import sys

import pytest
from loguru import logger

from rbac_service.observability.logging import (
    REDACTED,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    redact,
    setup_logging,
    unbind_context,
)


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def clean_context():
    clear_context()
    yield
    clear_context()


class TestRedact:
    """Tests for redact."""

    def test_masks_sensitive_keys(self) -> None:
        """Should mask credentials regardless of key case."""
        assert redact({"password": "x", "Authorization": "Bearer y", "email": "a@b.c"}) == {
            "password": REDACTED,
            "Authorization": REDACTED,
            "email": "a@b.c",
        }

    def test_recurses(self) -> None:
        """Should mask nested dicts."""
        assert redact({"body": {"access_token": "t", "ok": 1}}) == {
            "body": {"access_token": REDACTED, "ok": 1}
        }

    def test_does_not_mutate(self) -> None:
        """Should return a copy."""
        fields = {"token": "t"}
        redact(fields)

        assert fields == {"token": "t"}


class TestContext:
    """Tests for the request log context."""

    def test_bind_and_unbind(self) -> None:
        """Should add and remove context keys."""
        bind_context(request_id="r1", user_id="u1")
        unbind_context("user_id")

        assert get_context() == {"request_id": "r1"}

    def test_clear(self) -> None:
        """Should drop everything."""
        bind_context(request_id="r1")
        clear_context()

        assert get_context() == {}


class TestSetupLogging:
    """Tests for setup_logging output."""

    @pytest.fixture(autouse=True)
    def restore_sink(self):
        yield
        logger.remove()
        logger.add(sys.stderr, level="WARNING")

    def test_json_output_is_redacted(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Should emit JSON lines with context merged and secrets masked."""
        setup_logging(log_level="INFO", log_format="json")
        bind_context(request_id="r1")

        get_logger("tests").info("Login", email="a@example.com", password="hunter2")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        assert '"message":"Login"' in line
        assert '"request_id":"r1"' in line
        assert "hunter2" not in line
        assert REDACTED in line

    def test_level_filter(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Should drop records below the configured level."""
        setup_logging(log_level="WARNING", log_format="text")

        get_logger("tests").info("quiet")
        get_logger("tests").warning("loud {value}", value="braces")

        out = capsys.readouterr().out
        assert "quiet" not in out
        assert "loud" in out
