"""Logging configuration using Loguru.

This module provides:
- Structured JSON logging outside development
- Human-readable colorized output for development
- Request-scoped context (request id, user id) via a ContextVar
- Redaction of credentials and tokens before records are emitted
- Interception of standard library logging (uvicorn, asyncpg)
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

import orjson
from loguru import logger


if TYPE_CHECKING:
    from loguru import Logger, Record


_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "password_hash",
        "token",
        "access_token",
        "authorization",
        "secret",
        "jwt_secret_key",
    }
)

_NOISY_LOGGERS = ("uvicorn.access", "asyncpg", "redis", "httpx", "httpcore", "asyncio")


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record by forwarding to Loguru."""
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def redact(fields: dict[str, Any]) -> dict[str, Any]:
    """Replace values of sensitive keys, recursing into nested dicts.

    Args:
        fields: Structured log fields.

    Returns:
        A copy of ``fields`` with sensitive values replaced by ``[REDACTED]``.
    """
    cleaned: dict[str, Any] = {}
    for key, value in fields.items():
        if key.lower() in SENSITIVE_KEYS:
            cleaned[key] = REDACTED
        elif isinstance(value, dict):
            cleaned[key] = redact(value)
        else:
            cleaned[key] = value
    return cleaned


def _patch_record(record: Record) -> None:
    """Merge request context into the record and scrub sensitive fields."""
    merged = {**_log_context.get(), **record["extra"]}
    record["extra"].clear()
    record["extra"].update(redact(merged))


def _format_json(record: Record) -> str:
    """Serialize a record to a single JSON line."""
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["extra"].get("name", record["name"]),
        "function": record["function"],
        "line": record["line"],
        **{k: v for k, v in record["extra"].items() if k not in ("name", "serialized")},
    }

    exception = record["exception"]
    if exception:
        payload["exception"] = {
            "type": exception.type.__name__ if exception.type else None,
            "value": str(exception.value) if exception.value else None,
        }

    record["extra"]["serialized"] = orjson.dumps(payload, default=str).decode()
    return "{extra[serialized]}\n{exception}"


def _format_text(record: Record) -> str:
    """Format a record for development consoles."""
    context = {k: v for k, v in record["extra"].items() if k != "name"}
    context_str = ""
    if context:
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        # Braces inside values would be read as format fields.
        context_str = " | " + pairs.replace("{", "{{").replace("}", "}}")

    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
        f"{context_str} - "
        "<level>{message}</level>\n{exception}"
    )


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
) -> None:
    """Configure Loguru logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "text")
        is_development: Use the colorized text format regardless of log_format
    """
    logger.remove()
    logger.configure(patcher=_patch_record, extra={"name": "rbac_service"})

    use_json = log_format == "json" and not is_development
    logger.add(
        sys.stdout,
        format=_format_json if use_json else _format_text,
        level=log_level.upper(),
        colorize=not use_json,
        backtrace=True,
        diagnose=is_development,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "fastapi"):
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging configured", level=log_level, format=log_format)


def get_logger(name: str) -> Logger:
    """Get a logger bound to a module name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        A Loguru logger instance
    """
    return logger.bind(name=name)


def bind_context(**kwargs: Any) -> None:
    """Bind variables to the logging context of the current task.

    Example:
        bind_context(request_id="abc-123", user_id="user-456")
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def clear_context() -> None:
    """Clear all context variables."""
    _log_context.set({})


def unbind_context(*keys: str) -> None:
    """Remove specific context variables."""
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


def get_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


__all__ = [
    "InterceptHandler",
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "redact",
    "setup_logging",
    "unbind_context",
]
