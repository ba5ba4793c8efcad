"""Error taxonomy and exception handlers.

Domain errors are raised by the component that detects them and reach the
HTTP boundary unmodified; the handlers registered here render each one as a
structured ``ErrorResponse``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from rbac_service.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Iterable

    from fastapi import Request


logger = get_logger(__name__)


class ErrorDetail(BaseModel):
    """Structured error detail for validation errors."""

    code: str
    message: str
    field: str | None = None


class ErrorResponse(BaseModel):
    """Structured error response."""

    error: str
    message: str
    details: list[ErrorDetail] | None = None
    request_id: str | None = None


class AppError(Exception):
    """Base application error.

    All domain errors inherit from this class so that a single handler can
    render them with their own status code and error code.
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: list[ErrorDetail] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details
        self.headers = headers
        super().__init__(message)


class InvalidInputError(AppError):
    """Malformed input, e.g. an empty or badly shaped email."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = (
            [ErrorDetail(code="INVALID_INPUT", message=message, field=field)]
            if field
            else None
        )
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="INVALID_INPUT",
            message=message,
            details=details,
        )


class InvalidCredentialsError(AppError):
    """Login failed.

    Unknown email, wrong password and inactive account all produce this same
    error with the same message.
    """

    MESSAGE = "Invalid credentials"

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="INVALID_CREDENTIALS",
            message=self.MESSAGE,
        )


class UnauthorizedError(AppError):
    """Missing, invalid or expired token, or a deactivated account."""

    def __init__(self, reason: str = "Could not validate credentials") -> None:
        self.reason = reason
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="UNAUTHORIZED",
            message=reason,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(AppError):
    """Authenticated caller lacks the required permissions or roles."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        missing: Iterable[str] = (),
    ) -> None:
        self.missing = list(missing)
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="FORBIDDEN",
            message=message,
        )


class NotFoundError(AppError):
    """Referenced entity does not exist."""

    def __init__(self, resource: str, identifier: Any) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="NOT_FOUND",
            message=f"{resource} with identifier '{identifier}' not found",
        )


class ConflictError(AppError):
    """Uniqueness violation."""

    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="CONFLICT",
            message=message,
        )


class ServiceUnavailableError(AppError):
    """A required backing service is not available."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error="SERVICE_UNAVAILABLE",
            message=message,
        )


class ConfigurationError(Exception):
    """Invalid configuration detected at startup."""


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state."""
    return getattr(request.state, "request_id", None)


def setup_exception_handlers(app: FastAPI, *, expose_internal: bool = False) -> None:
    """Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application.
        expose_internal: Include the exception type of unexpected errors in the
            response body. Only enabled outside production.
    """

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> ORJSONResponse:
        """Handle domain errors."""
        return ORJSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.error,
                message=exc.message,
                details=exc.details,
                request_id=_get_request_id(request),
            ).model_dump(),
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> ORJSONResponse:
        """Handle Starlette HTTP exceptions."""
        return ORJSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error="HTTP_ERROR",
                message=str(exc.detail),
                request_id=_get_request_id(request),
            ).model_dump(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> ORJSONResponse:
        """Handle Pydantic validation errors."""
        details = [
            ErrorDetail(
                code="VALIDATION_ERROR",
                message=error["msg"],
                field=".".join(str(loc) for loc in error["loc"]),
            )
            for error in exc.errors()
        ]
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(
                error="VALIDATION_ERROR",
                message="Request validation failed",
                details=details,
                request_id=_get_request_id(request),
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> ORJSONResponse:
        """Handle unexpected exceptions."""
        logger.opt(exception=exc).error(
            "Unhandled exception",
            path=request.url.path,
            error_type=type(exc).__name__,
        )

        details = None
        if expose_internal:
            details = [ErrorDetail(code="INTERNAL", message=type(exc).__name__)]

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred",
                details=details,
                request_id=_get_request_id(request),
            ).model_dump(),
        )
