"""Authentication schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from rbac_service.schemas.base import APIResponse


class LoginRequest(BaseModel):
    """Login credentials.

    Fields are plain strings: shape checks happen in the credential verifier
    so that malformed input yields 400 ``INVALID_INPUT``.
    """

    email: str = Field(default="", description="Account email")
    password: str = Field(default="", description="Account password")


class TokenResponse(BaseModel):
    """Access token returned by login."""

    access_token: str = Field(..., description="Signed JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class ClaimsResponse(APIResponse):
    """Claims carried by the caller's verified token."""

    email: str
    user_id: str
    roles: list[str]
    permissions: list[str]
    is_active: bool
    issued_at: datetime
    expires_at: datetime
