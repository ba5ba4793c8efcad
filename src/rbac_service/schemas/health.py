"""Health check schemas."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str = Field(..., description="Health status", examples=["healthy"])
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")


class ReadinessResponse(HealthResponse):
    """Readiness response with dependency status."""

    dependencies: dict[str, str] = Field(default_factory=dict)
