"""Application lifecycle events."""

from rbac_service.core.events.lifespan import lifespan


__all__ = ["lifespan"]
