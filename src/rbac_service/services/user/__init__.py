"""User service package."""

from rbac_service.services.user.service import UserService


__all__ = ["UserService"]
