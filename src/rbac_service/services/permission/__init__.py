"""Permission service package."""

from rbac_service.services.permission.service import PermissionService


__all__ = ["PermissionService"]
