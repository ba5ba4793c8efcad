"""Role service package."""

from rbac_service.services.role.service import RoleService


__all__ = ["RoleService"]
