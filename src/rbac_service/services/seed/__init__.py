"""Seed service package."""

from rbac_service.services.seed.service import SeedService


__all__ = ["SeedService"]
