"""Configuration module with YAML and environment variable support."""

from .settings import CacheBackend, DatabaseBackend, Settings, get_settings


__all__ = [
    "CacheBackend",
    "DatabaseBackend",
    "Settings",
    "get_settings",
]
