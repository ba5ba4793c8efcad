"""Caching layer.

This module provides:
- Namespaced cache keys
- Memory and Redis storage backends
- The cache-aside store and its invalidation coordinator
- Redis connection management
"""

from rbac_service.cache.backends import CacheBackend, MemoryCacheBackend, RedisCacheBackend
from rbac_service.cache.invalidation import CacheInvalidator
from rbac_service.cache.keys import CacheKeys, cache_key
from rbac_service.cache.redis import (
    close_redis,
    init_redis,
)
from rbac_service.cache.store import CacheStore


__all__ = [
    "CacheBackend",
    "CacheInvalidator",
    "CacheKeys",
    "CacheStore",
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "cache_key",
    "close_redis",
    "init_redis",
]
