"""Cache-aside store.

Wraps a ``CacheBackend`` so that backend failures never become functional
failures: reads degrade to a miss, writes and deletes are skipped, and every
failure is logged. Errors raised by a ``wrap`` compute function are not
backend failures; they propagate to the caller and nothing is cached.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from rbac_service.observability.logging import get_logger
from rbac_service.observability.metrics import CACHE_REQUESTS


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pydantic import TypeAdapter

    from rbac_service.cache.backends import CacheBackend


logger = get_logger(__name__)

T = TypeVar("T")


class CacheStore:
    """Get-or-compute cache over a pluggable backend.

    Example:
        roles = await cache.wrap(CacheKeys.role.all(), load_roles, ttl=300)
    """

    def __init__(self, backend: CacheBackend, default_ttl: int = 300) -> None:
        self.backend = backend
        self.default_ttl = default_ttl

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent, expired or unreadable."""
        try:
            value = await self.backend.get(key)
        except Exception:
            logger.exception("Cache get failed", key=key, backend=self.backend.name)
            CACHE_REQUESTS.labels(result="error").inc()
            return None
        CACHE_REQUESTS.labels(result="hit" if value is not None else "miss").inc()
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store a value; returns False if the backend rejected it."""
        try:
            await self.backend.set(key, value, self.default_ttl if ttl is None else ttl)
        except Exception:
            logger.exception("Cache set failed", key=key, backend=self.backend.name)
            return False
        return True

    async def delete(self, *keys: str) -> int:
        """Delete keys; returns how many existed (0 on backend failure)."""
        try:
            return await self.backend.delete(*keys)
        except Exception:
            logger.exception("Cache delete failed", keys=list(keys), backend=self.backend.name)
            return 0

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``."""
        try:
            return await self.backend.delete_prefix(prefix)
        except Exception:
            logger.exception(
                "Cache prefix delete failed", prefix=prefix, backend=self.backend.name
            )
            return 0

    async def clear(self) -> None:
        """Drop every entry."""
        try:
            await self.backend.clear()
        except Exception:
            logger.exception("Cache clear failed", backend=self.backend.name)

    async def wrap(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
        ttl: int | None = None,
    ) -> Any:
        """Return the cached value for ``key``, computing and storing it on a miss.

        Args:
            key: Cache key.
            compute: Zero-argument coroutine function producing the value.
            ttl: Seconds to keep the value; defaults to the store's TTL.

        Returns:
            The cached or freshly computed value. None results are not cached.

        Raises:
            Whatever ``compute`` raises. Nothing is cached in that case.
        """
        try:
            cached = await self.backend.get(key)
        except Exception:
            logger.exception(
                "Cache read failed, computing directly",
                key=key,
                backend=self.backend.name,
            )
            CACHE_REQUESTS.labels(result="error").inc()
            return await compute()

        if cached is not None:
            CACHE_REQUESTS.labels(result="hit").inc()
            logger.debug("Cache hit", key=key)
            return cached

        CACHE_REQUESTS.labels(result="miss").inc()
        value = await compute()
        if value is not None:
            await self.set(key, value, ttl)
        return value

    async def wrap_model(
        self,
        key: str,
        adapter: TypeAdapter[T],
        compute: Callable[[], Awaitable[T | None]],
        ttl: int | None = None,
    ) -> T | None:
        """``wrap`` for pydantic values.

        The computed value is stored in its JSON form and every result,
        cached or fresh, is validated back through ``adapter``, so callers
        always get fresh model instances they may mutate.
        """

        async def load() -> Any:
            value = await compute()
            return None if value is None else adapter.dump_python(value, mode="json")

        data = await self.wrap(key, load, ttl)
        return None if data is None else adapter.validate_python(data)

    async def ping(self) -> bool:
        try:
            return await self.backend.ping()
        except Exception:
            logger.exception("Cache ping failed", backend=self.backend.name)
            return False
