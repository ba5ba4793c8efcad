"""Cache storage backends.

A backend stores JSON-compatible values under string keys with a TTL and
raises on failure; swallowing and logging failures is the store's job.

- ``MemoryCacheBackend``: in-process, LRU-bounded, lazy expiry.
- ``RedisCacheBackend``: redis.asyncio client, keys namespaced, prefix
  deletion via ``SCAN MATCH``.
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import orjson


if TYPE_CHECKING:
    from collections.abc import Callable

    from redis.asyncio import Redis


@runtime_checkable
class CacheBackend(Protocol):
    """Storage operations used by the cache-aside store."""

    @property
    def name(self) -> str: ...

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: int) -> None: ...

    async def delete(self, *keys: str) -> int: ...

    async def delete_prefix(self, prefix: str) -> int: ...

    async def clear(self) -> None: ...

    async def ping(self) -> bool: ...


class MemoryCacheBackend:
    """In-process cache with per-entry expiry and least-recently-used eviction.

    Values are stored serialized so callers never share mutable state with
    the cache.
    """

    name = "memory"

    def __init__(
        self,
        max_items: int = 1000,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if max_items <= 0:
            msg = "max_items must be positive"
            raise ValueError(msg)
        self.max_items = max_items
        self._clock = clock or time.monotonic
        self._entries: OrderedDict[str, tuple[float | None, bytes]] = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if self._expired(expires_at):
            self._entries.pop(key, None)
            return None
        self._entries.move_to_end(key)
        return orjson.loads(payload)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        payload = orjson.dumps(value)
        expires_at = self._clock() + ttl if ttl > 0 else None
        async with self._lock:
            self._entries[key] = (expires_at, payload)
            self._entries.move_to_end(key)
            self._evict()

    def _evict(self) -> None:
        if len(self._entries) <= self.max_items:
            return
        for key in [k for k, (exp, _) in self._entries.items() if self._expired(exp)]:
            del self._entries[key]
        while len(self._entries) > self.max_items:
            self._entries.popitem(last=False)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._entries.pop(key, None) is not None:
                removed += 1
        return removed

    async def delete_prefix(self, prefix: str) -> int:
        matching = [k for k in self._entries if k.startswith(prefix)]
        return await self.delete(*matching)

    async def clear(self) -> None:
        self._entries.clear()

    async def ping(self) -> bool:
        return True


def _escape_glob(value: str) -> str:
    for char in ("\\", "*", "?", "[", "]"):
        value = value.replace(char, f"\\{char}")
    return value


class RedisCacheBackend:
    """Redis-backed cache; every key is stored as ``<namespace>:<key>``."""

    name = "redis"

    def __init__(self, client: Redis, namespace: str = "rbac", scan_count: int = 500) -> None:
        self._client = client
        self.namespace = namespace
        self.scan_count = scan_count

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(self._key(key))
        if raw is None:
            return None
        return orjson.loads(raw)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        payload = orjson.dumps(value)
        if ttl > 0:
            await self._client.setex(self._key(key), ttl, payload)
        else:
            await self._client.set(self._key(key), payload)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._client.delete(*(self._key(k) for k in keys)))

    async def delete_prefix(self, prefix: str) -> int:
        return await self._delete_matching(f"{_escape_glob(self._key(prefix))}*")

    async def clear(self) -> None:
        await self._delete_matching(f"{_escape_glob(self.namespace)}:*")

    async def _delete_matching(self, pattern: str) -> int:
        removed = 0
        batch: list[str] = []
        async for key in self._client.scan_iter(match=pattern, count=self.scan_count):
            batch.append(key)
            if len(batch) >= self.scan_count:
                removed += int(await self._client.delete(*batch))
                batch.clear()
        if batch:
            removed += int(await self._client.delete(*batch))
        return removed

    async def ping(self) -> bool:
        return bool(await self._client.ping())
