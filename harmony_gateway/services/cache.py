"""
Generation Cache Service

Caches successful provider payloads per operation so identical requests do
not reach an upstream backend (or its rate limit) again within the TTL.

Only the payload and the producing provider are stored; generation id,
error list and the cached flag belong to each individual call.

Implementations:
- InMemoryGenerationCache: process-local dict with lazy expiry
- RedisGenerationCache: shared, TTL delegated to Redis

Pattern: Repository pattern with pluggable storage
"""

import hashlib
import json
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Optional

from redis.asyncio import Redis

from harmony_gateway.core.exceptions import CacheError
from harmony_gateway.models.domain import (
    CachedPayload,
    CacheEntry,
    CacheStats,
    OperationKind,
)


DEFAULT_CACHE_TTL_SECONDS = 3600  # 1 hour


# =============================================================================
# Cache Key
# =============================================================================


def make_cache_key(operation: OperationKind | str, parameters: Mapping[str, Any]) -> str:
    """
    Derive a cache key from the operation and its canonicalized parameters.

    Pure function: field order in ``parameters`` never changes the key.

    Args:
        operation: Operation kind
        parameters: Subject parameters and tunables

    Returns:
        "<operation>:<sha256 prefix>"
    """
    operation_value = OperationKind(operation).value
    canonical = json.dumps(parameters, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(canonical.encode()).hexdigest()[:32]
    return f"{operation_value}:{digest}"


def _operation_of(key: str) -> str:
    return key.split(":", 1)[0]


# =============================================================================
# Cache Interface
# =============================================================================


class GenerationCache(ABC):
    """Keyed TTL store for generation payloads."""

    @abstractmethod
    async def get(self, key: str) -> Optional[CachedPayload]:
        """Return the cached payload, or None on a miss (absent or expired)."""

    @abstractmethod
    async def set(self, key: str, value: CachedPayload, ttl_seconds: float) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""

    @abstractmethod
    async def clear(self) -> int:
        """Remove every entry. Returns the number removed."""

    @abstractmethod
    async def stats(self) -> dict[str, CacheStats]:
        """Occupancy per operation kind."""


# =============================================================================
# In-Memory Cache
# =============================================================================


class InMemoryGenerationCache(GenerationCache):
    """
    Process-local cache.

    Expired entries stay in the map until the next read of their key, so
    ``stats`` can report them as expired.

    Attributes:
        clock: Time source in seconds; injectable for tests.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock or time.time

    async def get(self, key: str) -> Optional[CachedPayload]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: str, value: CachedPayload, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            raise CacheError(f"TTL must be positive, got {ttl_seconds}")
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                created_at=self._clock(),
                ttl_seconds=ttl_seconds,
            )

    async def clear(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        return removed

    async def stats(self) -> dict[str, CacheStats]:
        now = self._clock()
        result = {op.value: CacheStats() for op in OperationKind}
        with self._lock:
            entries = list(self._entries.values())
        for entry in entries:
            stats = result.setdefault(_operation_of(entry.key), CacheStats())
            stats.total_entries += 1
            if entry.is_expired(now):
                stats.expired_entries += 1
            else:
                stats.active_entries += 1
        return result


# =============================================================================
# Redis Cache
# =============================================================================


class RedisGenerationCache(GenerationCache):
    """
    Redis-backed cache shared between processes.

    Redis evicts expired keys itself, so ``expired_entries`` is always 0.

    Attributes:
        redis: Redis client for persistence
    """

    KEY_PREFIX = "harmony:cache:"

    def __init__(self, redis_client: Redis) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> Optional[CachedPayload]:
        try:
            data = await self._redis.get(f"{self.KEY_PREFIX}{key}")
            if not data:
                return None
            return CachedPayload.model_validate(json.loads(data))
        except Exception as e:
            raise CacheError(f"Failed to read cache entry {key}: {e}") from e

    async def set(self, key: str, value: CachedPayload, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            raise CacheError(f"TTL must be positive, got {ttl_seconds}")
        try:
            await self._redis.set(
                f"{self.KEY_PREFIX}{key}",
                value.model_dump_json(),
                px=int(ttl_seconds * 1000),
            )
        except Exception as e:
            raise CacheError(f"Failed to write cache entry {key}: {e}") from e

    async def _scan_keys(self) -> list[str]:
        keys: list[str] = []
        cursor = 0
        while True:
            cursor, batch = await self._redis.scan(
                cursor, match=f"{self.KEY_PREFIX}*", count=100
            )
            keys.extend(k.decode() if isinstance(k, bytes) else k for k in batch)
            if cursor == 0:
                break
        return keys

    async def clear(self) -> int:
        try:
            keys = await self._scan_keys()
            if not keys:
                return 0
            return await self._redis.delete(*keys)
        except Exception as e:
            raise CacheError(f"Failed to clear cache: {e}") from e

    async def stats(self) -> dict[str, CacheStats]:
        try:
            keys = await self._scan_keys()
        except Exception as e:
            raise CacheError(f"Failed to collect cache stats: {e}") from e
        result = {op.value: CacheStats() for op in OperationKind}
        for key in keys:
            stats = result.setdefault(
                _operation_of(key[len(self.KEY_PREFIX):]), CacheStats()
            )
            stats.total_entries += 1
            stats.active_entries += 1
        return result
