"""
Generation Logger - audit trail of every facade invocation.

Each facade call produces exactly one GenerationLogEntry. The entry is
written to the structured diagnostic stream immediately and persisted to a
GenerationLogStore in a background task, so persistence never delays or
fails the caller. Persistence failures become LogPersistenceError, are logged
locally and dropped.

Stores:
- InMemoryGenerationLogStore: process-local, for tests and single instances
- RedisGenerationLogStore: JSON documents keyed by generation id plus a
  per-user index sorted by time

Pattern: Repository pattern for the log store
Pattern: Fire-and-forget background persistence
"""

import asyncio
import threading
from abc import ABC, abstractmethod
from typing import Optional

from redis.asyncio import Redis

from harmony_gateway.core.exceptions import LogPersistenceError
from harmony_gateway.models.domain import GenerationLogEntry, OperationKind
from harmony_gateway.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_QUERY_LIMIT = 50
DEFAULT_PERSIST_TIMEOUT_SECONDS = 5.0


def _matches(
    entry: GenerationLogEntry,
    operation: Optional[OperationKind],
    provider: Optional[str],
    status: Optional[str],
) -> bool:
    if operation is not None and entry.operation != OperationKind(operation):
        return False
    if provider is not None and entry.provider != provider:
        return False
    if status is not None and entry.status != status:
        return False
    return True


# =============================================================================
# Log Store Interface
# =============================================================================


class GenerationLogStore(ABC):
    """Persistence for generation log entries."""

    @abstractmethod
    async def save(self, entry: GenerationLogEntry) -> None:
        """Persist one entry."""

    @abstractmethod
    async def get(self, generation_id: str) -> Optional[GenerationLogEntry]:
        """Entry by generation id, or None."""

    @abstractmethod
    async def query(
        self,
        user_id: str,
        operation: Optional[OperationKind] = None,
        provider: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
        offset: int = 0,
    ) -> list[GenerationLogEntry]:
        """
        A user's entries, newest first, optionally filtered.

        Args:
            status: "success" or "failure"
        """

    @abstractmethod
    async def delete(self, generation_id: str) -> bool:
        """Remove one entry. Returns True when something was removed."""


class InMemoryGenerationLogStore(GenerationLogStore):
    """Process-local log store."""

    def __init__(self) -> None:
        self._entries: dict[str, GenerationLogEntry] = {}
        self._lock = threading.Lock()

    @property
    def entries(self) -> list[GenerationLogEntry]:
        with self._lock:
            return list(self._entries.values())

    async def save(self, entry: GenerationLogEntry) -> None:
        with self._lock:
            self._entries[entry.id] = entry

    async def get(self, generation_id: str) -> Optional[GenerationLogEntry]:
        with self._lock:
            return self._entries.get(generation_id)

    async def query(
        self,
        user_id: str,
        operation: Optional[OperationKind] = None,
        provider: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
        offset: int = 0,
    ) -> list[GenerationLogEntry]:
        with self._lock:
            candidates = [e for e in self._entries.values() if e.user_id == user_id]
        selected = [e for e in candidates if _matches(e, operation, provider, status)]
        selected.sort(key=lambda e: e.timestamp, reverse=True)
        return selected[offset : offset + limit]

    async def delete(self, generation_id: str) -> bool:
        with self._lock:
            return self._entries.pop(generation_id, None) is not None


class RedisGenerationLogStore(GenerationLogStore):
    """
    Redis log store.

    Keys:
        harmony:generation:<id>          JSON document
        harmony:generations:user:<user>  sorted set of ids scored by timestamp
    """

    ENTRY_PREFIX = "harmony:generation:"
    USER_INDEX_PREFIX = "harmony:generations:user:"

    def __init__(self, redis_client: Redis, retention_seconds: Optional[int] = None) -> None:
        """
        Args:
            redis_client: Redis client for persistence
            retention_seconds: Expire entries after this long (None keeps them)
        """
        self._redis = redis_client
        self._retention = retention_seconds

    async def save(self, entry: GenerationLogEntry) -> None:
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(f"{self.ENTRY_PREFIX}{entry.id}", entry.model_dump_json(), ex=self._retention)
            pipe.zadd(
                f"{self.USER_INDEX_PREFIX}{entry.user_id}",
                {entry.id: entry.timestamp.timestamp()},
            )
            await pipe.execute()

    async def get(self, generation_id: str) -> Optional[GenerationLogEntry]:
        data = await self._redis.get(f"{self.ENTRY_PREFIX}{generation_id}")
        if not data:
            return None
        return GenerationLogEntry.model_validate_json(data)

    async def query(
        self,
        user_id: str,
        operation: Optional[OperationKind] = None,
        provider: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
        offset: int = 0,
    ) -> list[GenerationLogEntry]:
        ids = await self._redis.zrevrange(f"{self.USER_INDEX_PREFIX}{user_id}", 0, -1)
        if not ids:
            return []
        documents = await self._redis.mget([f"{self.ENTRY_PREFIX}{_text(i)}" for i in ids])
        entries = [
            GenerationLogEntry.model_validate_json(doc) for doc in documents if doc is not None
        ]
        selected = [e for e in entries if _matches(e, operation, provider, status)]
        return selected[offset : offset + limit]

    async def delete(self, generation_id: str) -> bool:
        entry = await self.get(generation_id)
        if entry is None:
            return False
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.delete(f"{self.ENTRY_PREFIX}{generation_id}")
            pipe.zrem(f"{self.USER_INDEX_PREFIX}{entry.user_id}", generation_id)
            await pipe.execute()
        return True


def _text(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


# =============================================================================
# Generation Logger
# =============================================================================


class GenerationLogger:
    """
    Records generation outcomes without ever blocking or failing the caller.

    Example:
        >>> gen_logger = GenerationLogger(InMemoryGenerationLogStore())
        >>> gen_logger.record(entry)      # returns immediately
        >>> await gen_logger.flush()      # wait for pending writes (tests, shutdown)
    """

    def __init__(
        self,
        store: Optional[GenerationLogStore] = None,
        persist_timeout: float = DEFAULT_PERSIST_TIMEOUT_SECONDS,
    ) -> None:
        self.store = store or InMemoryGenerationLogStore()
        self._persist_timeout = persist_timeout
        self._pending: set[asyncio.Task] = set()

    def record(self, entry: GenerationLogEntry) -> None:
        """Emit the entry to the diagnostic stream and schedule persistence."""
        logger.info(
            "generation_recorded",
            generation_id=entry.id,
            user_id=entry.user_id,
            operation=entry.operation.value,
            provider=entry.provider,
            success=entry.success,
            cached=entry.cached,
            duration_ms=round(entry.duration_ms, 2),
            failed_providers=[err.provider for err in entry.errors],
        )
        task = asyncio.get_running_loop().create_task(self._persist(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist(self, entry: GenerationLogEntry) -> None:
        try:
            await asyncio.wait_for(self.store.save(entry), timeout=self._persist_timeout)
        except Exception as e:
            # Audit persistence must never surface to the caller
            error = LogPersistenceError(
                f"Failed to persist generation log {entry.id}: {e}", generation_id=entry.id
            )
            logger.error(
                "generation_log_persist_failed",
                generation_id=entry.id,
                error_code=error.error_code.value,
                error=error.message,
            )

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def flush(self) -> None:
        """Wait for every scheduled write to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        await self.flush()
