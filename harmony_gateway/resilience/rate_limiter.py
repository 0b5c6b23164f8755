"""
Per-provider Rate Limiter - fixed window.

Each provider gets a window of ``window_seconds`` and a request budget. When
``now >= window_start + window_seconds`` the window resets fully. A request
is recorded at the decision to proceed, not after the upstream responds.

Implementations:
- InMemoryRateLimiter: single-process deployments
- RedisRateLimiter: state shared between processes

Pattern: Strategy pattern - the orchestrator depends only on RateLimiter
"""

import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Optional

from redis.asyncio import Redis

from harmony_gateway.models.domain import RateLimiterWindow


Clock = Callable[[], float]

DEFAULT_LIMIT = 100
DEFAULT_WINDOW_SECONDS = 60.0


# =============================================================================
# Rate Limiter Interface
# =============================================================================


class RateLimiter(ABC):
    """
    Abstract per-provider fixed-window limiter.

    ``acquire`` is the check-and-record the orchestrator uses; concurrent
    callers cannot both pass it for the last slot in a window.
    ``can_make_request`` and ``record_request`` are the separate halves for
    callers that need them.
    """

    def __init__(
        self,
        default_limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        limits: Optional[Mapping[str, int]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        if default_limit < 1:
            raise ValueError("default_limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.default_limit = default_limit
        self.window_seconds = window_seconds
        self._limits = dict(limits or {})
        self._clock = clock or time.time

    def limit_for(self, provider: str) -> int:
        return self._limits.get(provider, self.default_limit)

    @abstractmethod
    async def can_make_request(self, provider: str) -> bool:
        """True iff the provider's current window has budget left."""

    async def record_request(self, provider: str) -> bool:
        """
        Count one request against the provider's current window.

        A full window is left unchanged and False is returned, so the count
        never exceeds the limit.
        """
        return await self.acquire(provider)

    @abstractmethod
    async def acquire(self, provider: str) -> bool:
        """Atomically check and record. Returns False when the window is full."""

    @abstractmethod
    async def window(self, provider: str) -> RateLimiterWindow:
        """Snapshot of the provider's current window."""

    async def remaining(self, provider: str) -> int:
        return (await self.window(provider)).remaining

    @abstractmethod
    async def reset(self) -> None:
        """Forget all windows."""


# =============================================================================
# In-Memory Rate Limiter
# =============================================================================


class InMemoryRateLimiter(RateLimiter):
    """
    Fixed-window limiter held in process memory.

    The window for a provider starts at its first request after the previous
    window ended. Critical sections contain no awaits, so a threading.Lock
    serializes both event-loop tasks and worker threads.
    """

    def __init__(
        self,
        default_limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        limits: Optional[Mapping[str, int]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(default_limit, window_seconds, limits, clock)
        self._windows: dict[str, tuple[float, int]] = {}  # provider -> (start, count)
        self._lock = threading.Lock()

    def _current(self, provider: str, now: float) -> tuple[float, int]:
        # Caller holds self._lock
        start, count = self._windows.get(provider, (now, 0))
        if now >= start + self.window_seconds:
            start, count = now, 0
        self._windows[provider] = (start, count)
        return start, count

    async def can_make_request(self, provider: str) -> bool:
        with self._lock:
            _, count = self._current(provider, self._clock())
            return count < self.limit_for(provider)

    async def acquire(self, provider: str) -> bool:
        with self._lock:
            start, count = self._current(provider, self._clock())
            if count >= self.limit_for(provider):
                return False
            self._windows[provider] = (start, count + 1)
            return True

    async def window(self, provider: str) -> RateLimiterWindow:
        with self._lock:
            start, count = self._current(provider, self._clock())
        return RateLimiterWindow(
            provider=provider,
            window_start=start,
            count=count,
            limit=self.limit_for(provider),
            window_seconds=self.window_seconds,
        )

    async def reset(self) -> None:
        with self._lock:
            self._windows.clear()


# =============================================================================
# Redis Rate Limiter
# =============================================================================


class RedisRateLimiter(RateLimiter):
    """
    Fixed-window limiter shared through Redis.

    Windows are aligned to multiples of ``window_seconds`` since the epoch so
    every process agrees on the current window without coordination. One key
    per provider per window, expiring with the window.
    """

    KEY_PREFIX = "harmony:ratelimit:"

    def __init__(
        self,
        redis_client: Redis,
        default_limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        limits: Optional[Mapping[str, int]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(default_limit, window_seconds, limits, clock)
        self._redis = redis_client

    def _window_start(self, now: float) -> float:
        return (now // self.window_seconds) * self.window_seconds

    def _key(self, provider: str, window_start: float) -> str:
        return f"{self.KEY_PREFIX}{provider}:{int(window_start)}"

    def _expiry(self) -> int:
        return max(1, int(self.window_seconds) + 1)

    async def _count(self, provider: str, window_start: float) -> int:
        value = await self._redis.get(self._key(provider, window_start))
        return int(value) if value is not None else 0

    async def can_make_request(self, provider: str) -> bool:
        start = self._window_start(self._clock())
        return await self._count(provider, start) < self.limit_for(provider)

    async def acquire(self, provider: str) -> bool:
        key = self._key(provider, self._window_start(self._clock()))
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, self._expiry())
            count, _ = await pipe.execute()
        if int(count) > self.limit_for(provider):
            # Give the slot back so the recorded count never exceeds the limit
            await self._redis.decr(key)
            return False
        return True

    async def window(self, provider: str) -> RateLimiterWindow:
        start = self._window_start(self._clock())
        return RateLimiterWindow(
            provider=provider,
            window_start=start,
            count=await self._count(provider, start),
            limit=self.limit_for(provider),
            window_seconds=self.window_seconds,
        )

    async def reset(self) -> None:
        cursor = 0
        while True:
            cursor, keys = await self._redis.scan(
                cursor, match=f"{self.KEY_PREFIX}*", count=100
            )
            if keys:
                await self._redis.delete(*keys)
            if cursor == 0:
                break
