"""
Provider Base Interface - Abstract Provider Adapter

This module defines the abstract base class for all generation backend
adapters (text for bios and prompts, images). The ProviderAdapter ABC gives
the fallback orchestrator one uniform call shape across very different
upstream APIs.

Design Pattern:
- Ports and Adapters (Hexagonal Architecture)
- ProviderAdapter serves as the "port" (interface)
- Concrete providers (gemini.py, openai.py, nanobanana.py, seedance.py)
  serve as "adapters"

Contract for subclasses:
- ``_request`` performs exactly one upstream call and translates every
  failure into a ProviderError subclass (never lets httpx / SDK exceptions
  escape).
- Retrying is not the subclass's concern; ``generate`` wraps ``_request`` in
  the shared RetryPolicy.
- Adapters never call sibling providers; fallback is the orchestrator's job.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from harmony_gateway.core.exceptions import AuthenticationError, ProviderError
from harmony_gateway.models.domain import OperationKind, ProviderHealth, QuotaInfo
from harmony_gateway.resilience.rate_limiter import InMemoryRateLimiter, RateLimiter
from harmony_gateway.resilience.retry import RetryPolicy


DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS = 300.0
HEALTH_PROBE_PROMPT = "Test"


class ProviderAdapter(ABC):
    """
    Abstract base class for generation backend adapters.

    Attributes:
        name: Provider identifier used in configuration, results and logs.
        operations: Operation kinds this backend can serve.

    Example:
        >>> class EchoProvider(ProviderAdapter):
        ...     name = "echo"
        ...     operations = frozenset({OperationKind.BIO})
        ...
        ...     async def _request(self, prompt, options):
        ...         return prompt
    """

    name: str = "provider"
    operations: frozenset[OperationKind] = frozenset()

    def __init__(
        self,
        api_key: str = "",
        retry_policy: Optional[RetryPolicy] = None,
        rate_limiter: Optional[RateLimiter] = None,
        health_check_interval: float = DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """
        Args:
            api_key: Credential for the backend ("" means not configured).
            retry_policy: Policy wrapping each call (default: RetryPolicy()).
            rate_limiter: Limiter read by quota_info(); the orchestrator
                shares the same instance for admission.
            health_check_interval: Seconds a probe result is reused.
            clock: Monotonic time source for health caching.
        """
        self._api_key = api_key
        self._retry = retry_policy or RetryPolicy()
        self._rate_limiter = rate_limiter or InMemoryRateLimiter()
        self._health_check_interval = health_check_interval
        self._clock = clock or time.monotonic
        self._health: Optional[ProviderHealth] = None
        self._health_checked_at: Optional[float] = None

    # =========================================================================
    # Capability
    # =========================================================================

    @property
    def available(self) -> bool:
        """True when a credential is configured."""
        return bool(self._api_key)

    def supports(self, operation: OperationKind) -> bool:
        return operation in self.operations

    # =========================================================================
    # Generation
    # =========================================================================

    async def generate(self, prompt: str, options: Optional[Mapping[str, Any]] = None) -> str:
        """
        Produce output for ``prompt`` (text, or an image URL).

        Args:
            prompt: Fully built upstream prompt.
            options: Operation tunables; each adapter reads the keys it knows.

        Returns:
            Raw provider output as a string.

        Raises:
            AuthenticationError: No credential configured, or rejected.
            ProviderRateLimitedError: Still throttled after the cooldown.
            ProviderError: Transport failure after retries are exhausted.
        """
        if not self.available:
            raise AuthenticationError(
                f"{self.name} API key not configured", provider=self.name
            )
        opts = dict(options or {})
        return await self._retry.run(lambda: self._request(prompt, opts), self.name)

    @abstractmethod
    async def _request(self, prompt: str, options: Mapping[str, Any]) -> str:
        """
        Perform exactly one upstream call.

        Raises:
            ProviderError: Or a subclass, for every failure.
        """
        ...

    # =========================================================================
    # Health and Quota
    # =========================================================================

    async def _probe(self) -> None:
        """Lightweight liveness call. Default: one unretried minimal request."""
        await self._request(HEALTH_PROBE_PROMPT, {})

    async def check_health(self, force: bool = False) -> ProviderHealth:
        """
        Liveness of the backend, cached for ``health_check_interval``.

        Args:
            force: Ignore a cached result and probe now.
        """
        now = self._clock()
        if (
            not force
            and self._health is not None
            and self._health_checked_at is not None
            and now - self._health_checked_at < self._health_check_interval
        ):
            return self._health

        checked = datetime.now(timezone.utc)
        if not self.available:
            health = ProviderHealth(
                provider=self.name,
                available=False,
                healthy=False,
                last_check=checked,
                error="API key not configured",
            )
        else:
            try:
                await self._probe()
                health = ProviderHealth(
                    provider=self.name, available=True, healthy=True, last_check=checked
                )
            except ProviderError as e:
                health = ProviderHealth(
                    provider=self.name,
                    available=True,
                    healthy=False,
                    last_check=checked,
                    error=e.message,
                )

        self._health = health
        self._health_checked_at = now
        return health

    async def quota_info(self) -> QuotaInfo:
        """Remaining local budget for this provider's current window."""
        window = await self._rate_limiter.window(self.name)
        return QuotaInfo(
            provider=self.name,
            remaining_requests=window.remaining,
            limit=window.limit,
            window_seconds=window.window_seconds,
            reset_at=datetime.fromtimestamp(window.reset_at, tz=timezone.utc),
        )

    async def aclose(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None
