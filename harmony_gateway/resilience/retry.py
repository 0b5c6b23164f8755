"""
Retry Policy - bounded retries with exponential backoff.

Wraps a single provider call. Each provider adapter owns one policy; the
fallback orchestrator only ever sees the final outcome of the wrapped call.

Behaviour per failure type:
- ProviderError (transport): retried up to ``max_retries`` times, waiting
  ``base_delay * 2 ** attempt`` before retry ``attempt + 1``.
- ProviderRateLimitedError: waits the provider's ``retry_after`` (capped at
  ``max_rate_limit_wait``) or the fixed ``rate_limit_cooldown``, then makes
  one more attempt. A second rate-limit signal escalates immediately.
- AuthenticationError / InvalidProviderResponseError: never retried.

A call that always fails with a transport error is therefore invoked exactly
``max_retries + 1`` times.

Pattern: Retry with Exponential Backoff
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from harmony_gateway.core.exceptions import (
    AuthenticationError,
    InvalidProviderResponseError,
    ProviderError,
    ProviderRateLimitedError,
)
from harmony_gateway.resilience.metrics import record_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_SECONDS = 1.0
DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS = 60.0
DEFAULT_MAX_RATE_LIMIT_WAIT_SECONDS = 300.0


class RetryPolicy:
    """
    Bounded retry loop around one provider call.

    Args:
        max_retries: Retries after the first attempt for transport errors.
        base_delay: Base of the exponential backoff, in seconds.
        rate_limit_cooldown: Wait after an upstream rate-limit signal that
            carries no Retry-After value.
        max_rate_limit_wait: Upper bound on honoring Retry-After.
        sleep: Awaitable sleep function; injectable so tests run without
            wall-clock waits.

    Example:
        >>> policy = RetryPolicy(max_retries=2, base_delay=0.5)
        >>> text = await policy.run(lambda: adapter._request(prompt, options), "gemini")
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
        rate_limit_cooldown: float = DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS,
        max_rate_limit_wait: float = DEFAULT_MAX_RATE_LIMIT_WAIT_SECONDS,
        sleep: SleepFn | None = None,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.rate_limit_cooldown = rate_limit_cooldown
        self.max_rate_limit_wait = max_rate_limit_wait
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_settings(cls, settings, sleep: SleepFn | None = None) -> "RetryPolicy":
        """Build a policy from gateway Settings."""
        return cls(
            max_retries=settings.max_retries,
            base_delay=settings.retry_base_delay_seconds,
            rate_limit_cooldown=settings.rate_limit_cooldown_seconds,
            max_rate_limit_wait=settings.max_rate_limit_wait_seconds,
            sleep=sleep,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry ``attempt + 1`` (attempt is zero-based)."""
        return self.base_delay * (2**attempt)

    def cooldown_delay(self, error: ProviderRateLimitedError) -> float:
        """Wait after an upstream rate-limit signal."""
        if error.retry_after is not None and error.retry_after >= 0:
            return min(float(error.retry_after), self.max_rate_limit_wait)
        return self.rate_limit_cooldown

    async def run(self, call: Callable[[], Awaitable[T]], provider: str) -> T:
        """
        Invoke ``call`` until it succeeds or the retry budget is spent.

        Args:
            call: Zero-argument coroutine factory performing one attempt.
            provider: Provider name, for logging and metrics.

        Returns:
            Whatever ``call`` returns on its first successful attempt.

        Raises:
            ProviderError: The last error once retries are exhausted, or
                immediately for non-retryable errors.
        """
        attempt = 0
        cooled_down = False

        while True:
            try:
                return await call()
            except (AuthenticationError, InvalidProviderResponseError):
                raise
            except ProviderRateLimitedError as e:
                if cooled_down:
                    logger.warning(
                        "%s still rate limited after cooldown, escalating", provider
                    )
                    raise
                cooled_down = True
                delay = self.cooldown_delay(e)
                reason = "rate_limited"
            except ProviderError as e:
                if attempt >= self.max_retries:
                    logger.warning(
                        "%s failed after %d attempts: %s", provider, attempt + 1, e
                    )
                    raise
                delay = self.backoff_delay(attempt)
                reason = "transport"

            attempt += 1
            record_retry(provider, reason)
            logger.debug(
                "Retrying %s in %.2fs (retry %d, reason=%s)",
                provider,
                delay,
                attempt,
                reason,
            )
            await self._sleep(delay)
