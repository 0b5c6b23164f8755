"""
Fallback Orchestrator - ordered multi-provider attempts.

Walks a caller's ordered provider list, first success wins:

    provider 1 -> provider 2 -> ... -> deterministic fallback

For each provider, in order:
1. Local admission: RateLimiter.acquire(). A full window skips the provider
   (recorded as ``rate_limit_local``) without calling it.
2. The adapter call, with its RetryPolicy inside.
3. ``parse`` of the raw output; a parse failure counts against the provider.

Attempts are strictly sequential. When every provider has failed, the
internal AllProvidersExhaustedError is turned into a fallback result with
``provider="fallback"``; it never reaches a facade caller.

Anti-Pattern Compliance:
- AP-1: Constants for outcome labels (see metrics.py)
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from harmony_gateway.core.exceptions import (
    AllProvidersExhaustedError,
    InvalidProviderResponseError,
    LocalRateLimitError,
)
from harmony_gateway.models.domain import (
    FALLBACK_PROVIDER,
    GenerationResult,
    OperationKind,
    ProviderAttemptError,
)
from harmony_gateway.observability.logging import get_logger
from harmony_gateway.providers.base import ProviderAdapter
from harmony_gateway.providers.registry import ProviderRegistry
from harmony_gateway.resilience.metrics import (
    OUTCOME_FAILURE,
    OUTCOME_SKIPPED,
    OUTCOME_SUCCESS,
    record_fallback,
    record_provider_attempt,
    record_rate_limit_denial,
)
from harmony_gateway.resilience.rate_limiter import RateLimiter

logger = get_logger(__name__)

T = TypeVar("T")

Attempt = tuple[str, Callable[[], Awaitable[T]]]


# =============================================================================
# Ordered-attempt Reduction
# =============================================================================


@dataclass
class AttemptOutcome(Generic[T]):
    """First success of an ordered attempt list, or every failure."""

    value: Optional[T] = None
    provider: Optional[str] = None
    errors: list[ProviderAttemptError] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.provider is not None


def to_attempt_error(provider: str, error: BaseException) -> ProviderAttemptError:
    """Record shape for one failed attempt."""
    return ProviderAttemptError(
        provider=provider,
        error=getattr(error, "message", None) or str(error) or type(error).__name__,
        kind=getattr(error, "kind", "unexpected"),
    )


async def attempt_in_order(
    attempts: Sequence[Attempt], operation: str = ""
) -> AttemptOutcome:
    """
    Run ``attempts`` one at a time; stop at the first that returns.

    Every failure is collected, in order, and the walk continues. This is the
    only place a provider failure is absorbed.

    Args:
        attempts: (provider name, zero-argument coroutine factory) pairs.
        operation: Operation label for metrics.
    """
    outcome: AttemptOutcome = AttemptOutcome()
    for name, call in attempts:
        try:
            value = await call()
        except LocalRateLimitError as e:
            record_provider_attempt(name, operation, OUTCOME_SKIPPED)
            outcome.errors.append(to_attempt_error(name, e))
            logger.info("provider_skipped", provider=name, reason="local_rate_limit")
            continue
        except Exception as e:
            # Any provider failure, typed or not, moves on to the next provider
            record_provider_attempt(name, operation, OUTCOME_FAILURE)
            outcome.errors.append(to_attempt_error(name, e))
            logger.warning("provider_failed", provider=name, error=str(e))
            continue
        record_provider_attempt(name, operation, OUTCOME_SUCCESS)
        outcome.value = value
        outcome.provider = name
        return outcome
    return outcome


# =============================================================================
# Orchestrator
# =============================================================================


class FallbackOrchestrator:
    """
    Drives one generation across the ordered providers for an operation.

    Attributes:
        registry: Resolves provider names to adapters.
        rate_limiter: Local per-provider admission.

    Example:
        >>> result = await orchestrator.attempt(
        ...     OperationKind.IMAGE,
        ...     prompt,
        ...     {"size": "512x512"},
        ...     generation_id=gid,
        ...     providers=["nanobanana", "seedance"],
        ...     fallback=lambda: fallback_image_url(request, prompt),
        ... )
    """

    def __init__(self, registry: ProviderRegistry, rate_limiter: RateLimiter) -> None:
        self.registry = registry
        self.rate_limiter = rate_limiter

    def _attempt_for(
        self,
        adapter: ProviderAdapter,
        prompt: str,
        options: Mapping[str, Any],
        parse: Optional[Callable[[str], Any]],
    ) -> Callable[[], Awaitable[Any]]:
        async def call() -> Any:
            if not await self.rate_limiter.acquire(adapter.name):
                record_rate_limit_denial(adapter.name)
                window = await self.rate_limiter.window(adapter.name)
                raise LocalRateLimitError(
                    f"Local rate limit reached for {adapter.name}",
                    provider=adapter.name,
                    limit=window.limit,
                )
            raw = await adapter.generate(prompt, options)
            if parse is None:
                return raw
            try:
                return parse(raw)
            except (ValueError, KeyError, TypeError) as e:
                raise InvalidProviderResponseError(
                    f"Unusable {adapter.name} output: {e}", provider=adapter.name
                ) from e

        return call

    async def run(
        self,
        operation: OperationKind,
        prompt: str,
        options: Mapping[str, Any],
        providers: Optional[Sequence[str]] = None,
        parse: Optional[Callable[[str], Any]] = None,
    ) -> AttemptOutcome:
        """
        Try the providers; raise if none succeeded.

        Raises:
            AllProvidersExhaustedError: Carrying every attempt's error.
        """
        resolved = self.registry.resolve(operation, providers)
        attempts = [
            (adapter.name, self._attempt_for(adapter, prompt, options, parse))
            for adapter in resolved.adapters
        ]
        outcome = await attempt_in_order(attempts, operation.value)
        outcome.errors = resolved.rejected + outcome.errors
        if not outcome.succeeded:
            raise AllProvidersExhaustedError(
                f"All providers failed for {operation.value}", errors=outcome.errors
            )
        return outcome

    async def attempt(
        self,
        operation: OperationKind,
        prompt: str,
        options: Mapping[str, Any],
        *,
        generation_id: str,
        fallback: Callable[[], Any],
        providers: Optional[Sequence[str]] = None,
        parse: Optional[Callable[[str], Any]] = None,
    ) -> GenerationResult:
        """
        Generate with fallback. Never raises for provider failures.

        Args:
            operation: Operation kind, selects capable adapters.
            prompt: Upstream prompt.
            options: Adapter tunables.
            generation_id: Id for the result.
            fallback: Deterministic synthesizer used after exhaustion.
            providers: Ordered preference (registry default when None).
            parse: Converts raw provider output into the payload.

        Returns:
            GenerationResult from the first successful provider, or from
            ``fallback`` with provider "fallback".
        """
        try:
            outcome = await self.run(operation, prompt, options, providers, parse)
        except AllProvidersExhaustedError as e:
            record_fallback(operation.value)
            logger.warning(
                "providers_exhausted",
                operation=operation.value,
                attempted=[err.provider for err in e.errors],
            )
            return GenerationResult(
                payload=fallback(),
                provider=FALLBACK_PROVIDER,
                generation_id=generation_id,
                errors=e.errors,
            )
        return GenerationResult(
            payload=outcome.value,
            provider=outcome.provider,
            generation_id=generation_id,
            errors=outcome.errors,
        )
