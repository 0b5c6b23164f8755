"""
Resilience Metrics

Prometheus metrics for provider attempts, fallback synthesis, cache lookups
and local rate-limit denials.

Anti-Pattern Compliance:
- AP-1: Metric names as constants
"""

from prometheus_client import Counter

# =============================================================================
# Constants (AP-1 Compliance: No duplicated string literals)
# =============================================================================

METRIC_PROVIDER_ATTEMPTS = "harmony_gateway_provider_attempts_total"
METRIC_PROVIDER_RETRIES = "harmony_gateway_provider_retries_total"
METRIC_FALLBACK_SYNTHESIZED = "harmony_gateway_fallback_synthesized_total"
METRIC_CACHE_LOOKUPS = "harmony_gateway_cache_lookups_total"
METRIC_RATE_LIMIT_DENIALS = "harmony_gateway_rate_limit_denials_total"

OUTCOME_SUCCESS = "success"
OUTCOME_FAILURE = "failure"
OUTCOME_SKIPPED = "skipped"


# =============================================================================
# Provider Attempt Metrics
# =============================================================================

PROVIDER_ATTEMPTS = Counter(
    name=METRIC_PROVIDER_ATTEMPTS,
    documentation="Provider attempts made by the fallback orchestrator",
    labelnames=["provider", "operation", "outcome"],
)

PROVIDER_RETRIES = Counter(
    name=METRIC_PROVIDER_RETRIES,
    documentation="Retries scheduled by the retry policy",
    labelnames=["provider", "reason"],
)

FALLBACK_SYNTHESIZED = Counter(
    name=METRIC_FALLBACK_SYNTHESIZED,
    documentation="Deterministic fallback results produced after provider exhaustion",
    labelnames=["operation"],
)


def record_provider_attempt(provider: str, operation: str, outcome: str) -> None:
    """
    Record one provider attempt.

    Args:
        provider: Provider name
        operation: Operation kind value (bio, image, ...)
        outcome: success, failure, or skipped (local rate limit)
    """
    PROVIDER_ATTEMPTS.labels(
        provider=provider,
        operation=operation,
        outcome=outcome,
    ).inc()


def record_retry(provider: str, reason: str) -> None:
    PROVIDER_RETRIES.labels(provider=provider, reason=reason).inc()


def record_fallback(operation: str) -> None:
    FALLBACK_SYNTHESIZED.labels(operation=operation).inc()


# =============================================================================
# Cache and Rate Limit Metrics
# =============================================================================

CACHE_LOOKUPS = Counter(
    name=METRIC_CACHE_LOOKUPS,
    documentation="Generation cache lookups by result",
    labelnames=["operation", "result"],
)

RATE_LIMIT_DENIALS = Counter(
    name=METRIC_RATE_LIMIT_DENIALS,
    documentation="Requests refused by the local per-provider rate limiter",
    labelnames=["provider"],
)


def record_cache_lookup(operation: str, hit: bool) -> None:
    CACHE_LOOKUPS.labels(operation=operation, result="hit" if hit else "miss").inc()


def record_rate_limit_denial(provider: str) -> None:
    RATE_LIMIT_DENIALS.labels(provider=provider).inc()
