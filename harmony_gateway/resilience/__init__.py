"""
Resilience patterns for the generation gateway.

- RetryPolicy: bounded retries with exponential backoff and rate-limit cooldown
- RateLimiter: per-provider fixed windows (in-memory or Redis)
- FallbackOrchestrator (resilience.fallback): ordered provider attempts ending
  in a synthetic result; import it from its module, it depends on providers
- Prometheus metrics for attempts, retries, fallbacks and denials
"""

from harmony_gateway.resilience.rate_limiter import (
    InMemoryRateLimiter,
    RateLimiter,
    RedisRateLimiter,
)
from harmony_gateway.resilience.retry import RetryPolicy

__all__ = [
    "InMemoryRateLimiter",
    "RateLimiter",
    "RedisRateLimiter",
    "RetryPolicy",
]
