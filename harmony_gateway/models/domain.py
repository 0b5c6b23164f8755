"""
Domain Models - generation requests, results, cache and log records.

These are the internal value objects passed between the rate limiter, cache,
fallback orchestrator, generation logger and the operation facades. Caller-
facing input and output shapes live in requests.py and responses.py.

Pattern: Domain models as value objects (frozen Pydantic models)
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


FALLBACK_PROVIDER = "fallback"
BATCH_PROVIDER = "batch"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Operation Kinds
# =============================================================================


class OperationKind(str, Enum):
    """The logical operations the gateway exposes."""

    BIO = "bio"
    IMAGE = "image"
    IMAGE_VARIATIONS = "image_variations"
    PROMPT_REWRITE = "prompt_rewrite"
    PROMPT_ANALYSIS = "prompt_analysis"
    PROMPT_VARIATIONS = "prompt_variations"


# =============================================================================
# GenerationRequest / GenerationResult
# =============================================================================


class GenerationRequest(BaseModel):
    """
    A normalized request, built by a facade and consumed within one call.

    Attributes:
        operation: Which operation produced the request.
        parameters: Subject parameters plus tunables; this is what the cache
            key is derived from.
        providers: Ordered provider preference (first wins). Not part of the
            cache key.
    """

    operation: OperationKind
    parameters: dict[str, Any] = Field(default_factory=dict)
    providers: tuple[str, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}


class ProviderAttemptError(BaseModel):
    """One failed provider attempt, surfaced in a result's error list."""

    provider: str
    error: str
    kind: str = "transport"
    timestamp: datetime = Field(default_factory=utc_now)
    variation: Optional[int] = None

    model_config = {"frozen": True}


class GenerationResult(BaseModel):
    """
    Outcome of one orchestrated generation.

    Attributes:
        payload: Generated text, image URL, or structured dict.
        provider: Backend that produced the payload, or "fallback".
        generation_id: Unique id, also the generation log entry id.
        errors: One entry per provider that was attempted and failed.
        cached: True when the payload came from the cache.
    """

    payload: Any
    provider: str
    generation_id: str
    errors: list[ProviderAttemptError] = Field(default_factory=list)
    cached: bool = False

    @property
    def is_fallback(self) -> bool:
        return self.provider == FALLBACK_PROVIDER


# =============================================================================
# Cache Records
# =============================================================================


class CachedPayload(BaseModel):
    """What the cache stores: the payload and the provider that produced it."""

    payload: Any
    provider: str

    model_config = {"frozen": True}


class CacheEntry(BaseModel):
    """A cache slot. Visible only while now < created_at + ttl_seconds."""

    key: str
    value: CachedPayload
    created_at: float
    ttl_seconds: float

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl_seconds

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CacheStats(BaseModel):
    """Per-operation cache occupancy."""

    total_entries: int = 0
    active_entries: int = 0
    expired_entries: int = 0
    ttl_seconds: Optional[int] = None


# =============================================================================
# Rate Limiter Window
# =============================================================================


class RateLimiterWindow(BaseModel):
    """Snapshot of one provider's fixed window."""

    provider: str
    window_start: float
    count: int
    limit: int
    window_seconds: float

    @property
    def reset_at(self) -> float:
        return self.window_start + self.window_seconds

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


# =============================================================================
# Provider Health and Quota
# =============================================================================


class ProviderHealth(BaseModel):
    """Availability of one provider: credential present and last probe result."""

    provider: str
    available: bool
    healthy: bool
    last_check: Optional[datetime] = None
    error: Optional[str] = None


class QuotaInfo(BaseModel):
    """Local rate-limit budget for one provider."""

    provider: str
    remaining_requests: int
    limit: int
    window_seconds: float
    reset_at: datetime


# =============================================================================
# Generation Log Entry
# =============================================================================


class GenerationLogEntry(BaseModel):
    """
    Audit record, one per facade invocation.

    Queryable later by (user_id, operation, provider, status).
    """

    id: str
    user_id: str
    operation: OperationKind
    provider: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    error: Optional[str] = None
    errors: list[ProviderAttemptError] = Field(default_factory=list)
    duration_ms: float = 0.0
    success: bool
    cached: bool = False
    timestamp: datetime = Field(default_factory=utc_now)

    @property
    def status(self) -> str:
        return "success" if self.success else "failure"
