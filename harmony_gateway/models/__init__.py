"""Pydantic models for the Harmony generation gateway."""

from harmony_gateway.models.domain import (
    BATCH_PROVIDER,
    FALLBACK_PROVIDER,
    CachedPayload,
    CacheEntry,
    CacheStats,
    GenerationLogEntry,
    GenerationRequest,
    GenerationResult,
    OperationKind,
    ProviderAttemptError,
    ProviderHealth,
    QuotaInfo,
    RateLimiterWindow,
)
from harmony_gateway.models.requests import (
    ArtistInfo,
    BioOptions,
    Complexity,
    ImageOptions,
    ImageRequest,
    PromptAnalysisRequest,
    PromptOptions,
    PromptRewriteRequest,
    TargetAudience,
)
from harmony_gateway.models.responses import (
    BioResult,
    GenerationStats,
    ImageResult,
    ImageVariation,
    ImageVariationsResult,
    OperationSuccessRate,
    PromptAnalysisResult,
    PromptRewriteResult,
    PromptVariation,
    PromptVariationsResult,
)

__all__ = [
    "BATCH_PROVIDER",
    "FALLBACK_PROVIDER",
    "CachedPayload",
    "CacheEntry",
    "CacheStats",
    "GenerationLogEntry",
    "GenerationRequest",
    "GenerationResult",
    "OperationKind",
    "ProviderAttemptError",
    "ProviderHealth",
    "QuotaInfo",
    "RateLimiterWindow",
    "ArtistInfo",
    "BioOptions",
    "Complexity",
    "ImageOptions",
    "ImageRequest",
    "PromptAnalysisRequest",
    "PromptOptions",
    "PromptRewriteRequest",
    "TargetAudience",
    "BioResult",
    "GenerationStats",
    "ImageResult",
    "ImageVariation",
    "ImageVariationsResult",
    "OperationSuccessRate",
    "PromptAnalysisResult",
    "PromptRewriteResult",
    "PromptVariation",
    "PromptVariationsResult",
]
