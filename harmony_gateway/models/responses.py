"""
Operation Output Models

What each facade returns to its caller. Every result carries the provider
that produced it ("fallback" for synthesized output) and the generation id
under which the call was logged.
"""

from typing import Any

from pydantic import BaseModel, Field

from harmony_gateway.models.domain import ProviderAttemptError


class BioResult(BaseModel):
    bio: str
    provider: str
    generation_id: str
    errors: list[ProviderAttemptError] = Field(default_factory=list)
    cached: bool = False


class ImageResult(BaseModel):
    image_url: str
    provider: str
    generation_id: str
    errors: list[ProviderAttemptError] = Field(default_factory=list)
    cached: bool = False


class ImageVariation(BaseModel):
    image_url: str
    provider: str
    generation_id: str
    variation: int


class ImageVariationsResult(BaseModel):
    """
    A batch of image variations.

    ``success`` is True when at least one variation came from a real provider.
    """

    variations: list[ImageVariation]
    errors: list[ProviderAttemptError] = Field(default_factory=list)
    success: bool
    generation_id: str


class PromptRewriteResult(BaseModel):
    rewritten_prompt: str
    analysis: str
    improvements: list[str] = Field(default_factory=list)
    provider: str
    generation_id: str
    errors: list[ProviderAttemptError] = Field(default_factory=list)
    cached: bool = False


class PromptAnalysisResult(BaseModel):
    quality_score: float
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    platform_effectiveness: dict[str, Any] = Field(default_factory=dict)
    provider: str
    generation_id: str
    errors: list[ProviderAttemptError] = Field(default_factory=list)
    cached: bool = False


class PromptVariation(BaseModel):
    prompt: str
    provider: str
    generation_id: str
    variation: int


class PromptVariationsResult(BaseModel):
    """A batch of prompt variations; ``success`` as for image variations."""

    variations: list[PromptVariation]
    errors: list[ProviderAttemptError] = Field(default_factory=list)
    success: bool
    generation_id: str


class OperationSuccessRate(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Percentage of successful calls, rounded to two decimals."""
        if not self.total:
            return 0.0
        return round(self.successful * 100.0 / self.total, 2)


class GenerationStats(BaseModel):
    """
    One user's generation activity, aggregated over the generation log.

    ``by_operation`` and ``success_rates`` are keyed by operation kind;
    ``by_provider`` counts the provider recorded on each entry, including
    "fallback" and "batch".
    """

    user_id: str
    total_generations: int = 0
    by_operation: dict[str, int] = Field(default_factory=dict)
    by_provider: dict[str, int] = Field(default_factory=dict)
    success_rates: dict[str, OperationSuccessRate] = Field(default_factory=dict)
