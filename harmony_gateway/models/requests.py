"""
Operation Input Models

Typed inputs and per-operation option structs for the generation facades.
Every model accepts both snake_case field names and the camelCase names used
by the JavaScript clients of the gateway (``visualStyle``, ``personalityTraits``,
``originalPrompt`` ...).

Required subject fields are non-empty after whitespace stripping; a facade
converts any pydantic validation failure into GenerationValidationError.

Pattern: Pydantic for validation at API boundaries
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


_INPUT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    extra="ignore",
    frozen=True,
)


class Complexity(str, Enum):
    """How much detail a generated bio should carry."""

    SIMPLE = "simple"
    STANDARD = "standard"
    DETAILED = "detailed"
    PROFESSIONAL = "professional"


class TargetAudience(str, Enum):
    """Who a generated bio is written for."""

    GENERAL = "general"
    INDUSTRY = "industry"
    FANS = "fans"
    ACADEMIC = "academic"


class _ProviderChoice(BaseModel):
    """Shared handling of the ``provider`` / ``providers`` option."""

    model_config = _INPUT_CONFIG

    providers: Optional[tuple[str, ...]] = None

    @model_validator(mode="before")
    @classmethod
    def _single_provider(cls, data: Any) -> Any:
        # {"provider": "gemini"} is shorthand for {"providers": ["gemini"]}
        if isinstance(data, dict) and "provider" in data and "providers" not in data:
            data = dict(data)
            provider = data.pop("provider")
            data["providers"] = [provider] if isinstance(provider, str) else provider
        return data


# =============================================================================
# Bio
# =============================================================================


class ArtistInfo(BaseModel):
    """Subject of a bio (and the default subject of an image)."""

    model_config = _INPUT_CONFIG

    name: str = Field(..., min_length=1)
    genre: str = Field(..., min_length=1)
    personality_traits: tuple[str, ...] = Field(..., min_length=1)
    visual_style: str = Field(..., min_length=1)
    speaking_style: str = Field(..., min_length=1)
    persona: Optional[str] = None
    influences: tuple[str, ...] = ()
    background: Optional[str] = None


class BioOptions(_ProviderChoice):
    """Recognized bio tunables and their defaults."""

    template: Optional[str] = None
    complexity: Complexity = Complexity.STANDARD
    target_audience: TargetAudience = TargetAudience.GENERAL
    custom_prompt: Optional[str] = None
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=1)


# =============================================================================
# Image
# =============================================================================


class ImageRequest(_ProviderChoice):
    """Subject of an image generation; ``provider`` may name one backend or an ordered list."""

    name: str = Field(..., min_length=1)
    visual_style: str = Field(..., min_length=1)
    genre: Optional[str] = None
    description: Optional[str] = None
    variation: Optional[int] = Field(default=None, ge=1)


class ImageOptions(_ProviderChoice):
    """Recognized image tunables and their defaults."""

    size: str = Field(default="512x512", pattern=r"^\d+x\d+$")
    steps: int = Field(default=20, ge=1, le=150)
    cfg_scale: float = Field(default=7.0, ge=0.0, le=30.0)
    quality: Literal["standard", "hd"] = "standard"
    model: Optional[str] = None

    @property
    def dimensions(self) -> tuple[int, int]:
        return parse_size(self.size)


def parse_size(size: str) -> tuple[int, int]:
    """``"WIDTHxHEIGHT"`` as a pair of ints."""
    width, _, height = size.partition("x")
    return int(width), int(height)


# =============================================================================
# Prompts
# =============================================================================


class PromptRewriteRequest(BaseModel):
    """A music-generation prompt to rewrite."""

    model_config = _INPUT_CONFIG

    original_prompt: str = Field(..., min_length=1)
    genre: Optional[str] = None
    mood: Optional[str] = None
    style: Optional[str] = None
    instruments: tuple[str, ...] = ()
    target_platform: Optional[str] = None
    variation: Optional[int] = Field(default=None, ge=1)


class PromptAnalysisRequest(BaseModel):
    """A prompt to score."""

    model_config = _INPUT_CONFIG

    prompt: str = Field(..., min_length=1)
    target_platform: Optional[str] = None


class PromptOptions(_ProviderChoice):
    """Recognized prompt rewrite / analysis tunables and their defaults."""

    model: Optional[str] = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)
    complexity: Literal["simple", "medium", "advanced"] = "medium"
    length: Literal["short", "medium", "long"] = "medium"
    target_platform: Optional[str] = None
