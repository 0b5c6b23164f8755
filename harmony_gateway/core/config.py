"""
Core configuration module for the Harmony generation gateway.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the HARMONY_GATEWAY_ prefix.

Complex fields (provider order lists, per-provider limits, per-operation TTLs)
are read from the environment as JSON, e.g.:

    HARMONY_GATEWAY_IMAGE_PROVIDERS='["seedance", "nanobanana"]'
    HARMONY_GATEWAY_PROVIDER_RATE_LIMITS='{"gemini": 60}'

Pattern: Pydantic BaseSettings with SecretStr credentials
Pattern: Singleton via functools.lru_cache
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


KNOWN_PROVIDERS = ("gemini", "openai", "nanobanana", "seedance")
KNOWN_OPERATIONS = (
    "bio",
    "image",
    "image_variations",
    "prompt_rewrite",
    "prompt_analysis",
    "prompt_variations",
)


class Settings(BaseSettings):
    """
    Gateway settings loaded from environment variables.

    All fields use the HARMONY_GATEWAY_ prefix for environment variables.
    Example: HARMONY_GATEWAY_MAX_RETRIES=5
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="harmony-generation-gateway",
        description="Name of the service for logging and identification",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the structured diagnostic stream",
    )

    # =========================================================================
    # Provider Credentials
    # SecretStr masks values in logs/repr, use .get_secret_value() to access
    # =========================================================================
    gemini_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Google Generative Language API key (bio generation)",
    )
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key (prompt rewrite and analysis)",
    )
    openai_organization: str | None = Field(
        default=None,
        description="Optional OpenAI organization id",
    )
    nanobanana_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Nano Banana image API key",
    )
    seedance_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Seedance image API key",
    )

    # =========================================================================
    # Upstream Endpoints and Models
    # =========================================================================
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
    )
    gemini_model: str = Field(default="gemini-pro")
    openai_base_url: str | None = Field(
        default=None,
        description="Custom OpenAI-compatible endpoint (None uses the SDK default)",
    )
    openai_model: str = Field(default="gpt-4")
    nanobanana_base_url: str = Field(default="https://api.nanobanana.com/v1")
    nanobanana_model: str = Field(default="stable-diffusion-xl")
    seedance_base_url: str = Field(default="https://api.seedance.com/v1")
    seedance_model: str = Field(default="midjourney")

    # =========================================================================
    # Provider Order per Operation (static ordering, first wins)
    # =========================================================================
    bio_providers: list[str] = Field(default_factory=lambda: ["gemini"])
    image_providers: list[str] = Field(
        default_factory=lambda: ["nanobanana", "seedance"]
    )
    prompt_providers: list[str] = Field(default_factory=lambda: ["openai"])

    # =========================================================================
    # Rate Limiting Configuration (fixed window, per provider)
    # =========================================================================
    rate_limit_requests: int = Field(
        default=100,
        ge=1,
        description="Default request limit per provider per window",
    )
    rate_limit_window_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Length of the fixed rate-limit window",
    )
    provider_rate_limits: dict[str, int] = Field(
        default_factory=dict,
        description="Per-provider overrides of rate_limit_requests",
    )

    # =========================================================================
    # Cache Configuration
    # =========================================================================
    cache_enabled: bool = Field(default=True)
    cache_ttl_seconds: int = Field(
        default=3600,
        ge=1,
        description="Default time-to-live for cached generation payloads",
    )
    operation_cache_ttls: dict[str, int] = Field(
        default_factory=dict,
        description="Per-operation overrides of cache_ttl_seconds",
    )

    # =========================================================================
    # Retry Configuration
    # =========================================================================
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first attempt for transport failures",
    )
    retry_base_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay of the exponential backoff",
    )
    rate_limit_cooldown_seconds: float = Field(
        default=60.0,
        ge=0.0,
        description="Wait after an upstream rate-limit signal without Retry-After",
    )
    max_rate_limit_wait_seconds: float = Field(
        default=300.0,
        ge=0.0,
        description="Upper bound on honoring an upstream Retry-After value",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Per-call timeout for upstream requests",
    )
    health_check_interval_seconds: float = Field(
        default=300.0,
        ge=0.0,
        description="How long a provider health probe result is reused",
    )

    # =========================================================================
    # Shared State Backend
    # =========================================================================
    state_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Where rate-limit windows, cache entries and logs live",
    )
    redis_url: str = Field(default="redis://localhost:6379")
    log_persist_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound on one generation-log write",
    )

    model_config = {
        "env_prefix": "HARMONY_GATEWAY_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # =========================================================================
    # Field Validators
    # =========================================================================
    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://")):
            raise ValueError("Redis URL must start with redis:// or rediss://")
        return v

    @field_validator("bio_providers", "image_providers", "prompt_providers")
    @classmethod
    def validate_provider_order(cls, v: list[str]) -> list[str]:
        """Provider orders must be non-empty and name known providers."""
        if not v:
            raise ValueError("Provider order must name at least one provider")
        unknown = [name for name in v if name not in KNOWN_PROVIDERS]
        if unknown:
            raise ValueError(f"Unknown providers {unknown}; expected {KNOWN_PROVIDERS}")
        return v

    @field_validator("operation_cache_ttls")
    @classmethod
    def validate_operation_ttls(cls, v: dict[str, int]) -> dict[str, int]:
        for operation, ttl in v.items():
            if operation not in KNOWN_OPERATIONS:
                raise ValueError(f"Unknown operation in cache TTLs: {operation}")
            if ttl < 1:
                raise ValueError(f"Cache TTL for {operation} must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    # =========================================================================
    # Derived Lookups
    # =========================================================================
    def cache_ttl_for(self, operation: str) -> int:
        """Cache TTL for one operation kind."""
        return self.operation_cache_ttls.get(operation, self.cache_ttl_seconds)

    def api_key_for(self, provider: str) -> str:
        """Plain-text credential for a provider ("" when unset)."""
        secret: SecretStr = getattr(self, f"{provider}_api_key", SecretStr(""))
        return secret.get_secret_value()


# =============================================================================
# Settings Singleton
# =============================================================================


@lru_cache
def get_settings() -> Settings:
    """
    Get the gateway settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.

    Returns:
        Settings: The gateway settings instance.
    """
    return Settings()
