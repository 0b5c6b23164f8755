"""
Unit tests for harmony_gateway/core/config.py - Settings and its singleton.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import SecretStr, ValidationError

from harmony_gateway.core.config import Settings, get_settings


# =============================================================================
# Defaults
# =============================================================================


class TestSettingsDefaults:

    def test_service_defaults(self) -> None:
        settings = Settings()

        assert settings.service_name == "harmony-generation-gateway"
        assert settings.environment == "development"
        assert settings.state_backend == "memory"

    def test_provider_orders(self) -> None:
        settings = Settings()

        assert settings.bio_providers == ["gemini"]
        assert settings.image_providers == ["nanobanana", "seedance"]
        assert settings.prompt_providers == ["openai"]

    def test_resilience_defaults(self) -> None:
        settings = Settings()

        assert settings.rate_limit_requests == 100
        assert settings.rate_limit_window_seconds == 60.0
        assert settings.max_retries == 3
        assert settings.rate_limit_cooldown_seconds == 60.0
        assert settings.cache_ttl_seconds == 3600

    def test_api_keys_are_secret(self) -> None:
        settings = Settings(gemini_api_key="AIza-secret")

        assert isinstance(settings.gemini_api_key, SecretStr)
        assert "AIza-secret" not in repr(settings)
        assert settings.api_key_for("gemini") == "AIza-secret"

    def test_unknown_provider_key_is_empty(self) -> None:
        assert Settings().api_key_for("mystery") == ""


# =============================================================================
# Environment
# =============================================================================


class TestSettingsEnvPrefix:

    def test_loads_from_prefixed_env_vars(self) -> None:
        with patch.dict(
            os.environ,
            {
                "HARMONY_GATEWAY_MAX_RETRIES": "5",
                "HARMONY_GATEWAY_SEEDANCE_API_KEY": "sd-key",
                "HARMONY_GATEWAY_IMAGE_PROVIDERS": '["seedance", "nanobanana"]',
                "HARMONY_GATEWAY_PROVIDER_RATE_LIMITS": '{"gemini": 60}',
            },
        ):
            settings = Settings()

        assert settings.max_retries == 5
        assert settings.api_key_for("seedance") == "sd-key"
        assert settings.image_providers == ["seedance", "nanobanana"]
        assert settings.provider_rate_limits == {"gemini": 60}

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


# =============================================================================
# Validation and Lookups
# =============================================================================


class TestSettingsValidation:

    def test_redis_url_scheme(self) -> None:
        with pytest.raises(ValidationError):
            Settings(redis_url="http://localhost:6379")

    def test_rediss_accepted(self) -> None:
        assert Settings(redis_url="rediss://cache:6380").redis_url == "rediss://cache:6380"

    def test_unknown_provider_in_order(self) -> None:
        with pytest.raises(ValidationError):
            Settings(image_providers=["dalle"])

    def test_empty_provider_order(self) -> None:
        with pytest.raises(ValidationError):
            Settings(bio_providers=[])

    def test_unknown_operation_ttl(self) -> None:
        with pytest.raises(ValidationError):
            Settings(operation_cache_ttls={"video": 10})

    def test_non_positive_operation_ttl(self) -> None:
        with pytest.raises(ValidationError):
            Settings(operation_cache_ttls={"image": 0})

    def test_log_level_normalized(self) -> None:
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(max_retries=-1)

    def test_cache_ttl_lookup(self) -> None:
        settings = Settings(cache_ttl_seconds=600, operation_cache_ttls={"image": 86400})

        assert settings.cache_ttl_for("image") == 86400
        assert settings.cache_ttl_for("bio") == 600
