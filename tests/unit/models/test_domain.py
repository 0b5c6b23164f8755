"""
Tests for Domain Models

Value objects shared by the limiter, cache, orchestrator and logger.

Pattern: Domain models as value objects
"""

import pytest
from pydantic import ValidationError

from harmony_gateway.models.domain import (
    FALLBACK_PROVIDER,
    CachedPayload,
    CacheEntry,
    GenerationLogEntry,
    GenerationRequest,
    GenerationResult,
    OperationKind,
    ProviderAttemptError,
    RateLimiterWindow,
)


class TestGenerationRequest:

    def test_frozen(self) -> None:
        request = GenerationRequest(operation=OperationKind.BIO, parameters={"name": "Nova"})

        with pytest.raises(ValidationError):
            request.operation = OperationKind.IMAGE

    def test_operation_from_value(self) -> None:
        request = GenerationRequest(operation="prompt_rewrite", providers=["openai"])

        assert request.operation is OperationKind.PROMPT_REWRITE
        assert request.providers == ("openai",)


class TestGenerationResult:

    def test_is_fallback(self) -> None:
        result = GenerationResult(payload="x", provider=FALLBACK_PROVIDER, generation_id="g")

        assert result.is_fallback
        assert result.errors == []
        assert result.cached is False

    def test_real_provider_is_not_fallback(self) -> None:
        assert not GenerationResult(payload="x", provider="gemini", generation_id="g").is_fallback


class TestCacheEntry:

    def test_expiry_boundary(self) -> None:
        entry = CacheEntry(
            key="bio:abc",
            value=CachedPayload(payload="bio", provider="gemini"),
            created_at=100.0,
            ttl_seconds=60,
        )

        assert entry.expires_at == 160.0
        assert not entry.is_expired(159.9)
        assert entry.is_expired(160.0)


class TestRateLimiterWindow:

    def test_remaining_and_reset(self) -> None:
        window = RateLimiterWindow(
            provider="gemini", window_start=1000.0, count=3, limit=5, window_seconds=60
        )

        assert window.remaining == 2
        assert window.reset_at == 1060.0

    def test_remaining_never_negative(self) -> None:
        window = RateLimiterWindow(
            provider="gemini", window_start=0.0, count=7, limit=5, window_seconds=60
        )

        assert window.remaining == 0


class TestGenerationLogEntry:

    def test_status_and_defaults(self) -> None:
        entry = GenerationLogEntry(
            id="g1",
            user_id="user-1",
            operation=OperationKind.IMAGE,
            provider="seedance",
            success=True,
        )

        assert entry.status == "success"
        assert entry.timestamp.tzinfo is not None
        assert entry.cached is False

    def test_json_round_trip_keeps_attempt_errors(self) -> None:
        entry = GenerationLogEntry(
            id="g2",
            user_id="user-1",
            operation=OperationKind.BIO,
            provider=FALLBACK_PROVIDER,
            success=False,
            error="All providers failed for bio",
            errors=[ProviderAttemptError(provider="gemini", error="503", variation=2)],
        )

        restored = GenerationLogEntry.model_validate_json(entry.model_dump_json())

        assert restored.status == "failure"
        assert restored.errors[0].variation == 2
        assert restored.operation is OperationKind.BIO
