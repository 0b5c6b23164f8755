"""
Unit tests for harmony_gateway/core/exceptions.py.
"""

import pytest

from harmony_gateway.core.exceptions import (
    AllProvidersExhaustedError,
    AuthenticationError,
    CacheError,
    ErrorCode,
    GenerationValidationError,
    HarmonyGatewayException,
    InvalidProviderResponseError,
    LocalRateLimitError,
    LogPersistenceError,
    ProviderError,
    ProviderRateLimitedError,
)


class TestHarmonyGatewayException:

    def test_message_and_default_code(self) -> None:
        exc = HarmonyGatewayException("boom")

        assert str(exc) == "boom"
        assert exc.message == "boom"
        assert exc.error_code == ErrorCode.GATEWAY_ERROR

    def test_extra_attributes(self) -> None:
        exc = HarmonyGatewayException("boom", request_id="r-1")

        assert exc.request_id == "r-1"

    def test_error_codes_are_strings(self) -> None:
        assert ErrorCode.CACHE_ERROR == "CACHE_ERROR"


class TestProviderErrors:

    @pytest.mark.parametrize(
        "exc_cls, kind, code",
        [
            (ProviderError, "transport", ErrorCode.PROVIDER_ERROR),
            (ProviderRateLimitedError, "rate_limited", ErrorCode.PROVIDER_RATE_LIMITED),
            (AuthenticationError, "authentication", ErrorCode.AUTHENTICATION_ERROR),
            (InvalidProviderResponseError, "invalid_response", ErrorCode.INVALID_RESPONSE),
        ],
    )
    def test_kind_and_code(self, exc_cls, kind, code) -> None:
        exc = exc_cls("failed", provider="gemini")

        assert isinstance(exc, ProviderError)
        assert exc.provider == "gemini"
        assert exc.kind == kind
        assert exc.error_code == code

    def test_rate_limited_defaults(self) -> None:
        exc = ProviderRateLimitedError("slow down", provider="openai", retry_after=2.5)

        assert exc.status_code == 429
        assert exc.retry_after == 2.5

    def test_status_code_carried(self) -> None:
        assert ProviderError("503", provider="seedance", status_code=503).status_code == 503


class TestOtherErrors:

    def test_validation_error_field(self) -> None:
        exc = GenerationValidationError("name is required", field="name", value="")

        assert exc.field == "name"
        assert exc.value == ""
        assert exc.error_code == ErrorCode.VALIDATION_ERROR

    def test_local_rate_limit(self) -> None:
        exc = LocalRateLimitError("window full", provider="gemini", retry_after=12, limit=100)

        assert exc.kind == "rate_limit_local"
        assert not isinstance(exc, ProviderError)
        assert (exc.provider, exc.retry_after, exc.limit) == ("gemini", 12, 100)

    def test_exhausted_copies_errors(self) -> None:
        errors = ["a", "b"]
        exc = AllProvidersExhaustedError("all failed", errors=errors)
        errors.append("c")

        assert exc.errors == ["a", "b"]
        assert AllProvidersExhaustedError("x").errors == []

    def test_side_channel_errors(self) -> None:
        assert LogPersistenceError("x", generation_id="g1").generation_id == "g1"
        assert CacheError("x").error_code == ErrorCode.CACHE_ERROR
