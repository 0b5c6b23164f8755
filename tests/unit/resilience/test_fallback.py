"""
Tests for the FallbackOrchestrator and the ordered-attempt reduction.

This module tests:
- attempt_in_order: first success wins, failures collected in order
- Local rate-limit denials skip a provider without calling it
- Parse failures count against the provider
- Exhaustion turns into a deterministic fallback result
- Unknown / incapable provider names are recorded, not raised
"""

import pytest
from unittest.mock import AsyncMock

from harmony_gateway.core.exceptions import (
    AllProvidersExhaustedError,
    AuthenticationError,
    LocalRateLimitError,
    ProviderError,
)
from harmony_gateway.models.domain import FALLBACK_PROVIDER, OperationKind
from harmony_gateway.providers.fake import FakeProvider
from harmony_gateway.providers.registry import ProviderRegistry
from harmony_gateway.resilience.fallback import (
    FallbackOrchestrator,
    attempt_in_order,
    to_attempt_error,
)
from harmony_gateway.resilience.rate_limiter import InMemoryRateLimiter
from harmony_gateway.resilience.retry import RetryPolicy


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def no_retry():
    return RetryPolicy(max_retries=0)


@pytest.fixture
def limiter(clock):
    return InMemoryRateLimiter(default_limit=100, clock=clock)


def build_orchestrator(limiter, *providers, default_order=None):
    registry = ProviderRegistry(
        providers={p.name: p for p in providers},
        default_order=default_order or {},
    )
    return FallbackOrchestrator(registry, limiter)


# =============================================================================
# attempt_in_order
# =============================================================================


class TestAttemptInOrder:

    @pytest.mark.asyncio
    async def test_first_success_wins(self) -> None:
        second = AsyncMock(return_value="b")

        outcome = await attempt_in_order([("a", AsyncMock(return_value="a")), ("b", second)])

        assert outcome.succeeded
        assert outcome.provider == "a"
        assert outcome.value == "a"
        second.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failures_collected_in_order(self) -> None:
        outcome = await attempt_in_order(
            [
                ("a", AsyncMock(side_effect=ProviderError("a down", provider="a"))),
                ("b", AsyncMock(side_effect=RuntimeError("b broke"))),
                ("c", AsyncMock(return_value="c")),
            ]
        )

        assert outcome.provider == "c"
        assert [e.provider for e in outcome.errors] == ["a", "b"]
        assert outcome.errors[0].kind == "transport"
        assert outcome.errors[1].kind == "unexpected"

    @pytest.mark.asyncio
    async def test_all_failing_reports_every_error(self) -> None:
        outcome = await attempt_in_order(
            [("a", AsyncMock(side_effect=ProviderError("down", provider="a")))]
        )

        assert not outcome.succeeded
        assert outcome.value is None
        assert len(outcome.errors) == 1

    @pytest.mark.asyncio
    async def test_empty_attempt_list(self) -> None:
        outcome = await attempt_in_order([])

        assert not outcome.succeeded
        assert outcome.errors == []

    def test_to_attempt_error_uses_exception_kind(self) -> None:
        error = to_attempt_error("gemini", AuthenticationError("no key", provider="gemini"))

        assert error.provider == "gemini"
        assert error.error == "no key"
        assert error.kind == "authentication"


# =============================================================================
# Orchestrator
# =============================================================================


class TestFallbackOrchestrator:

    @pytest.mark.asyncio
    async def test_returns_first_successful_provider(self, limiter, no_retry) -> None:
        gemini = FakeProvider(name="gemini", response="A bio", retry_policy=no_retry)
        orchestrator = build_orchestrator(limiter, gemini)

        result = await orchestrator.attempt(
            OperationKind.BIO,
            "prompt",
            {},
            generation_id="g1",
            providers=["gemini"],
            fallback=lambda: "fallback bio",
        )

        assert result.provider == "gemini"
        assert result.payload == "A bio"
        assert result.generation_id == "g1"
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_falls_through_to_next_provider(self, limiter, no_retry) -> None:
        nano = FakeProvider(
            name="nanobanana",
            error=ProviderError("503", provider="nanobanana", status_code=503),
            retry_policy=no_retry,
        )
        seed = FakeProvider(name="seedance", response="https://img/s.png", retry_policy=no_retry)
        orchestrator = build_orchestrator(limiter, nano, seed)

        result = await orchestrator.attempt(
            OperationKind.IMAGE,
            "prompt",
            {},
            generation_id="g2",
            providers=["nanobanana", "seedance"],
            fallback=lambda: "https://fallback",
        )

        assert result.provider == "seedance"
        assert [e.provider for e in result.errors] == ["nanobanana"]

    @pytest.mark.asyncio
    async def test_exhaustion_uses_fallback(self, limiter, no_retry) -> None:
        gemini = FakeProvider(
            name="gemini", error=ProviderError("down", provider="gemini"), retry_policy=no_retry
        )
        orchestrator = build_orchestrator(limiter, gemini)

        result = await orchestrator.attempt(
            OperationKind.BIO,
            "prompt",
            {},
            generation_id="g3",
            providers=["gemini"],
            fallback=lambda: "deterministic",
        )

        assert result.provider == FALLBACK_PROVIDER
        assert result.is_fallback
        assert result.payload == "deterministic"
        assert len(result.errors) == 1

    @pytest.mark.asyncio
    async def test_run_raises_when_exhausted(self, limiter, no_retry) -> None:
        gemini = FakeProvider(
            name="gemini", error=ProviderError("down", provider="gemini"), retry_policy=no_retry
        )
        orchestrator = build_orchestrator(limiter, gemini)

        with pytest.raises(AllProvidersExhaustedError) as exc_info:
            await orchestrator.run(OperationKind.BIO, "prompt", {}, ["gemini"])

        assert exc_info.value.errors[0].provider == "gemini"

    @pytest.mark.asyncio
    async def test_local_rate_limit_skips_without_calling(self, clock, no_retry) -> None:
        limiter = InMemoryRateLimiter(default_limit=1, clock=clock)
        await limiter.acquire("nanobanana")
        nano = FakeProvider(name="nanobanana", retry_policy=no_retry)
        seed = FakeProvider(name="seedance", response="https://img/s.png", retry_policy=no_retry)
        orchestrator = build_orchestrator(limiter, nano, seed)

        result = await orchestrator.attempt(
            OperationKind.IMAGE,
            "prompt",
            {},
            generation_id="g4",
            providers=["nanobanana", "seedance"],
            fallback=lambda: "x",
        )

        assert nano.call_count == 0
        assert result.provider == "seedance"
        assert result.errors[0].kind == LocalRateLimitError.kind

    @pytest.mark.asyncio
    async def test_admission_is_recorded_before_the_call(self, limiter, no_retry) -> None:
        gemini = FakeProvider(
            name="gemini", error=ProviderError("down", provider="gemini"), retry_policy=no_retry
        )
        orchestrator = build_orchestrator(limiter, gemini)

        await orchestrator.attempt(
            OperationKind.BIO, "p", {}, generation_id="g", providers=["gemini"], fallback=str
        )

        assert await limiter.remaining("gemini") == 99

    @pytest.mark.asyncio
    async def test_parse_failure_counts_against_provider(self, limiter, no_retry) -> None:
        first = FakeProvider(name="gemini", response="not json", retry_policy=no_retry)
        second = FakeProvider(name="openai", response='{"ok": 1}', retry_policy=no_retry)
        orchestrator = build_orchestrator(limiter, first, second)

        def parse(raw: str) -> dict:
            if not raw.startswith("{"):
                raise ValueError("expected JSON")
            return {"raw": raw}

        result = await orchestrator.attempt(
            OperationKind.BIO,
            "p",
            {},
            generation_id="g",
            providers=["gemini", "openai"],
            parse=parse,
            fallback=dict,
        )

        assert result.provider == "openai"
        assert result.payload == {"raw": '{"ok": 1}'}
        assert result.errors[0].kind == "invalid_response"

    @pytest.mark.asyncio
    async def test_unknown_provider_recorded_and_skipped(self, limiter, no_retry) -> None:
        gemini = FakeProvider(name="gemini", response="bio", retry_policy=no_retry)
        orchestrator = build_orchestrator(limiter, gemini)

        result = await orchestrator.attempt(
            OperationKind.BIO,
            "p",
            {},
            generation_id="g",
            providers=["mystery", "gemini"],
            fallback=str,
        )

        assert result.provider == "gemini"
        assert result.errors[0].provider == "mystery"
        assert result.errors[0].kind == "unknown_provider"

    @pytest.mark.asyncio
    async def test_default_order_used_without_preference(self, limiter, no_retry) -> None:
        gemini = FakeProvider(name="gemini", response="g", retry_policy=no_retry)
        openai = FakeProvider(name="openai", response="o", retry_policy=no_retry)
        orchestrator = build_orchestrator(
            limiter, gemini, openai, default_order={OperationKind.BIO: ["openai", "gemini"]}
        )

        result = await orchestrator.attempt(
            OperationKind.BIO, "p", {}, generation_id="g", fallback=str
        )

        assert result.provider == "openai"
        assert gemini.call_count == 0

    @pytest.mark.asyncio
    async def test_missing_credential_moves_to_next_provider(self, limiter, no_retry) -> None:
        keyless = FakeProvider(name="gemini", api_key="", retry_policy=no_retry)
        backup = FakeProvider(name="openai", response="bio", retry_policy=no_retry)
        orchestrator = build_orchestrator(limiter, keyless, backup)

        result = await orchestrator.attempt(
            OperationKind.BIO,
            "p",
            {},
            generation_id="g",
            providers=["gemini", "openai"],
            fallback=str,
        )

        assert result.provider == "openai"
        assert result.errors[0].kind == "authentication"
        assert keyless.call_count == 0
