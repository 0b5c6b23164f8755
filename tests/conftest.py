"""
Pytest configuration for the gateway test suite.

This configuration sets up:
- Test discovery paths
- Test markers for categorization
- Shared fixtures: fake Redis, test settings, controllable clock and sleep,
  sample operation inputs
"""

import sys
from pathlib import Path

import fakeredis.aioredis
import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """
    Register custom markers for test categorization.

    - unit: Tests for individual components
    - integration: Tests wiring several components through GenerationService
    """
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Tests across several components")


# =============================================================================
# FakeRedis Fixture
# =============================================================================


@pytest.fixture
def fake_redis():
    """
    Fake async Redis client.

    fakeredis provides a Redis-compatible interface without a running server.
    """
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


# =============================================================================
# Time Control
# =============================================================================


class FakeClock:
    """Manually advanced time source for limiter, cache and health caching."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep():
    return RecordingSleep()


# =============================================================================
# Settings Fixture
# =============================================================================


@pytest.fixture
def test_settings():
    """
    Settings with fake credentials and in-memory state.

    Returns:
        Settings: Configured settings for testing
    """
    from harmony_gateway.core.config import Settings

    return Settings(
        service_name="harmony-gateway-test",
        environment="development",
        gemini_api_key="test-gemini-key",
        openai_api_key="test-openai-key",
        nanobanana_api_key="test-nanobanana-key",
        seedance_api_key="test-seedance-key",
        state_backend="memory",
        max_retries=1,
        retry_base_delay_seconds=0.01,
        rate_limit_cooldown_seconds=1,
    )


# =============================================================================
# Sample Inputs
# =============================================================================


@pytest.fixture
def artist_info():
    """Bio subject in the camelCase shape JavaScript clients send."""
    return {
        "name": "Nova",
        "genre": "electronic",
        "personalityTraits": ["curious", "bold"],
        "visualStyle": "neon cyberpunk",
        "speakingStyle": "poetic",
    }


@pytest.fixture
def image_request():
    return {"name": "Nova", "visualStyle": "neon cyberpunk", "genre": "electronic"}
