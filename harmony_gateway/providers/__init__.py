"""Generation backend adapters and their registry."""

from harmony_gateway.providers.base import ProviderAdapter
from harmony_gateway.providers.fake import FakeProvider
from harmony_gateway.providers.gemini import GeminiAdapter
from harmony_gateway.providers.nanobanana import NanoBananaAdapter
from harmony_gateway.providers.openai import OpenAIAdapter
from harmony_gateway.providers.registry import (
    ProviderRegistry,
    ResolvedProviders,
    create_provider_registry,
)
from harmony_gateway.providers.rest import RestProviderAdapter
from harmony_gateway.providers.seedance import SeedanceAdapter

__all__ = [
    "ProviderAdapter",
    "RestProviderAdapter",
    "FakeProvider",
    "GeminiAdapter",
    "NanoBananaAdapter",
    "OpenAIAdapter",
    "SeedanceAdapter",
    "ProviderRegistry",
    "ResolvedProviders",
    "create_provider_registry",
]
