"""Provider Registry - named adapters and per-operation default order.

The registry resolves a caller's ordered provider preference into adapters.
Names it does not know, or adapters that cannot serve the operation, are
reported back rather than raised so the orchestrator can record them as
failed attempts and keep going.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from harmony_gateway.models.domain import OperationKind, ProviderAttemptError
from harmony_gateway.providers.base import ProviderAdapter

if TYPE_CHECKING:
    import httpx

    from harmony_gateway.core.config import Settings
    from harmony_gateway.resilience.rate_limiter import RateLimiter
    from harmony_gateway.resilience.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class ResolvedProviders:
    """Adapters to attempt, in order, plus names that could not be used."""

    adapters: list[ProviderAdapter] = field(default_factory=list)
    rejected: list[ProviderAttemptError] = field(default_factory=list)


class ProviderRegistry:
    """Registry of provider adapters keyed by name.

    Attributes:
        providers: Dictionary mapping provider names to adapters.
        default_order: Provider order per operation when a caller gives none.

    Example:
        >>> registry = ProviderRegistry(
        ...     providers={"nanobanana": nano, "seedance": seed},
        ...     default_order={OperationKind.IMAGE: ["nanobanana", "seedance"]},
        ... )
        >>> registry.resolve(OperationKind.IMAGE).adapters
        [nano, seed]
    """

    def __init__(
        self,
        providers: Optional[Mapping[str, ProviderAdapter]] = None,
        default_order: Optional[Mapping[OperationKind, Sequence[str]]] = None,
    ) -> None:
        self._providers: dict[str, ProviderAdapter] = dict(providers or {})
        self._default_order = {
            op: tuple(names) for op, names in (default_order or {}).items()
        }

    @property
    def providers(self) -> dict[str, ProviderAdapter]:
        return self._providers.copy()

    def register_provider(self, adapter: ProviderAdapter) -> None:
        self._providers[adapter.name] = adapter
        logger.info("Registered provider: %s", adapter.name)

    def get_provider(self, name: str) -> Optional[ProviderAdapter]:
        return self._providers.get(name)

    def get_provider_names(self) -> list[str]:
        return list(self._providers.keys())

    def default_order(self, operation: OperationKind) -> tuple[str, ...]:
        """Configured order for ``operation``; every capable provider if unset."""
        if operation in self._default_order:
            return self._default_order[operation]
        return tuple(
            name for name, adapter in self._providers.items() if adapter.supports(operation)
        )

    def resolve(
        self, operation: OperationKind, names: Optional[Iterable[str]] = None
    ) -> ResolvedProviders:
        """
        Turn a provider preference into adapters, preserving order.

        Args:
            operation: Operation the adapters must support.
            names: Caller's ordered preference; default order when None/empty.
        """
        ordered = tuple(names) if names else self.default_order(operation)
        resolved = ResolvedProviders()
        seen: set[str] = set()
        for name in ordered:
            if name in seen:
                continue
            seen.add(name)
            adapter = self._providers.get(name)
            if adapter is None:
                resolved.rejected.append(
                    ProviderAttemptError(
                        provider=name, error=f"Unknown provider: {name}", kind="unknown_provider"
                    )
                )
            elif not adapter.supports(operation):
                resolved.rejected.append(
                    ProviderAttemptError(
                        provider=name,
                        error=f"{name} does not support {operation.value}",
                        kind="unknown_provider",
                    )
                )
            else:
                resolved.adapters.append(adapter)
        return resolved

    async def aclose(self) -> None:
        for adapter in self._providers.values():
            await adapter.aclose()


def create_provider_registry(
    settings: "Settings",
    rate_limiter: "RateLimiter",
    retry_policy: "RetryPolicy",
    transport: Optional["httpx.AsyncBaseTransport"] = None,
) -> ProviderRegistry:
    """Create the registry of all known backends from settings.

    Every backend is registered, configured or not: an adapter without a
    credential reports ``available=False`` and fails fast with
    AuthenticationError, which the orchestrator records before moving on.

    Args:
        settings: Gateway settings with credentials, endpoints and orders.
        rate_limiter: Shared limiter (read by each adapter's quota_info).
        retry_policy: Shared retry policy.
        transport: Optional httpx transport for the REST adapters.
    """
    from harmony_gateway.providers.gemini import GeminiAdapter
    from harmony_gateway.providers.nanobanana import NanoBananaAdapter
    from harmony_gateway.providers.openai import OpenAIAdapter
    from harmony_gateway.providers.seedance import SeedanceAdapter

    common = {
        "retry_policy": retry_policy,
        "rate_limiter": rate_limiter,
        "health_check_interval": settings.health_check_interval_seconds,
    }
    rest = {**common, "timeout_seconds": settings.request_timeout_seconds, "transport": transport}

    adapters: list[ProviderAdapter] = [
        GeminiAdapter(
            api_key=settings.api_key_for("gemini"),
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            **rest,
        ),
        OpenAIAdapter(
            api_key=settings.api_key_for("openai"),
            model=settings.openai_model,
            organization=settings.openai_organization,
            base_url=settings.openai_base_url,
            timeout_seconds=settings.request_timeout_seconds,
            **common,
        ),
        NanoBananaAdapter(
            api_key=settings.api_key_for("nanobanana"),
            model=settings.nanobanana_model,
            base_url=settings.nanobanana_base_url,
            **rest,
        ),
        SeedanceAdapter(
            api_key=settings.api_key_for("seedance"),
            model=settings.seedance_model,
            base_url=settings.seedance_base_url,
            **rest,
        ),
    ]

    for adapter in adapters:
        if not adapter.available:
            logger.warning("%s API key not configured; it will be skipped", adapter.name)

    prompt_order = settings.prompt_providers
    return ProviderRegistry(
        providers={adapter.name: adapter for adapter in adapters},
        default_order={
            OperationKind.BIO: settings.bio_providers,
            OperationKind.IMAGE: settings.image_providers,
            OperationKind.PROMPT_REWRITE: prompt_order,
            OperationKind.PROMPT_ANALYSIS: prompt_order,
        },
    )
