"""
Generation Service - the gateway's public surface.

GenerationService owns the shared state (provider registry, rate limiter,
cache, generation logger) and exposes every operation as an async method.
Nothing here is a module-level singleton: each service instance is built
explicitly, usually through create_generation_service(), so tests and
tenants get isolated state.

Pattern: Service Layer (orchestrates domain operations)
Pattern: Dependency Injection (registry, limiter, cache, logger)
Pattern: Factory (create_generation_service selects memory or Redis backends)
"""

from collections.abc import Awaitable, Callable
from typing import Any, Optional

import httpx
from redis.asyncio import Redis

from harmony_gateway.core.config import Settings, get_settings
from harmony_gateway.models.domain import (
    CacheStats,
    GenerationLogEntry,
    OperationKind,
    ProviderHealth,
    QuotaInfo,
)
from harmony_gateway.models.responses import (
    BioResult,
    GenerationStats,
    ImageResult,
    ImageVariationsResult,
    OperationSuccessRate,
    PromptAnalysisResult,
    PromptRewriteResult,
    PromptVariationsResult,
)
from harmony_gateway.observability.logging import configure_logging, get_logger
from harmony_gateway.providers.registry import ProviderRegistry, create_provider_registry
from harmony_gateway.resilience.fallback import FallbackOrchestrator
from harmony_gateway.resilience.rate_limiter import (
    InMemoryRateLimiter,
    RateLimiter,
    RedisRateLimiter,
)
from harmony_gateway.resilience.retry import RetryPolicy
from harmony_gateway.services.cache import (
    GenerationCache,
    InMemoryGenerationCache,
    RedisGenerationCache,
)
from harmony_gateway.services.generation_logger import (
    DEFAULT_QUERY_LIMIT,
    GenerationLogger,
    GenerationLogStore,
    InMemoryGenerationLogStore,
    RedisGenerationLogStore,
)
from harmony_gateway.services.operations import (
    DEFAULT_VARIATION_COUNT,
    BioFacade,
    ImageFacade,
    ImageVariationsFacade,
    PromptAnalysisFacade,
    PromptRewriteFacade,
    PromptVariationsFacade,
)

logger = get_logger(__name__)

STATS_PAGE_SIZE = 500


class GenerationService:
    """
    Entry point for bio, image and prompt generation.

    Attributes:
        registry: Provider adapters by name, with per-operation default order.
        rate_limiter: Local per-provider admission, shared with the adapters.
        cache: Payload cache shared by all operations.
        generation_logger: Audit sink, one entry per operation call.

    Example:
        >>> service = create_generation_service()
        >>> result = await service.generate_bio(
        ...     "user-1",
        ...     {"name": "Nova", "genre": "electronic", "personalityTraits": ["bold"],
        ...      "visualStyle": "neon", "speakingStyle": "poetic"},
        ...     {"provider": "gemini"},
        ... )
        >>> result.provider
        'gemini'
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        rate_limiter: RateLimiter,
        cache: GenerationCache,
        generation_logger: GenerationLogger,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.registry = registry
        self.rate_limiter = rate_limiter
        self.cache = cache
        self.generation_logger = generation_logger

        orchestrator = FallbackOrchestrator(registry, rate_limiter)

        def facade_kwargs(operation: OperationKind) -> dict[str, Any]:
            return {
                "orchestrator": orchestrator,
                "cache": cache,
                "generation_logger": generation_logger,
                "cache_enabled": self.settings.cache_enabled,
                "cache_ttl_seconds": self.settings.cache_ttl_for(operation.value),
            }

        self.bio = BioFacade(**facade_kwargs(OperationKind.BIO))
        self.image = ImageFacade(**facade_kwargs(OperationKind.IMAGE))
        self.prompt_rewrite = PromptRewriteFacade(**facade_kwargs(OperationKind.PROMPT_REWRITE))
        self.prompt_analysis = PromptAnalysisFacade(
            **facade_kwargs(OperationKind.PROMPT_ANALYSIS)
        )
        self.image_variations = ImageVariationsFacade(self.image, generation_logger)
        self.prompt_variations = PromptVariationsFacade(self.prompt_rewrite, generation_logger)

    # =========================================================================
    # Operations
    # =========================================================================

    async def generate_bio(
        self, user_id: str, artist_info: Any, options: Any = None
    ) -> BioResult:
        """
        Artist bio text.

        Args:
            user_id: Caller, recorded in the generation log.
            artist_info: ArtistInfo or mapping with name, genre,
                personality_traits, visual_style, speaking_style.
            options: BioOptions or mapping (provider/providers, template,
                complexity, target_audience, custom_prompt ...).

        Raises:
            GenerationValidationError: A required field is missing or invalid.
        """
        return await self.bio.run(user_id, artist_info, options)

    async def generate_image(
        self, user_id: str, image_request: Any, options: Any = None
    ) -> ImageResult:
        return await self.image.run(user_id, image_request, options)

    async def generate_image_variations(
        self,
        user_id: str,
        request: Any,
        count: int = DEFAULT_VARIATION_COUNT,
        options: Any = None,
    ) -> ImageVariationsResult:
        return await self.image_variations.run(user_id, request, count, options)

    async def rewrite_prompt(
        self, user_id: str, prompt_request: Any, options: Any = None
    ) -> PromptRewriteResult:
        return await self.prompt_rewrite.run(user_id, prompt_request, options)

    async def analyze_prompt(
        self, user_id: str, prompt: Any, options: Any = None
    ) -> PromptAnalysisResult:
        """Score a prompt; ``prompt`` is a string or a PromptAnalysisRequest."""
        return await self.prompt_analysis.run(user_id, prompt, options)

    async def generate_prompt_variations(
        self,
        user_id: str,
        base_prompt: Any,
        options: Any = None,
        count: int = DEFAULT_VARIATION_COUNT,
    ) -> PromptVariationsResult:
        return await self.prompt_variations.run(user_id, base_prompt, options, count)

    # =========================================================================
    # Provider Status
    # =========================================================================

    async def check_service_availability(self, force: bool = False) -> dict[str, ProviderHealth]:
        """Credential presence and (cached) probe result per provider."""
        return {
            name: await adapter.check_health(force=force)
            for name, adapter in self.registry.providers.items()
        }

    async def get_service_quotas(self) -> dict[str, QuotaInfo]:
        return {
            name: await adapter.quota_info()
            for name, adapter in self.registry.providers.items()
        }

    # =========================================================================
    # Cache Management
    # =========================================================================

    async def get_cache_stats(self) -> dict[str, CacheStats]:
        """Occupancy per operation, each with its configured TTL."""
        stats = await self.cache.stats()
        for operation, entry in stats.items():
            entry.ttl_seconds = self.settings.cache_ttl_for(operation)
        return stats

    async def clear_all_caches(self) -> None:
        removed = await self.cache.clear()
        logger.info("cache_cleared", removed=removed)

    # =========================================================================
    # Generation History
    # =========================================================================

    async def get_generation_history(
        self,
        user_id: str,
        operation: Optional[OperationKind] = None,
        provider: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
        offset: int = 0,
    ) -> list[GenerationLogEntry]:
        """
        A user's generation log, newest first.

        Entries still being persisted in the background are not visible yet;
        call ``generation_logger.flush()`` first when that matters.
        """
        return await self.generation_logger.store.query(
            user_id,
            operation=operation,
            provider=provider,
            status=status,
            limit=limit,
            offset=offset,
        )

    async def get_generation(self, generation_id: str) -> Optional[GenerationLogEntry]:
        return await self.generation_logger.store.get(generation_id)

    async def delete_generation(self, generation_id: str, user_id: str) -> bool:
        """
        Remove one of a user's log entries.

        Returns False when the entry does not exist or belongs to another user.
        """
        store = self.generation_logger.store
        entry = await store.get(generation_id)
        if entry is None or entry.user_id != user_id:
            return False
        deleted = await store.delete(generation_id)
        if deleted:
            logger.info("generation_deleted", generation_id=generation_id, user_id=user_id)
        return deleted

    async def get_service_stats(self, user_id: str) -> GenerationStats:
        """Counts by operation and provider, plus per-operation success rates."""
        stats = GenerationStats(user_id=user_id)
        offset = 0
        while True:
            page = await self.generation_logger.store.query(
                user_id, limit=STATS_PAGE_SIZE, offset=offset
            )
            for entry in page:
                operation = entry.operation.value
                stats.total_generations += 1
                stats.by_operation[operation] = stats.by_operation.get(operation, 0) + 1
                stats.by_provider[entry.provider] = stats.by_provider.get(entry.provider, 0) + 1
                rate = stats.success_rates.setdefault(operation, OperationSuccessRate())
                rate.total += 1
                if entry.success:
                    rate.successful += 1
                else:
                    rate.failed += 1
            if len(page) < STATS_PAGE_SIZE:
                return stats
            offset += STATS_PAGE_SIZE

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def aclose(self) -> None:
        """Flush pending log writes and close provider connections."""
        await self.generation_logger.aclose()
        await self.registry.aclose()


# =============================================================================
# Factory
# =============================================================================


def create_generation_service(
    settings: Optional[Settings] = None,
    redis_client: Optional[Redis] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> GenerationService:
    """
    Build a GenerationService from settings.

    With ``state_backend="redis"`` the rate limiter, cache and generation log
    live in Redis so several processes share them; otherwise they are
    process-local.

    Args:
        settings: Gateway settings (default: get_settings()).
        redis_client: Client to use for the Redis backends (default: built
            from settings.redis_url).
        transport: httpx transport for the REST adapters (tests).
        sleep: Delay function for the retry policy (tests).
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, force=True)

    limits = {
        "default_limit": settings.rate_limit_requests,
        "window_seconds": settings.rate_limit_window_seconds,
        "limits": settings.provider_rate_limits,
    }
    rate_limiter: RateLimiter
    cache: GenerationCache
    store: GenerationLogStore
    if settings.state_backend == "redis":
        redis_client = redis_client or Redis.from_url(settings.redis_url)
        rate_limiter = RedisRateLimiter(redis_client, **limits)
        cache = RedisGenerationCache(redis_client)
        store = RedisGenerationLogStore(redis_client)
    else:
        rate_limiter = InMemoryRateLimiter(**limits)
        cache = InMemoryGenerationCache()
        store = InMemoryGenerationLogStore()

    retry_policy = RetryPolicy.from_settings(settings, sleep=sleep)
    registry = create_provider_registry(settings, rate_limiter, retry_policy, transport=transport)

    logger.info(
        "generation_service_created",
        service=settings.service_name,
        environment=settings.environment,
        state_backend=settings.state_backend,
        providers=registry.get_provider_names(),
    )
    return GenerationService(
        registry=registry,
        rate_limiter=rate_limiter,
        cache=cache,
        generation_logger=GenerationLogger(store, settings.log_persist_timeout_seconds),
        settings=settings,
    )
