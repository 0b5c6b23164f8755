"""
Operation Facades - one entry point per caller-facing generation operation.

Every single-shot facade runs the same pipeline:

    validate -> cache key -> cache hit?  -> return cached payload
                                 miss    -> FallbackOrchestrator
                                         -> cache the payload (real providers only)
             -> exactly one GenerationLogEntry

Validation failures raise GenerationValidationError before anything else
happens (no provider call, no log entry). Provider failures never reach the
caller: the orchestrator degrades to a deterministic fallback payload.

Variation facades run N sequential invocations of an inner facade, each
degrading on its own, and add one batch log entry (provider "batch").

Pattern: Template Method (OperationFacade.run with per-operation hooks)
Pattern: Facade over orchestrator, cache and generation logger
"""

import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from harmony_gateway.core.exceptions import CacheError, GenerationValidationError
from harmony_gateway.models.domain import (
    BATCH_PROVIDER,
    FALLBACK_PROVIDER,
    CachedPayload,
    GenerationLogEntry,
    GenerationRequest,
    GenerationResult,
    OperationKind,
    ProviderAttemptError,
)
from harmony_gateway.models.requests import (
    ArtistInfo,
    BioOptions,
    ImageOptions,
    ImageRequest,
    PromptAnalysisRequest,
    PromptOptions,
    PromptRewriteRequest,
)
from harmony_gateway.models.responses import (
    BioResult,
    ImageResult,
    ImageVariation,
    ImageVariationsResult,
    PromptAnalysisResult,
    PromptRewriteResult,
    PromptVariation,
    PromptVariationsResult,
)
from harmony_gateway.observability.logging import generation_context, get_logger
from harmony_gateway.prompts.fallbacks import (
    fallback_analysis,
    fallback_bio,
    fallback_image_url,
    fallback_rewrite,
)
from harmony_gateway.prompts.parsers import clean_bio_text, parse_analysis, parse_rewrite
from harmony_gateway.prompts.templates import (
    build_analysis_prompt,
    build_bio_prompt,
    build_image_prompt,
    build_rewrite_prompt,
)
from harmony_gateway.resilience.fallback import FallbackOrchestrator
from harmony_gateway.resilience.metrics import record_cache_lookup
from harmony_gateway.services.cache import (
    DEFAULT_CACHE_TTL_SECONDS,
    GenerationCache,
    make_cache_key,
)
from harmony_gateway.services.generation_logger import GenerationLogger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_VARIATION_COUNT = 3


# =============================================================================
# Input Validation
# =============================================================================


def validate_input(model: type[M], value: Any, field: str) -> M:
    """
    Coerce a typed model or plain mapping (camelCase accepted) into ``model``.

    Raises:
        GenerationValidationError: Naming the first offending field.
    """
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value if value is not None else {})
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or field
        raise GenerationValidationError(
            f"Invalid {field}: {location}: {first['msg']}",
            field=location,
        ) from e


def validate_user_id(user_id: Any) -> str:
    if not isinstance(user_id, str) or not user_id.strip():
        raise GenerationValidationError("user_id is required", field="user_id", value=user_id)
    return user_id


def validate_count(count: Any) -> int:
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise GenerationValidationError(
            "count must be a positive integer", field="count", value=count
        )
    return count


def _new_generation_id() -> str:
    return uuid.uuid4().hex


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


# =============================================================================
# Base Facade
# =============================================================================


class OperationFacade(ABC):
    """
    Shared pipeline for single-shot operations.

    Subclasses provide the hooks: input validation, upstream prompt, adapter
    options, output parser, deterministic fallback, and the response shape.

    Attributes:
        operation: Operation kind served.
        orchestrator: Multi-provider attempt driver.
        cache: Payload cache shared by all facades.
        generation_logger: Audit sink, one entry per invocation.
    """

    operation: OperationKind

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        cache: GenerationCache,
        generation_logger: GenerationLogger,
        cache_enabled: bool = True,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self.orchestrator = orchestrator
        self.cache = cache
        self.generation_logger = generation_logger
        self.cache_enabled = cache_enabled
        self.cache_ttl_seconds = cache_ttl_seconds

    # =========================================================================
    # Hooks
    # =========================================================================

    @abstractmethod
    def validate(self, request: Any, options: Any) -> tuple[BaseModel, BaseModel]:
        """Typed (subject, options) or GenerationValidationError."""

    @abstractmethod
    def build_prompt(self, subject: Any, options: Any) -> str:
        ...

    @abstractmethod
    def provider_options(self, options: Any) -> dict[str, Any]:
        """Tunables passed to the adapter."""

    @abstractmethod
    def fallback(self, subject: Any, options: Any, prompt: str) -> Any:
        """Deterministic payload used when every provider failed."""

    @abstractmethod
    def to_response(self, result: GenerationResult) -> BaseModel:
        ...

    def parser(self) -> Optional[Callable[[str], Any]]:
        return None

    def providers(self, subject: Any, options: Any) -> tuple[str, ...]:
        return tuple(options.providers or ())

    def cache_parameters(self, subject: Any, options: Any) -> dict[str, Any]:
        """Subject plus tunables; provider preference is not part of the key."""
        return {
            "subject": subject.model_dump(mode="json", exclude={"providers"}),
            "options": options.model_dump(mode="json", exclude={"providers"}),
        }

    # =========================================================================
    # Pipeline
    # =========================================================================

    def build_request(self, subject: Any, options: Any) -> GenerationRequest:
        return GenerationRequest(
            operation=self.operation,
            parameters=self.cache_parameters(subject, options),
            providers=self.providers(subject, options),
        )

    async def run(self, user_id: str, request: Any, options: Any = None) -> Any:
        """
        Execute the operation for ``user_id``.

        Raises:
            GenerationValidationError: Invalid input; nothing was attempted or logged.
        """
        user_id = validate_user_id(user_id)
        subject, opts = self.validate(request, options)
        generation_request = self.build_request(subject, opts)
        generation_id = _new_generation_id()
        started = time.perf_counter()

        with generation_context(generation_id):
            result = await self._generate(generation_request, generation_id, subject, opts)
            self._record(user_id, generation_request, result, started)
        return self.to_response(result)

    async def _generate(
        self,
        generation_request: GenerationRequest,
        generation_id: str,
        subject: Any,
        opts: Any,
    ) -> GenerationResult:
        key = make_cache_key(self.operation, generation_request.parameters)

        if self.cache_enabled:
            cached = await self._cache_get(key)
            if cached is not None:
                logger.info("cache_hit", operation=self.operation.value, provider=cached.provider)
                return GenerationResult(
                    payload=cached.payload,
                    provider=cached.provider,
                    generation_id=generation_id,
                    cached=True,
                )

        prompt = self.build_prompt(subject, opts)
        result = await self.orchestrator.attempt(
            self.operation,
            prompt,
            self.provider_options(opts),
            generation_id=generation_id,
            providers=generation_request.providers,
            parse=self.parser(),
            fallback=lambda: self.fallback(subject, opts, prompt),
        )

        # Fallback output is never cached so a recovered provider is used next time
        if self.cache_enabled and not result.is_fallback:
            await self._cache_set(
                key, CachedPayload(payload=result.payload, provider=result.provider)
            )
        return result

    async def _cache_get(self, key: str) -> Optional[CachedPayload]:
        try:
            cached = await self.cache.get(key)
        except CacheError as e:
            logger.warning("cache_read_failed", operation=self.operation.value, error=e.message)
            cached = None
        record_cache_lookup(self.operation.value, hit=cached is not None)
        return cached

    async def _cache_set(self, key: str, value: CachedPayload) -> None:
        try:
            await self.cache.set(key, value, self.cache_ttl_seconds)
        except CacheError as e:
            logger.warning("cache_write_failed", operation=self.operation.value, error=e.message)

    def _record(
        self,
        user_id: str,
        generation_request: GenerationRequest,
        result: GenerationResult,
        started: float,
    ) -> None:
        success = not result.is_fallback
        self.generation_logger.record(
            GenerationLogEntry(
                id=result.generation_id,
                user_id=user_id,
                operation=self.operation,
                provider=result.provider,
                parameters=generation_request.parameters,
                result=result.payload if success else None,
                error=None if success else f"All providers failed for {self.operation.value}",
                errors=result.errors,
                duration_ms=_elapsed_ms(started),
                success=success,
                cached=result.cached,
            )
        )


# =============================================================================
# Bio
# =============================================================================


class BioFacade(OperationFacade):
    """Artist bio text."""

    operation = OperationKind.BIO

    def validate(self, request: Any, options: Any) -> tuple[ArtistInfo, BioOptions]:
        return (
            validate_input(ArtistInfo, request, "artist_info"),
            validate_input(BioOptions, options, "options"),
        )

    def build_prompt(self, subject: ArtistInfo, options: BioOptions) -> str:
        return build_bio_prompt(subject, options)

    def provider_options(self, options: BioOptions) -> dict[str, Any]:
        return {"temperature": options.temperature, "max_tokens": options.max_tokens}

    def parser(self) -> Callable[[str], str]:
        return clean_bio_text

    def fallback(self, subject: ArtistInfo, options: BioOptions, prompt: str) -> str:
        return fallback_bio(subject)

    def to_response(self, result: GenerationResult) -> BioResult:
        return BioResult(
            bio=result.payload,
            provider=result.provider,
            generation_id=result.generation_id,
            errors=result.errors,
            cached=result.cached,
        )


# =============================================================================
# Image
# =============================================================================


class ImageFacade(OperationFacade):
    """Artist image URL."""

    operation = OperationKind.IMAGE

    def validate(self, request: Any, options: Any) -> tuple[ImageRequest, ImageOptions]:
        return (
            validate_input(ImageRequest, request, "image_request"),
            validate_input(ImageOptions, options, "options"),
        )

    def providers(self, subject: ImageRequest, options: ImageOptions) -> tuple[str, ...]:
        # Order named on the request wins over the one in options
        return tuple(subject.providers or options.providers or ())

    def build_prompt(self, subject: ImageRequest, options: ImageOptions) -> str:
        return build_image_prompt(subject, options)

    def provider_options(self, options: ImageOptions) -> dict[str, Any]:
        return options.model_dump(exclude={"providers"}, exclude_none=True)

    def fallback(self, subject: ImageRequest, options: ImageOptions, prompt: str) -> str:
        return fallback_image_url(subject, prompt, options)

    def to_response(self, result: GenerationResult) -> ImageResult:
        return ImageResult(
            image_url=result.payload,
            provider=result.provider,
            generation_id=result.generation_id,
            errors=result.errors,
            cached=result.cached,
        )


# =============================================================================
# Prompt Rewrite / Analysis
# =============================================================================


def _prompt_provider_options(options: PromptOptions) -> dict[str, Any]:
    opts: dict[str, Any] = {
        "temperature": options.temperature,
        "max_tokens": options.max_tokens,
        "json_mode": True,
    }
    if options.model:
        opts["model"] = options.model
    return opts


def _with_platform(subject: M, options: PromptOptions) -> M:
    if getattr(subject, "target_platform", None) or not options.target_platform:
        return subject
    return subject.model_copy(update={"target_platform": options.target_platform})


class PromptRewriteFacade(OperationFacade):
    """Rewritten music-generation prompt with analysis and improvement notes."""

    operation = OperationKind.PROMPT_REWRITE

    def validate(
        self, request: Any, options: Any
    ) -> tuple[PromptRewriteRequest, PromptOptions]:
        if isinstance(request, str):
            request = {"original_prompt": request}
        opts = validate_input(PromptOptions, options, "options")
        subject = validate_input(PromptRewriteRequest, request, "prompt_request")
        return _with_platform(subject, opts), opts

    def cache_parameters(self, subject: Any, options: Any) -> dict[str, Any]:
        return {
            "subject": subject.model_dump(mode="json"),
            "options": options.model_dump(mode="json", exclude={"providers", "target_platform"}),
        }

    def build_prompt(self, subject: PromptRewriteRequest, options: PromptOptions) -> str:
        return build_rewrite_prompt(subject, options)

    def provider_options(self, options: PromptOptions) -> dict[str, Any]:
        return _prompt_provider_options(options)

    def parser(self) -> Callable[[str], dict[str, Any]]:
        return parse_rewrite

    def fallback(
        self, subject: PromptRewriteRequest, options: PromptOptions, prompt: str
    ) -> dict[str, Any]:
        return fallback_rewrite(subject)

    def to_response(self, result: GenerationResult) -> PromptRewriteResult:
        return PromptRewriteResult(
            **result.payload,
            provider=result.provider,
            generation_id=result.generation_id,
            errors=result.errors,
            cached=result.cached,
        )


class PromptAnalysisFacade(OperationFacade):
    """Quality score, strengths and weaknesses of a prompt."""

    operation = OperationKind.PROMPT_ANALYSIS

    def validate(
        self, request: Any, options: Any
    ) -> tuple[PromptAnalysisRequest, PromptOptions]:
        if isinstance(request, str):
            request = {"prompt": request}
        opts = validate_input(PromptOptions, options, "options")
        subject = validate_input(PromptAnalysisRequest, request, "prompt")
        return _with_platform(subject, opts), opts

    def cache_parameters(self, subject: Any, options: Any) -> dict[str, Any]:
        return {
            "subject": subject.model_dump(mode="json"),
            "options": options.model_dump(
                mode="json", include={"model", "temperature", "max_tokens"}
            ),
        }

    def build_prompt(self, subject: PromptAnalysisRequest, options: PromptOptions) -> str:
        return build_analysis_prompt(subject)

    def provider_options(self, options: PromptOptions) -> dict[str, Any]:
        return _prompt_provider_options(options)

    def parser(self) -> Callable[[str], dict[str, Any]]:
        return parse_analysis

    def fallback(
        self, subject: PromptAnalysisRequest, options: PromptOptions, prompt: str
    ) -> dict[str, Any]:
        return fallback_analysis(subject)

    def to_response(self, result: GenerationResult) -> PromptAnalysisResult:
        return PromptAnalysisResult(
            **result.payload,
            provider=result.provider,
            generation_id=result.generation_id,
            errors=result.errors,
            cached=result.cached,
        )


# =============================================================================
# Variations (batches of inner facade invocations)
# =============================================================================


def _tag_errors(errors: list[ProviderAttemptError], variation: int) -> list[ProviderAttemptError]:
    return [err.model_copy(update={"variation": variation}) for err in errors]


class _BatchFacade:
    """Batch bookkeeping shared by the variation facades."""

    operation: OperationKind

    def __init__(self, generation_logger: GenerationLogger) -> None:
        self.generation_logger = generation_logger

    def _record_batch(
        self,
        user_id: str,
        generation_id: str,
        parameters: dict[str, Any],
        variations: list[BaseModel],
        errors: list[ProviderAttemptError],
        success: bool,
        started: float,
    ) -> None:
        self.generation_logger.record(
            GenerationLogEntry(
                id=generation_id,
                user_id=user_id,
                operation=self.operation,
                provider=BATCH_PROVIDER,
                parameters=parameters,
                result=[v.model_dump(mode="json") for v in variations],
                error=None if success else "No variation was produced by a provider",
                errors=errors,
                duration_ms=_elapsed_ms(started),
                success=success,
            )
        )


class ImageVariationsFacade(_BatchFacade):
    """
    N image variations of one subject.

    Variation ``i`` (1-based) is an ordinary image invocation whose prompt
    ends in "variation i", so every variation has its own cache key and,
    when degraded, its own fallback URL.
    """

    operation = OperationKind.IMAGE_VARIATIONS

    def __init__(self, image_facade: ImageFacade, generation_logger: GenerationLogger) -> None:
        super().__init__(generation_logger)
        self.image_facade = image_facade

    async def run(
        self,
        user_id: str,
        request: Any,
        count: int = DEFAULT_VARIATION_COUNT,
        options: Any = None,
    ) -> ImageVariationsResult:
        user_id = validate_user_id(user_id)
        count = validate_count(count)
        subject = validate_input(ImageRequest, request, "image_request")
        opts = validate_input(ImageOptions, options, "options")
        generation_id = _new_generation_id()
        started = time.perf_counter()

        variations: list[ImageVariation] = []
        errors: list[ProviderAttemptError] = []
        with generation_context(generation_id):
            for index in range(1, count + 1):
                inner = await self.image_facade.run(
                    user_id, subject.model_copy(update={"variation": index}), opts
                )
                variations.append(
                    ImageVariation(
                        image_url=inner.image_url,
                        provider=inner.provider,
                        generation_id=inner.generation_id,
                        variation=index,
                    )
                )
                errors.extend(_tag_errors(inner.errors, index))

            success = any(v.provider != FALLBACK_PROVIDER for v in variations)
            self._record_batch(
                user_id,
                generation_id,
                {
                    "subject": subject.model_dump(mode="json"),
                    "options": opts.model_dump(mode="json"),
                    "count": count,
                },
                variations,
                errors,
                success,
                started,
            )
        return ImageVariationsResult(
            variations=variations, errors=errors, success=success, generation_id=generation_id
        )


class PromptVariationsFacade(_BatchFacade):
    """
    N alternative rewrites of one base prompt.

    A variation whose rewrite degraded to the fallback carries the base
    prompt itself with provider "fallback".
    """

    operation = OperationKind.PROMPT_VARIATIONS

    def __init__(
        self, rewrite_facade: PromptRewriteFacade, generation_logger: GenerationLogger
    ) -> None:
        super().__init__(generation_logger)
        self.rewrite_facade = rewrite_facade

    async def run(
        self,
        user_id: str,
        base_prompt: Any,
        options: Any = None,
        count: int = DEFAULT_VARIATION_COUNT,
    ) -> PromptVariationsResult:
        user_id = validate_user_id(user_id)
        count = validate_count(count)
        subject, opts = self.rewrite_facade.validate(base_prompt, options)
        generation_id = _new_generation_id()
        started = time.perf_counter()

        variations: list[PromptVariation] = []
        errors: list[ProviderAttemptError] = []
        with generation_context(generation_id):
            for index in range(1, count + 1):
                inner = await self.rewrite_facade.run(
                    user_id, subject.model_copy(update={"variation": index}), opts
                )
                degraded = inner.provider == FALLBACK_PROVIDER
                variations.append(
                    PromptVariation(
                        prompt=subject.original_prompt if degraded else inner.rewritten_prompt,
                        provider=inner.provider,
                        generation_id=inner.generation_id,
                        variation=index,
                    )
                )
                errors.extend(_tag_errors(inner.errors, index))

            success = any(v.provider != FALLBACK_PROVIDER for v in variations)
            self._record_batch(
                user_id,
                generation_id,
                {
                    "subject": subject.model_dump(mode="json"),
                    "options": opts.model_dump(mode="json"),
                    "count": count,
                },
                variations,
                errors,
                success,
                started,
            )
        return PromptVariationsResult(
            variations=variations, errors=errors, success=success, generation_id=generation_id
        )
