"""
Services Package - generation operations and their shared state.

- GenerationService: public operations (bio, image, prompts, status, cache)
- Operation facades: per-operation pipeline (validate, cache, orchestrate, log)
- GenerationCache: payload cache (in-memory or Redis)
- GenerationLogger: fire-and-forget audit log (in-memory or Redis store)
"""

from harmony_gateway.services.cache import (
    GenerationCache,
    InMemoryGenerationCache,
    RedisGenerationCache,
    make_cache_key,
)
from harmony_gateway.services.generation import GenerationService, create_generation_service
from harmony_gateway.services.generation_logger import (
    GenerationLogger,
    GenerationLogStore,
    InMemoryGenerationLogStore,
    RedisGenerationLogStore,
)
from harmony_gateway.services.operations import (
    BioFacade,
    ImageFacade,
    ImageVariationsFacade,
    OperationFacade,
    PromptAnalysisFacade,
    PromptRewriteFacade,
    PromptVariationsFacade,
)

__all__ = [
    "GenerationService",
    "create_generation_service",
    "GenerationCache",
    "InMemoryGenerationCache",
    "RedisGenerationCache",
    "make_cache_key",
    "GenerationLogger",
    "GenerationLogStore",
    "InMemoryGenerationLogStore",
    "RedisGenerationLogStore",
    "OperationFacade",
    "BioFacade",
    "ImageFacade",
    "ImageVariationsFacade",
    "PromptAnalysisFacade",
    "PromptRewriteFacade",
    "PromptVariationsFacade",
]
