"""Harmony generation gateway.

Multi-provider orchestration for AI artist bios, images and music prompts:
local rate limiting, caching, bounded retries, ordered provider fallback
ending in deterministic output, and a per-call generation log.

Note: Import GenerationService from `harmony_gateway.services` to avoid
circular imports.
"""

__version__ = "0.1.0"

__all__ = [
    "clients",
    "core",
    "models",
    "observability",
    "prompts",
    "providers",
    "resilience",
    "services",
]
