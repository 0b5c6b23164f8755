"""Observability: structured logging for the gateway's diagnostic stream."""

from harmony_gateway.observability.logging import (
    configure_logging,
    generation_context,
    get_generation_id,
    get_logger,
    reset_logging,
)

__all__ = [
    "configure_logging",
    "generation_context",
    "get_generation_id",
    "get_logger",
    "reset_logging",
]
