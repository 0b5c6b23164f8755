"""
Structured Logging Module

Structured JSON logging for the gateway's diagnostic stream, with the
generation id of the call in progress attached to every event emitted while
a facade runs.

Pattern: Structured logging for observability
Pattern: Singleton configuration (configure once at startup)
"""

import contextvars
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, Optional, TextIO

import structlog
from structlog.types import EventDict, Processor


_configured: bool = False


# =============================================================================
# Generation ID Context
# =============================================================================

_generation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "generation_id", default=None
)


def get_generation_id() -> Optional[str]:
    """Generation id of the facade call running in this context, if any."""
    return _generation_id_var.get()


@contextmanager
def generation_context(generation_id: str) -> Generator[None, None, None]:
    """
    Bind a generation id to every log event emitted inside the block.

    Example:
        >>> with generation_context(generation_id):
        ...     logger.info("provider_attempt", provider="gemini")
    """
    token = _generation_id_var.set(generation_id)
    try:
        yield
    finally:
        _generation_id_var.reset(token)


# =============================================================================
# Custom Processors
# =============================================================================


def add_generation_id(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    generation_id = get_generation_id()
    if generation_id is not None:
        event_dict.setdefault("generation_id", generation_id)
    return event_dict


def add_timestamp(
    logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO 8601 UTC timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def rename_level(
    logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    if "log_level" in event_dict:
        event_dict["level"] = event_dict.pop("log_level")
    return event_dict


# =============================================================================
# Singleton Configuration
# =============================================================================


def configure_logging(
    level: str = "INFO",
    stream: Optional[TextIO] = None,
    force: bool = False,
) -> None:
    """
    Configure structlog for the gateway.

    Subsequent calls are no-ops unless force=True.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        stream: Output stream (default: sys.stdout)
        force: Force reconfiguration (for testing only)
    """
    global _configured

    if _configured and not force:
        return

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_generation_id,
        rename_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(default=str),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_to_int(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=False,
    )

    _configured = True


def reset_logging() -> None:
    """Reset the configured flag. Tests only."""
    global _configured
    _configured = False


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger bound to ``name``.

    Configures logging with defaults on first use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("cache_hit", operation="bio")
    """
    configure_logging()
    return structlog.get_logger().bind(logger=name)


_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _level_to_int(level: str) -> int:
    return _LEVELS.get(level.upper(), logging.INFO)
