"""
Core module for the Harmony generation gateway.

This module contains configuration and exceptions.
"""

from harmony_gateway.core.config import Settings, get_settings
from harmony_gateway.core.exceptions import (
    AllProvidersExhaustedError,
    AuthenticationError,
    CacheError,
    ErrorCode,
    GenerationValidationError,
    HarmonyGatewayException,
    InvalidProviderResponseError,
    LocalRateLimitError,
    LogPersistenceError,
    ProviderError,
    ProviderRateLimitedError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "HarmonyGatewayException",
    "GenerationValidationError",
    "ProviderError",
    "ProviderRateLimitedError",
    "AuthenticationError",
    "InvalidProviderResponseError",
    "LocalRateLimitError",
    "AllProvidersExhaustedError",
    "LogPersistenceError",
    "CacheError",
]
