"""
Custom exceptions for the Harmony generation gateway.

This module provides a hierarchy of custom exceptions for the gateway.
All exceptions inherit from HarmonyGatewayException and include error codes
for consistent error handling and logging.

Which errors cross which boundary:
- GenerationValidationError is the only error a caller of an operation sees.
- ProviderError (and subclasses) are raised by adapters and absorbed by the
  fallback orchestrator, one entry per provider in the result's error list.
- LocalRateLimitError makes the orchestrator skip a provider without calling it.
- AllProvidersExhaustedError never leaves the orchestrator; it becomes a
  deterministic fallback result.
- LogPersistenceError and CacheError are logged and discarded.
"""

from enum import Enum
from typing import Any


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """
    Error codes for gateway exceptions.

    These codes provide a consistent way to identify error types
    in results and in logging.
    """

    GATEWAY_ERROR = "GATEWAY_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    PROVIDER_RATE_LIMITED = "PROVIDER_RATE_LIMITED"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    PROVIDERS_EXHAUSTED = "PROVIDERS_EXHAUSTED"
    LOG_PERSISTENCE_ERROR = "LOG_PERSISTENCE_ERROR"
    CACHE_ERROR = "CACHE_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


class HarmonyGatewayException(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GATEWAY_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# Validation
# =============================================================================


class GenerationValidationError(HarmonyGatewayException):
    """
    Raised when an operation's required input is missing or malformed.

    Named GenerationValidationError to avoid conflict with
    pydantic.ValidationError.

    Attributes:
        field: Name of the field that failed validation.
        value: The invalid value (if safe to include).
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        error_code: str = ErrorCode.VALIDATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.field = field
        self.value = value


# =============================================================================
# Provider Errors
# =============================================================================


class ProviderError(HarmonyGatewayException):
    """
    Exception for upstream provider failures.

    Raised when communication with a generation backend fails: connection
    errors, timeouts, and non-success HTTP statuses. Plain ProviderErrors
    are retried with exponential backoff.

    Attributes:
        provider: Name of the provider (e.g., "gemini", "seedance").
        status_code: HTTP status code from the provider API (if applicable).
    """

    kind = "transport"

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        error_code: str = ErrorCode.PROVIDER_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the provider error.

        Args:
            message: Human-readable error message.
            provider: Name of the provider.
            status_code: HTTP status code from provider (optional).
            error_code: Machine-readable error code.
            **kwargs: Additional attributes.
        """
        super().__init__(message, error_code, **kwargs)
        self.provider = provider
        self.status_code = status_code


class ProviderRateLimitedError(ProviderError):
    """
    The provider signalled throttling (HTTP 429 or equivalent).

    Attributes:
        retry_after: Seconds the provider asked us to wait, if it said.
    """

    kind = "rate_limited"

    def __init__(
        self,
        message: str,
        provider: str,
        retry_after: float | None = None,
        status_code: int | None = 429,
        error_code: str = ErrorCode.PROVIDER_RATE_LIMITED,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, provider, status_code, error_code, **kwargs)
        self.retry_after = retry_after


class AuthenticationError(ProviderError):
    """Missing or rejected credentials. Never retried."""

    kind = "authentication"

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        error_code: str = ErrorCode.AUTHENTICATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, provider, status_code, error_code, **kwargs)


class InvalidProviderResponseError(ProviderError):
    """The provider answered, but not with something we can use."""

    kind = "invalid_response"

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        error_code: str = ErrorCode.INVALID_RESPONSE,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, provider, status_code, error_code, **kwargs)


# =============================================================================
# Local Rate Limiting
# =============================================================================


class LocalRateLimitError(HarmonyGatewayException):
    """
    The local per-provider window is exhausted.

    Attributes:
        provider: Provider whose window is full.
        retry_after: Seconds until the window resets.
        limit: The window limit that was reached.
    """

    kind = "rate_limit_local"

    def __init__(
        self,
        message: str,
        provider: str,
        retry_after: float | None = None,
        limit: int | None = None,
        error_code: str = ErrorCode.RATE_LIMIT_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.provider = provider
        self.retry_after = retry_after
        self.limit = limit


# =============================================================================
# Orchestration
# =============================================================================


class AllProvidersExhaustedError(HarmonyGatewayException):
    """
    Every provider in the ordered list failed.

    Attributes:
        errors: ProviderAttemptError records, one per provider attempted.
    """

    def __init__(
        self,
        message: str,
        errors: list[Any] | None = None,
        error_code: str = ErrorCode.PROVIDERS_EXHAUSTED,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.errors = list(errors or [])


# =============================================================================
# Side-channel Failures
# =============================================================================


class LogPersistenceError(HarmonyGatewayException):
    """Writing a generation log entry to its store failed."""

    def __init__(
        self,
        message: str,
        generation_id: str | None = None,
        error_code: str = ErrorCode.LOG_PERSISTENCE_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.generation_id = generation_id


class CacheError(HarmonyGatewayException):
    """Base exception for cache backend errors."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.CACHE_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
