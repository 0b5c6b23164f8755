"""
HTTP Client Module

Factory for the httpx clients used by the REST-based provider adapters, plus
helpers shared by those adapters for reading upstream throttling headers.

Transport-level retries are disabled: every retry goes through RetryPolicy
so the attempt count per call stays exact.

Pattern: Factory pattern for creating configured HTTP clients
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx


DEFAULT_TIMEOUT_SECONDS: float = 30.0
DEFAULT_MAX_CONNECTIONS: int = 50
DEFAULT_MAX_KEEPALIVE: int = 10
USER_AGENT = "harmony-generation-gateway/0.1"


def create_http_client(
    base_url: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
    headers: Optional[dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create a configured HTTP client with connection pooling and timeouts.

    Args:
        base_url: Base URL for all requests
        timeout_seconds: Fixed per-call timeout (default: 30.0)
        headers: Additional headers to include in all requests
        transport: Replacement transport (httpx.MockTransport in tests)

    Returns:
        httpx.AsyncClient: Configured async HTTP client

    Example:
        >>> client = create_http_client(
        ...     base_url="https://api.seedance.com/v1",
        ...     headers={"Authorization": "Bearer ..."},
        ... )
    """
    timeout = timeout_seconds if timeout_seconds is not None else DEFAULT_TIMEOUT_SECONDS

    default_headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if headers:
        default_headers.update(headers)

    if transport is None:
        transport = httpx.AsyncHTTPTransport(
            retries=0,
            limits=httpx.Limits(
                max_connections=DEFAULT_MAX_CONNECTIONS,
                max_keepalive_connections=DEFAULT_MAX_KEEPALIVE,
            ),
        )

    return httpx.AsyncClient(
        base_url=base_url or "",
        timeout=httpx.Timeout(timeout),
        headers=default_headers,
        transport=transport,
    )


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Seconds to wait from a Retry-After header (delta-seconds or HTTP date).

    Returns None when the header is absent or unreadable.
    """
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())
