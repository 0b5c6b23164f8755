"""HTTP client factory for REST-based provider adapters."""

from harmony_gateway.clients.http import create_http_client, parse_retry_after

__all__ = ["create_http_client", "parse_retry_after"]
