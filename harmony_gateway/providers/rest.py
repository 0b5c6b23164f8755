"""
REST Provider Adapter - shared httpx plumbing.

Common base for backends reached over plain JSON/HTTP (Gemini, Nano Banana,
Seedance). Handles client lifecycle and the translation of HTTP statuses and
httpx exceptions into the gateway's ProviderError hierarchy:

    401 / 403         -> AuthenticationError (not retried)
    429               -> ProviderRateLimitedError (Retry-After honored)
    other non-2xx     -> ProviderError (retried)
    timeout / network -> ProviderError (retried)
    non-JSON body     -> InvalidProviderResponseError (not retried)
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from harmony_gateway.clients.http import create_http_client, parse_retry_after
from harmony_gateway.core.exceptions import (
    AuthenticationError,
    InvalidProviderResponseError,
    ProviderError,
    ProviderRateLimitedError,
)
from harmony_gateway.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

MAX_ERROR_TEXT = 300


class RestProviderAdapter(ProviderAdapter):
    """
    ProviderAdapter over an httpx.AsyncClient.

    Subclasses implement ``_request`` using ``_post_json``.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "",
        timeout_seconds: float = 30.0,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ) -> None:
        """
        Args:
            api_key: Backend credential.
            base_url: API root; request paths are relative to it.
            timeout_seconds: Fixed per-call timeout.
            headers: Extra headers (e.g. Authorization) for every call.
            transport: Replacement httpx transport (tests).
            **kwargs: Passed to ProviderAdapter (retry_policy, rate_limiter...).
        """
        super().__init__(api_key=api_key, **kwargs)
        self._base_url = base_url.rstrip("/")
        self._client = create_http_client(
            base_url=self._base_url,
            timeout_seconds=timeout_seconds,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "RestProviderAdapter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post_json(
        self,
        path: str,
        payload: Mapping[str, Any],
        params: Optional[Mapping[str, str]] = None,
    ) -> dict[str, Any]:
        """POST ``payload`` and return the decoded JSON body."""
        return await self._send_json("POST", path, payload=payload, params=params)

    async def _get_json(
        self, path: str, params: Optional[Mapping[str, str]] = None
    ) -> dict[str, Any]:
        return await self._send_json("GET", path, params=params)

    async def _send_json(
        self,
        method: str,
        path: str,
        payload: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> dict[str, Any]:
        """
        Send one request and return the decoded JSON object.

        Raises:
            ProviderError: Or a subclass, per the status mapping above.
        """
        try:
            response = await self._client.request(
                method,
                path,
                json=dict(payload) if payload is not None else None,
                params=dict(params) if params else None,
            )
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"{self.name} request timed out: {e}", provider=self.name
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{self.name} request failed: {e}", provider=self.name
            ) from e

        if response.is_success:
            try:
                data = response.json()
            except ValueError as e:
                raise InvalidProviderResponseError(
                    f"{self.name} returned a non-JSON body",
                    provider=self.name,
                    status_code=response.status_code,
                ) from e
            if not isinstance(data, dict):
                raise InvalidProviderResponseError(
                    f"{self.name} returned {type(data).__name__}, expected an object",
                    provider=self.name,
                    status_code=response.status_code,
                )
            return data

        raise self._error_for_status(response)

    def _error_for_status(self, response: httpx.Response) -> ProviderError:
        status = response.status_code
        text = response.text[:MAX_ERROR_TEXT]

        if status in (401, 403):
            return AuthenticationError(
                f"{self.name} authentication failed: {text}",
                provider=self.name,
                status_code=status,
            )

        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            logger.warning("%s rate limited upstream (retry_after=%s)", self.name, retry_after)
            return ProviderRateLimitedError(
                f"{self.name} rate limit exceeded: {text}",
                provider=self.name,
                retry_after=retry_after,
            )

        return ProviderError(
            f"{self.name} API error ({status}): {text}",
            provider=self.name,
            status_code=status,
        )
