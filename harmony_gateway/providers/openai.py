"""
OpenAI Provider - chat completions adapter.

Serves prompt rewriting and prompt analysis (JSON response mode) and can
also write artist bios. Uses the official SDK with its own retries disabled
so RetryPolicy is the only retry loop.

Reference Documents:
- OpenAI API Reference: https://platform.openai.com/docs/api-reference/chat

Design Patterns:
- Ports and Adapters: OpenAIAdapter implements ProviderAdapter
- Exception translation: SDK errors -> ProviderError hierarchy
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from harmony_gateway.core.exceptions import (
    AuthenticationError,
    InvalidProviderResponseError,
    ProviderError,
    ProviderRateLimitedError,
)
from harmony_gateway.clients.http import parse_retry_after
from harmony_gateway.models.domain import OperationKind
from harmony_gateway.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000

SYSTEM_PROMPT = (
    "You are an expert music producer and prompt engineer who writes for "
    "AI music and art generation platforms."
)


class OpenAIAdapter(ProviderAdapter):
    """
    OpenAI chat completions adapter.

    Options read by ``generate``:
        model, temperature, max_tokens, json_mode (bool), system_prompt

    Example:
        >>> adapter = OpenAIAdapter(api_key="sk-...")
        >>> raw = await adapter.generate(prompt, {"json_mode": True})
    """

    name = "openai"
    operations = frozenset(
        {OperationKind.PROMPT_REWRITE, OperationKind.PROMPT_ANALYSIS, OperationKind.BIO}
    )

    def __init__(
        self,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        organization: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = 30.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key=api_key, **kwargs)
        self.model = model
        self._organization = organization
        self._base_url = base_url
        self._timeout = timeout_seconds
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        # Built on first use so an unconfigured adapter never touches the SDK
        if self._client is None:
            client_kwargs: dict[str, Any] = {
                "api_key": self._api_key,
                "max_retries": 0,
                "timeout": self._timeout,
            }
            if self._organization:
                client_kwargs["organization"] = self._organization
            if self._base_url:
                client_kwargs["base_url"] = self._base_url
            self._client = AsyncOpenAI(**client_kwargs)
        return self._client

    def _build_request_kwargs(self, prompt: str, options: Mapping[str, Any]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": options.get("model") or self.model,
            "messages": [
                {"role": "system", "content": options.get("system_prompt") or SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": options.get("temperature", DEFAULT_TEMPERATURE),
            "max_tokens": options.get("max_tokens", DEFAULT_MAX_TOKENS),
        }
        if options.get("json_mode"):
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    async def _request(self, prompt: str, options: Mapping[str, Any]) -> str:
        try:
            response = await self._get_client().chat.completions.create(
                **self._build_request_kwargs(prompt, options)
            )
        except openai.OpenAIError as e:
            raise self._translate_error(e) from e

        if not response.choices:
            raise InvalidProviderResponseError("openai returned no choices", provider=self.name)
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise InvalidProviderResponseError(
                "openai returned empty content", provider=self.name
            )
        return content

    async def _probe(self) -> None:
        try:
            await self._get_client().models.retrieve(self.model)
        except openai.OpenAIError as e:
            raise self._translate_error(e) from e

    def _translate_error(self, e: openai.OpenAIError) -> ProviderError:
        """Map an SDK exception onto the gateway's ProviderError hierarchy."""
        if isinstance(e, (openai.AuthenticationError, openai.PermissionDeniedError)):
            return AuthenticationError(str(e), provider=self.name, status_code=e.status_code)

        if isinstance(e, openai.RateLimitError):
            retry_after = parse_retry_after(e.response.headers.get("retry-after"))
            return ProviderRateLimitedError(str(e), provider=self.name, retry_after=retry_after)

        if isinstance(e, openai.APIStatusError):
            return ProviderError(str(e), provider=self.name, status_code=e.status_code)

        return ProviderError(str(e), provider=self.name)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
