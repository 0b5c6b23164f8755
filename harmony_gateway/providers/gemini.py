"""
Gemini Provider - Google Generative Language API adapter.

Text generation for artist bios via ``models/{model}:generateContent``.

Reference Documents:
- Google Generative AI API Docs: https://ai.google.dev/api

Design Patterns:
- Ports and Adapters: GeminiAdapter implements ProviderAdapter
- Adapter: maps prompt + options to the Gemini request/response format
"""

import logging
from collections.abc import Mapping
from typing import Any

from harmony_gateway.core.exceptions import InvalidProviderResponseError
from harmony_gateway.models.domain import OperationKind
from harmony_gateway.providers.rest import RestProviderAdapter

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-pro"

# Generation defaults
DEFAULT_TEMPERATURE = 0.8
DEFAULT_TOP_K = 40
DEFAULT_TOP_P = 0.95
DEFAULT_MAX_OUTPUT_TOKENS = 1024


class GeminiAdapter(RestProviderAdapter):
    """
    Google Gemini text adapter.

    The API key travels as the ``key`` query parameter.

    Example:
        >>> adapter = GeminiAdapter(api_key="AIza...")
        >>> bio = await adapter.generate(prompt, {"temperature": 0.8})
    """

    name = "gemini"
    operations = frozenset({OperationKind.BIO})

    def __init__(
        self,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        base_url: str = GEMINI_API_BASE,
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key=api_key, base_url=base_url, **kwargs)
        self.model = model

    def _build_payload(self, prompt: str, options: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": options.get("temperature", DEFAULT_TEMPERATURE),
                "topK": options.get("top_k", DEFAULT_TOP_K),
                "topP": options.get("top_p", DEFAULT_TOP_P),
                "maxOutputTokens": options.get("max_tokens", DEFAULT_MAX_OUTPUT_TOKENS),
            },
        }

    async def _request(self, prompt: str, options: Mapping[str, Any]) -> str:
        model = options.get("model") or self.model
        data = await self._post_json(
            f"/{model}:generateContent",
            self._build_payload(prompt, options),
            params={"key": self._api_key},
        )
        return self._extract_text(data)

    def _extract_text(self, data: Mapping[str, Any]) -> str:
        """Text of the first candidate's parts."""
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback", {})
            raise InvalidProviderResponseError(
                f"gemini returned no candidates (feedback={feedback})",
                provider=self.name,
            )
        parts = candidates[0].get("content", {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            raise InvalidProviderResponseError(
                "gemini returned an empty candidate", provider=self.name
            )
        return text

    async def _probe(self) -> None:
        # Model metadata lookup; costs no generation quota
        await self._get_json(f"/{self.model}", params={"key": self._api_key})
