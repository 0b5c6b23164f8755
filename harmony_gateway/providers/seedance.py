"""
Seedance Provider - image generation adapter.

OpenAI-images-shaped API: POST ``/images/generations`` and read
``data[0].url`` from the response.
"""

from collections.abc import Mapping
from typing import Any

from harmony_gateway.core.exceptions import InvalidProviderResponseError
from harmony_gateway.models.domain import OperationKind
from harmony_gateway.providers.rest import RestProviderAdapter

SEEDANCE_API_BASE = "https://api.seedance.com/v1"
DEFAULT_MODEL = "midjourney"
DEFAULT_SIZE = "512x512"
DEFAULT_QUALITY = "standard"


class SeedanceAdapter(RestProviderAdapter):
    """Seedance text-to-image adapter (Bearer token auth)."""

    name = "seedance"
    operations = frozenset({OperationKind.IMAGE})

    def __init__(
        self,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        base_url: str = SEEDANCE_API_BASE,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            api_key=api_key,
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            **kwargs,
        )
        self.model = model

    async def _request(self, prompt: str, options: Mapping[str, Any]) -> str:
        data = await self._post_json(
            "/images/generations",
            {
                "prompt": prompt,
                "model": options.get("model") or self.model,
                "size": options.get("size") or DEFAULT_SIZE,
                "quality": options.get("quality") or DEFAULT_QUALITY,
                "n": 1,
            },
        )
        images = data.get("data") or []
        url = images[0].get("url") if images and isinstance(images[0], dict) else None
        if not url:
            raise InvalidProviderResponseError(
                "seedance response has no data[0].url", provider=self.name
            )
        return url
