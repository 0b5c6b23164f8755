"""
Nano Banana Provider - image generation adapter.

POST ``/generate-image`` with a Stable Diffusion style payload; the response
carries the rendered image location in ``imageUrl``.
"""

from collections.abc import Mapping
from typing import Any

from harmony_gateway.core.exceptions import InvalidProviderResponseError
from harmony_gateway.models.domain import OperationKind
from harmony_gateway.models.requests import parse_size
from harmony_gateway.providers.rest import RestProviderAdapter

NANOBANANA_API_BASE = "https://api.nanobanana.com/v1"
DEFAULT_MODEL = "stable-diffusion-xl"
DEFAULT_SIZE = "512x512"
DEFAULT_STEPS = 20
DEFAULT_CFG_SCALE = 7.0


class NanoBananaAdapter(RestProviderAdapter):
    """Nano Banana text-to-image adapter (Bearer token auth)."""

    name = "nanobanana"
    operations = frozenset({OperationKind.IMAGE})

    def __init__(
        self,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        base_url: str = NANOBANANA_API_BASE,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            api_key=api_key,
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            **kwargs,
        )
        self.model = model

    def _build_payload(self, prompt: str, options: Mapping[str, Any]) -> dict[str, Any]:
        width, height = parse_size(options.get("size") or DEFAULT_SIZE)
        return {
            "prompt": prompt,
            "model": options.get("model") or self.model,
            "width": width,
            "height": height,
            "steps": options.get("steps", DEFAULT_STEPS),
            "cfg_scale": options.get("cfg_scale", DEFAULT_CFG_SCALE),
        }

    async def _request(self, prompt: str, options: Mapping[str, Any]) -> str:
        data = await self._post_json("/generate-image", self._build_payload(prompt, options))
        image_url = data.get("imageUrl") or data.get("image_url")
        if not isinstance(image_url, str) or not image_url:
            raise InvalidProviderResponseError(
                "nanobanana response has no imageUrl", provider=self.name
            )
        return image_url
