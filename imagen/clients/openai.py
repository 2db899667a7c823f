"""OpenAI Images API client - gpt-image-* models."""

from __future__ import annotations

import base64
import binascii
from typing import Any

import httpx

from imagen.clients.base import BaseClient, truncate_body
from imagen.errors import ApiError
from imagen.params import aspect_ratio_to_openai_size
from imagen.ports.image_generator import GeneratedImage, ImageRequest, ImageResponse

OPENAI_API_BASE = "https://api.openai.com/v1"


class OpenAiGenerator:
    """Live OpenAI image generator."""

    def __init__(
        self,
        api_key: str,
        base_url: str = OPENAI_API_BASE,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = BaseClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            provider_name="openai",
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.close()

    async def generate(self, request: ImageRequest) -> ImageResponse:
        data, text = await self._client.post(
            "/images/generations",
            json_data=build_request_body(request),
        )
        return parse_response(data, text, request.format)


def build_request_body(request: ImageRequest) -> dict[str, Any]:
    # Only the 1K range maps to fixed pixel sizes; larger sizes let the API pick.
    size = aspect_ratio_to_openai_size(request.aspect_ratio) if request.size == "1K" else "auto"
    return {
        "model": request.model,
        "prompt": request.prompt,
        "n": request.count,
        "size": size,
        "quality": request.quality,
        "output_format": request.format,
    }


def parse_response(data: Any, text: str, fmt: str) -> ImageResponse:
    try:
        items = data["data"]
        encoded = [item["b64_json"] for item in items]
    except (KeyError, TypeError) as e:
        raise ApiError(200, f"Failed to parse response: missing {e}", provider="openai") from e

    mime_type = f"image/{fmt}"
    images: list[GeneratedImage] = []
    for b64 in encoded:
        try:
            raw = base64.b64decode(b64, validate=True)
        except (binascii.Error, TypeError) as e:
            raise ApiError(200, f"Failed to decode base64: {e}", provider="openai") from e
        images.append(GeneratedImage(data=raw, mime_type=mime_type))

    if not images:
        raise ApiError(
            200, f"No images in response. Body: {truncate_body(text)}", provider="openai",
        )
    return ImageResponse(images=images)
