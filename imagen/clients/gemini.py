"""Gemini API client - image generation via generateContent.

Used for the gemini-* models (nano-banana aliases).
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

import httpx

from imagen.clients.base import BaseClient, truncate_body
from imagen.errors import ApiError
from imagen.ports.image_generator import GeneratedImage, ImageRequest, ImageResponse

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiGenerator:
    """Live Gemini image generator."""

    def __init__(
        self,
        api_key: str,
        base_url: str = GEMINI_API_BASE,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = BaseClient(
            base_url=base_url,
            headers={"x-goog-api-key": api_key},
            provider_name="gemini",
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.close()

    async def generate(self, request: ImageRequest) -> ImageResponse:
        data, text = await self._client.post(
            f"/{request.model}:generateContent",
            json_data=build_request_body(request),
        )
        return parse_response(data, text)


def build_request_body(request: ImageRequest) -> dict[str, Any]:
    generation_config: dict[str, Any] = {
        "responseModalities": ["IMAGE"],
        "imageConfig": {
            "aspectRatio": request.aspect_ratio,
            "imageSize": request.size,
        },
    }
    if request.thinking:
        generation_config["thinkingConfig"] = {"thinkingLevel": request.thinking.upper()}

    return {
        "contents": [{"parts": [{"text": request.prompt}]}],
        "generationConfig": generation_config,
    }


def parse_response(data: Any, text: str) -> ImageResponse:
    """Collect every inlineData part across all candidates."""
    try:
        candidates = data["candidates"]
        parts = [part for c in candidates for part in c["content"]["parts"]]
    except (KeyError, TypeError) as e:
        raise ApiError(200, f"Failed to parse response: missing {e}", provider="gemini") from e

    images: list[GeneratedImage] = []
    for part in parts:
        inline = part.get("inlineData")
        if not inline:
            continue
        try:
            raw = base64.b64decode(inline["data"], validate=True)
        except (KeyError, binascii.Error) as e:
            raise ApiError(200, f"Failed to decode base64: {e}", provider="gemini") from e
        images.append(GeneratedImage(data=raw, mime_type=inline.get("mimeType", "image/png")))

    if not images:
        raise ApiError(
            200, f"No images in response. Body: {truncate_body(text)}", provider="gemini",
        )
    return ImageResponse(images=images)
