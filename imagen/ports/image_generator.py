"""Image generator port - the boundary to the image-generation APIs.

Live, recording and replaying generators all satisfy ``ImageGenerator``;
the CLI picks one at startup and never knows which it got.
"""

from __future__ import annotations

import base64
from typing import Any, Optional, Protocol

from pydantic import BaseModel, field_serializer, field_validator

PORT = "image_generator"
GENERATE = "generate"


class ImageRequest(BaseModel):
    """A request to generate images."""

    model: str                      # resolved id, e.g. gemini-3.1-flash-image-preview
    prompt: str
    aspect_ratio: str = "1:1"
    size: str = "1K"                # 1K / 2K / 4K
    quality: str = "auto"           # OpenAI only
    format: str = "jpeg"            # jpeg / png / webp
    count: int = 1
    thinking: Optional[str] = None  # Gemini only


class GeneratedImage(BaseModel):
    """Raw image bytes. Serialized as base64 in cassettes."""

    data: bytes
    mime_type: str

    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value: Any) -> Any:
        if isinstance(value, str):
            return base64.b64decode(value)
        return value

    @field_serializer("data")
    def _encode_data(self, data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")


class ImageResponse(BaseModel):
    images: list[GeneratedImage]


class ImageGenerator(Protocol):
    """Generates images from text prompts."""

    async def generate(self, request: ImageRequest) -> ImageResponse:
        """Raise an ImageError subclass on failure."""
        ...

    async def close(self) -> None:
        ...
