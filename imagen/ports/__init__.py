"""Port definitions. Implementations live in imagen.clients and imagen.adapters."""

from imagen.ports.image_generator import (
    GENERATE,
    PORT,
    GeneratedImage,
    ImageGenerator,
    ImageRequest,
    ImageResponse,
)

__all__ = [
    "GENERATE",
    "PORT",
    "GeneratedImage",
    "ImageGenerator",
    "ImageRequest",
    "ImageResponse",
]
