"""Model name resolution and provider detection."""

from __future__ import annotations

from enum import Enum

from imagen.errors import InvalidArgumentError


class Provider(str, Enum):
    GEMINI = "gemini"
    OPENAI = "openai"

    @property
    def label(self) -> str:
        return "Gemini" if self is Provider.GEMINI else "OpenAI"


# Short names for popular models
ALIASES: dict[str, str] = {
    "nano-banana": "gemini-3.1-flash-image-preview",
    "nano-banana-pro": "gemini-3-pro-image-preview",
    "gpt-1.5": "gpt-image-1.5",
    "gpt-1": "gpt-image-1",
    "gpt-1-mini": "gpt-image-1-mini",
}


def resolve_model(name: str) -> str:
    """Alias → full model id. Unknown names pass through."""
    return ALIASES.get(name, name)


def detect_provider(model: str) -> Provider:
    if model.startswith("gemini"):
        return Provider.GEMINI
    if model.startswith("gpt-image"):
        return Provider.OPENAI
    raise InvalidArgumentError(
        f"Unknown provider for model '{model}'. Expected 'gemini-*' or 'gpt-image-*'."
    )
