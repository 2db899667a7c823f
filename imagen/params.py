"""Parameter validation and translation between CLI values and provider formats."""

from __future__ import annotations

from imagen.errors import InvalidArgumentError
from imagen.model import Provider

ASPECT_RATIOS: dict[Provider, tuple[str, ...]] = {
    Provider.GEMINI: ("1:1", "2:3", "3:2", "3:4", "4:3", "4:5", "5:4", "9:16", "16:9", "21:9"),
    Provider.OPENAI: ("1:1", "16:9", "9:16", "3:2", "2:3", "4:3", "3:4", "5:4", "4:5", "21:9"),
}
SIZES = ("1K", "2K", "4K")
QUALITIES = ("auto", "low", "medium", "high")
FORMATS = ("jpeg", "png", "webp")
THINKING_LEVELS = ("none", "minimal", "low", "medium", "high")

_OPENAI_LANDSCAPE = {"16:9", "3:2", "4:3", "21:9", "5:4"}
_OPENAI_PORTRAIT = {"9:16", "2:3", "3:4", "4:5"}


def aspect_ratio_to_openai_size(ratio: str) -> str:
    """OpenAI supports 1024x1024, 1536x1024, 1024x1536 and auto."""
    if ratio == "1:1":
        return "1024x1024"
    if ratio in _OPENAI_LANDSCAPE:
        return "1536x1024"
    if ratio in _OPENAI_PORTRAIT:
        return "1024x1536"
    return "auto"


def validate_aspect_ratio(ratio: str, provider: Provider) -> None:
    valid = ASPECT_RATIOS[provider]
    if ratio not in valid:
        raise InvalidArgumentError(
            f"Unsupported aspect ratio '{ratio}' for {provider.label}. Valid: {', '.join(valid)}"
        )


def validate_size(size: str) -> None:
    if size not in SIZES:
        raise InvalidArgumentError(f"Unsupported size '{size}'. Valid: {', '.join(SIZES)}")


def validate_quality(quality: str) -> None:
    if quality not in QUALITIES:
        raise InvalidArgumentError(
            f"Unsupported quality '{quality}'. Valid: {', '.join(QUALITIES)}"
        )


def validate_format(fmt: str) -> None:
    if fmt not in FORMATS:
        raise InvalidArgumentError(f"Unsupported format '{fmt}'. Valid: {', '.join(FORMATS)}")


def validate_thinking(thinking: str, provider: Provider) -> None:
    """Thinking levels are a Gemini-only option."""
    if provider is not Provider.GEMINI:
        raise InvalidArgumentError("--thinking is only supported for Gemini models")
    if thinking not in THINKING_LEVELS:
        raise InvalidArgumentError(
            f"Unsupported thinking level '{thinking}'. Valid: {', '.join(THINKING_LEVELS)}"
        )


def validate_count(count: int) -> None:
    if count < 1:
        raise InvalidArgumentError(f"Image count must be at least 1, got {count}")


def format_extension(fmt: str) -> str:
    if fmt in ("png", "webp"):
        return fmt
    # jpeg and anything unknown
    return "jpg"
