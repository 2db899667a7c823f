"""File naming, image saving, and format conversion."""

from __future__ import annotations

import io
import time
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from imagen.errors import ImageConversionError, OutputError
from imagen.params import format_extension

_PIL_FORMATS = {"jpeg": "JPEG", "png": "PNG", "webp": "WEBP"}
_FORMAT_MIME = {"jpeg": "image/jpeg", "png": "image/png", "webp": "image/webp"}


def sanitize_for_filename(text: str, max_len: int) -> str:
    """Lowercase kebab-case of the ASCII alphanumerics in text, at most max_len chars."""
    chars: list[str] = []
    last_was_hyphen = True  # no leading hyphen

    for ch in text[: max_len * 2]:
        if len(chars) >= max_len:
            break
        if ch.isascii() and ch.isalnum():
            chars.append(ch.lower())
            last_was_hyphen = False
        elif not last_was_hyphen:
            chars.append("-")
            last_was_hyphen = True

    result = "".join(chars).rstrip("-")
    return result or "image"


def auto_filename(prompt: str, fmt: str, timestamp: Optional[int] = None) -> str:
    """``<sanitized prompt>-<unix seconds>.<ext>``"""
    if timestamp is None:
        timestamp = int(time.time())
    return f"{sanitize_for_filename(prompt, 50)}-{timestamp}.{format_extension(fmt)}"


def resolve_output_path(explicit: Optional[str], prompt: str, fmt: str) -> Path:
    if explicit:
        return Path(explicit)
    return Path(auto_filename(prompt, fmt))


def numbered_path(base: Path, index: int, total: int) -> Path:
    """``cat.jpg`` → ``cat-2.jpg`` when saving more than one image."""
    if total <= 1:
        return base
    return base.with_name(f"{base.stem}-{index + 1}{base.suffix}")


def mime_matches_format(mime: str, fmt: str) -> bool:
    return _FORMAT_MIME.get(fmt) == mime


def save_image(data: bytes, source_mime: str, target_format: str, output_path: Path) -> None:
    """Save raw image bytes, converting with Pillow when the format differs."""
    if mime_matches_format(source_mime, target_format):
        payload = data
    else:
        payload = convert_image(data, target_format)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(payload)
    except OSError as e:
        raise OutputError(f"Failed to write {output_path}: {e}") from e


def convert_image(data: bytes, target_format: str) -> bytes:
    pil_format = _PIL_FORMATS.get(target_format)
    if pil_format is None:
        raise ImageConversionError(f"Unsupported format: {target_format}")

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageConversionError(f"Failed to decode image: {e}") from e

    # JPEG has no alpha channel
    if pil_format == "JPEG" and img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buf = io.BytesIO()
    try:
        img.save(buf, format=pil_format)
    except (OSError, ValueError) as e:
        raise ImageConversionError(f"Failed to save as {target_format}: {e}") from e
    return buf.getvalue()
