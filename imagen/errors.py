"""Error types for imagen.

Two families:

- ``ImageError`` and its subclasses are recoverable. They travel up to the
  CLI, which prints ``Error: <message>`` and exits with status 1.
- ``CassetteFixtureError`` and the other ``RuntimeError`` subclasses below
  mean a broken test fixture or an adapter bug. They are never caught by the
  CLI and abort the run with a traceback.
"""

from __future__ import annotations

from pathlib import Path


class ImageError(Exception):
    """Base class for recoverable imagen failures."""


class ApiError(ImageError):
    """Structured API error from an image provider."""

    def __init__(self, status: int, message: str, provider: str = "", retryable: bool = False):
        super().__init__(f"API error ({status}): {message}")
        self.status = status
        self.message = message
        self.provider = provider
        self.retryable = retryable


class NetworkError(ImageError):
    """Transport-level failure talking to a provider."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(f"Network error: {message}")
        self.provider = provider
        self.retryable = True


class ConfigError(ImageError):
    def __init__(self, message: str):
        super().__init__(f"Config error: {message}")


class InvalidArgumentError(ImageError):
    def __init__(self, message: str):
        super().__init__(f"Invalid argument: {message}")


class ImageConversionError(ImageError):
    def __init__(self, message: str):
        super().__init__(f"Image conversion error: {message}")


class OutputError(ImageError):
    def __init__(self, message: str):
        super().__init__(f"I/O error: {message}")


class MissingApiKeyError(ImageError):
    """No API key configured for the selected provider."""

    def __init__(self, provider: str, env_var: str):
        super().__init__(
            f"No API key for {provider}. Set {env_var} or add it to config file."
        )
        self.provider = provider
        self.env_var = env_var


class CassetteLoadError(ConfigError):
    """Cassette file missing, unreadable, or malformed."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"Failed to load cassette: {message}")
        self.path = Path(path)


class CassetteWriteError(ImageError):
    """Cassette could not be written. Recorded data is still in memory."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to write cassette {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class ReplayedError(ImageError):
    """A failure outcome served from a cassette.

    ``str()`` is exactly the message that was recorded.
    """


# ── Fatal ────────────────────────────────────────────────────────────


class CassetteFixtureError(RuntimeError):
    """Cassette does not match the calls being replayed."""


class UnknownInteractionError(CassetteFixtureError):
    def __init__(self, port: str, method: str, available: list[str]):
        super().__init__(
            f"Cassette exhausted: no interactions recorded for port={port!r} "
            f"method={method!r}. Available port::method pairs: [{', '.join(available)}]"
        )
        self.port = port
        self.method = method
        self.available = available


class CassetteExhaustedError(CassetteFixtureError):
    def __init__(self, port: str, method: str, count: int):
        super().__init__(
            f"Cassette exhausted: all {count} interactions for port={port!r} "
            f"method={method!r} have been consumed."
        )
        self.port = port
        self.method = method
        self.count = count


class CassetteSerializationError(RuntimeError):
    """A payload could not be described in the cassette format."""


class RecorderFinishedError(RuntimeError):
    """The recorder was used after its cassette was written."""
