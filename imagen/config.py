"""Configuration loader for imagen.

Loads ~/.config/imagen/config.yaml (or an explicit / $IMAGEN_CONFIG path).
API keys from the environment win over the file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from imagen.errors import ConfigError


class KeysConfig(BaseModel):
    gemini: Optional[str] = None
    openai: Optional[str] = None


class DefaultsConfig(BaseModel):
    """Used for any CLI option not given on the command line."""

    model: str = "nano-banana"
    aspect_ratio: str = "1:1"
    size: str = "1K"
    quality: str = "auto"
    format: str = "jpeg"


class Config(BaseModel):
    keys: KeysConfig = Field(default_factory=KeysConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, path: Path) -> Config:
        """Load config from path. Returns defaults if the file doesn't exist."""
        if not path.exists():
            return cls()
        try:
            data = yaml.safe_load(path.read_bytes()) or {}
        except OSError as e:
            raise ConfigError(f"Failed to read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config {path}: {e}") from e
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config {path}: {e}") from e

    def gemini_key(self) -> Optional[str]:
        return os.environ.get("GEMINI_API_KEY") or self.keys.gemini

    def openai_key(self) -> Optional[str]:
        return os.environ.get("OPENAI_API_KEY") or self.keys.openai


def discover_config_path(explicit: Optional[str] = None) -> Path:
    """Resolution order: --config flag, $IMAGEN_CONFIG, ~/.config/imagen/config.yaml."""
    if explicit:
        return Path(explicit)
    env_path = os.environ.get("IMAGEN_CONFIG")
    if env_path:
        return Path(env_path)
    return default_config_path()


def default_config_path() -> Path:
    home = os.environ.get("HOME")
    if home:
        return Path(home) / ".config" / "imagen" / "config.yaml"
    return Path("imagen.yaml")
