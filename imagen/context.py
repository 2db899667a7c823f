"""Service context - picks live, recording or replaying generators at startup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from imagen.adapters.recording import RecordingImageGenerator
from imagen.adapters.replaying import ReplayingImageGenerator
from imagen.cassette.recorder import CassetteRecorder
from imagen.cassette.store import get_commit_hash, load_cassette
from imagen.clients.gemini import GeminiGenerator
from imagen.clients.openai import OpenAiGenerator
from imagen.config import Config
from imagen.errors import MissingApiKeyError
from imagen.model import Provider
from imagen.ports.image_generator import PORT, ImageGenerator

log = logging.getLogger("imagen.context")

DEFAULT_CASSETTE_DIR = Path(".imagen") / "cassettes"


class Mode(str, Enum):
    LIVE = "live"
    RECORDING = "recording"
    REPLAYING = "replaying"


def select_mode(env: Mapping[str, str] = os.environ) -> tuple[Mode, Optional[Path]]:
    """$IMAGEN_REPLAY=<cassette> replays; $IMAGEN_REC=1|true records; else live."""
    replay_path = env.get("IMAGEN_REPLAY")
    if replay_path:
        return Mode.REPLAYING, Path(replay_path)
    if env.get("IMAGEN_REC", "").lower() in ("1", "true"):
        return Mode.RECORDING, None
    return Mode.LIVE, None


class RecordingSession:
    """Handle to an active recording; call ``finish`` once generation is done."""

    def __init__(self, recorder: CassetteRecorder):
        self.recorder = recorder

    def finish(self) -> Path:
        return self.recorder.finish()


@dataclass
class ServiceContext:
    generator: ImageGenerator

    @classmethod
    def live(cls, provider: Provider, config: Config) -> ServiceContext:
        if provider is Provider.GEMINI:
            key = config.gemini_key()
            if not key:
                raise MissingApiKeyError("Gemini", "GEMINI_API_KEY")
            return cls(generator=GeminiGenerator(key))

        key = config.openai_key()
        if not key:
            raise MissingApiKeyError("OpenAI", "OPENAI_API_KEY")
        return cls(generator=OpenAiGenerator(key))

    @classmethod
    def recording(
        cls,
        provider: Provider,
        config: Config,
        cassette_dir: Optional[Path] = None,
    ) -> tuple[ServiceContext, RecordingSession]:
        """Live context wrapped with a recorder writing under cassette_dir/<timestamp>/."""
        live_ctx = cls.live(provider, config)

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
        output_dir = (cassette_dir or DEFAULT_CASSETTE_DIR) / timestamp
        recorder = CassetteRecorder(
            output_dir / f"{PORT}.cassette.yaml",
            name=f"{timestamp}-{PORT}",
            commit=get_commit_hash(),
        )
        log.debug("Recording to %s", recorder.path)

        generator = RecordingImageGenerator(live_ctx.generator, recorder)
        return cls(generator=generator), RecordingSession(recorder)

    @classmethod
    def replaying(cls, path: Path) -> ServiceContext:
        return cls(generator=ReplayingImageGenerator(load_cassette(path)))

    async def close(self) -> None:
        await self.generator.close()
