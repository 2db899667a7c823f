"""Cassette load / persist.

Files are YAML. Writes go to a uniquely named temp file in the target
directory that is then renamed over the target, so a half-written cassette
never sits where a later replay would pick it up.
"""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from imagen.cassette.format import Cassette
from imagen.cassette.replayer import CassetteReplayer
from imagen.errors import (
    CassetteLoadError,
    CassetteSerializationError,
    CassetteWriteError,
)

log = logging.getLogger("imagen.cassette")


def read_cassette(path: str | Path) -> Cassette:
    """Read and validate a cassette file."""
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise CassetteLoadError(path, f"Failed to read cassette file {path}: {e}") from e

    # Bytes go straight to the YAML reader, which reports bad encodings as YAMLError
    try:
        data = yaml.safe_load(content)
        return Cassette.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise CassetteLoadError(path, f"Failed to parse cassette file {path}: {e}") from e


def load_cassette(path: str | Path) -> CassetteReplayer:
    """Load a cassette file and build a replayer over it."""
    cassette = read_cassette(path)
    log.debug(
        "Loaded cassette %r from %s (%d interactions, commit %s)",
        cassette.name, path, len(cassette.interactions), cassette.commit,
    )
    return CassetteReplayer(cassette)


def dump_cassette(cassette: Cassette) -> str:
    """Serialize a cassette to YAML text."""
    try:
        return yaml.safe_dump(
            cassette.to_document(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    except (PydanticSerializationError, yaml.YAMLError) as e:
        raise CassetteSerializationError(f"Cassette {cassette.name!r} is not serializable: {e}") from e


def persist_cassette(cassette: Cassette, path: str | Path) -> Path:
    """Write a cassette atomically. Returns the path written."""
    path = Path(path)
    text = dump_cassette(cassette)

    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(text)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
        raise CassetteWriteError(path, str(e)) from e

    return path


def get_commit_hash(cwd: str | Path | None = None) -> str:
    """Current git commit hash, or ``"unknown"``."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=str(cwd) if cwd else None,
            capture_output=True, text=True, timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return "unknown"
    if result.returncode != 0:
        return "unknown"
    return result.stdout.strip() or "unknown"
