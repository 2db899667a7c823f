"""Cassette document model.

A cassette is a YAML document:

    name: 2026-02-01T10-00-00-image_generator
    recorded_at: '2026-02-01T10:00:00.123456Z'
    commit: 3f2c...
    interactions:
      - seq: 0
        port: image_generator
        method: generate
        input: {...}
        output: {Ok: {...}}     # or {Err: "message"}, or a bare legacy value

Interaction order is replay order. ``seq`` is informational.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import PydanticSerializationError, to_jsonable_python

from imagen.errors import CassetteSerializationError

OK_TAG = "Ok"
ERR_TAG = "Err"


class Interaction(BaseModel):
    """One recorded call on a port."""

    model_config = ConfigDict(frozen=True)

    seq: int = Field(ge=0)
    port: str
    method: str
    input: Any = None
    output: Any = None


class Cassette(BaseModel):
    """Ordered log of interactions plus capture metadata."""

    model_config = ConfigDict(frozen=True)

    name: str
    recorded_at: datetime
    commit: str = "unknown"
    interactions: list[Interaction] = Field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        """Plain dict ready for YAML, keys in document order."""
        return self.model_dump(mode="json")


def ok_output(payload: Any) -> dict[str, Any]:
    return {OK_TAG: payload}


def err_output(message: str) -> dict[str, str]:
    return {ERR_TAG: message}


def to_cassette_value(value: Any, what: str) -> Any:
    """JSON-compatible copy of value. Unrepresentable values are fatal."""
    try:
        return to_jsonable_python(value)
    except PydanticSerializationError as e:
        raise CassetteSerializationError(f"failed to serialize recording {what}: {e}") from e
