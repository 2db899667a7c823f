"""Replaying adapter - serves recorded outcomes, never touches the network."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from imagen.cassette.format import ERR_TAG, OK_TAG
from imagen.cassette.replayer import CassetteReplayer
from imagen.errors import ReplayedError
from imagen.ports.image_generator import GENERATE, PORT, ImageRequest, ImageResponse

M = TypeVar("M", bound=BaseModel)


def next_output(replayer: CassetteReplayer, port: str, method: str) -> Any:
    """Output of the next recorded interaction for (port, method).

    Fixture errors from the replayer propagate untouched.
    """
    return replayer.next_interaction(port, method).output


def decode_output(output: Any, model: type[M]) -> M:
    """Decode a recorded output into ``model``.

    ``{"Err": msg}`` raises ReplayedError(msg); ``{"Ok": value}`` validates
    value. Untagged output is a legacy success payload.
    """
    if isinstance(output, dict):
        for tag in (ERR_TAG, ERR_TAG.lower()):
            if tag in output:
                message = output[tag]
                raise ReplayedError(message if isinstance(message, str) else "replayed error")
        for tag in (OK_TAG, OK_TAG.lower()):
            if tag in output:
                output = output[tag]
                break

    try:
        return model.model_validate(output)
    except ValidationError as e:
        raise ReplayedError(f"Failed to decode replayed {model.__name__}: {e}") from e


class ReplayingImageGenerator:
    """Serves recorded image generation results from a cassette."""

    def __init__(self, replayer: CassetteReplayer):
        self.replayer = replayer

    async def generate(self, request: ImageRequest) -> ImageResponse:
        # The cassette already encodes the scenario; the request is not consulted.
        output = next_output(self.replayer, PORT, GENERATE)
        return decode_output(output, ImageResponse)

    async def close(self) -> None:
        pass
