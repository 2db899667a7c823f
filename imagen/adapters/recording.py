"""Recording adapter - delegates to a live generator and tees each call
into a CassetteRecorder.

Outcomes use the tagged convention: ``{"Ok": <response>}`` on success,
``{"Err": str(exc)}`` on failure. The wrapped call's result or exception
reaches the caller unchanged.
"""

from __future__ import annotations

from typing import Any

from imagen.cassette.format import err_output, ok_output
from imagen.cassette.recorder import CassetteRecorder
from imagen.ports.image_generator import (
    GENERATE,
    PORT,
    ImageGenerator,
    ImageRequest,
    ImageResponse,
)


def record_outcome(
    recorder: CassetteRecorder,
    port: str,
    method: str,
    input: Any,
    result: Any = None,
    error: BaseException | None = None,
) -> None:
    """Record one call. Pass ``error`` for a failed call, else ``result``."""
    if error is not None:
        output = err_output(str(error))
    else:
        output = ok_output(result)
    recorder.record(port, method, input, output)


class RecordingImageGenerator:
    """Records image generation interactions while delegating to ``inner``."""

    def __init__(self, inner: ImageGenerator, recorder: CassetteRecorder):
        self.inner = inner
        self.recorder = recorder

    async def generate(self, request: ImageRequest) -> ImageResponse:
        try:
            response = await self.inner.generate(request)
        except Exception as e:
            record_outcome(self.recorder, PORT, GENERATE, request, error=e)
            raise
        record_outcome(self.recorder, PORT, GENERATE, request, result=response)
        return response

    async def close(self) -> None:
        await self.inner.close()
