"""Records interactions into a cassette file."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from imagen.cassette.format import Cassette, Interaction, to_cassette_value
from imagen.cassette.store import persist_cassette
from imagen.errors import RecorderFinishedError

log = logging.getLogger("imagen.cassette")


class CassetteRecorder:
    """Accumulates interactions during a live run and writes them as YAML.

    Safe to share between concurrent adapter calls: ``record`` assigns
    ``seq`` and appends under one lock, so seq order is the total order of
    calls. The only file I/O happens in ``finish``.
    """

    def __init__(self, path: str | Path, name: str, commit: str = "unknown"):
        self.path = Path(path)
        self.name = name
        self.commit = commit
        self._interactions: list[Interaction] = []
        self._lock = threading.Lock()
        self._closed = False
        self._finished = False

    @property
    def interactions(self) -> tuple[Interaction, ...]:
        with self._lock:
            return tuple(self._interactions)

    def record(self, port: str, method: str, input: Any, output: Any) -> Interaction:
        """Append an interaction. ``seq`` is assigned here.

        Payloads are converted to plain JSON-compatible values up front;
        anything that cannot be converted raises CassetteSerializationError.
        """
        input = to_cassette_value(input, "input")
        output = to_cassette_value(output, "output")
        with self._lock:
            if self._closed:
                raise RecorderFinishedError(
                    f"Recorder for {self.path} is finished; cannot record {port}::{method}"
                )
            interaction = Interaction(
                seq=len(self._interactions),
                port=port,
                method=method,
                input=input,
                output=output,
            )
            self._interactions.append(interaction)
        return interaction

    def finish(self) -> Path:
        """Write the cassette and consume the recorder.

        If writing fails the recorded interactions are kept and ``finish``
        may be called again.
        """
        with self._lock:
            if self._finished:
                raise RecorderFinishedError(f"Cassette {self.path} was already written")
            if self._closed:
                raise RecorderFinishedError(f"Cassette {self.path} is already being written")
            self._closed = True
            cassette = Cassette(
                name=self.name,
                recorded_at=datetime.now(timezone.utc),
                commit=self.commit,
                interactions=list(self._interactions),
            )

        try:
            path = persist_cassette(cassette, self.path)
        except BaseException:
            with self._lock:
                self._closed = False
            raise

        with self._lock:
            self._finished = True
        log.info("Wrote %d interactions to %s", len(cassette.interactions), path)
        return path
