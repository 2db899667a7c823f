"""Replays recorded interactions from a cassette.

Records are served per (port, method) pair, each pair in its recorded
order with its own cursor, so independent boundaries can interleave.
"""

from __future__ import annotations

import threading

from imagen.cassette.format import Cassette, Interaction
from imagen.errors import CassetteExhaustedError, UnknownInteractionError

PortMethod = tuple[str, str]


class CassetteReplayer:
    """Serves a loaded cassette's interactions back in recorded order."""

    def __init__(self, cassette: Cassette):
        self.cassette = cassette
        self._queues: dict[PortMethod, list[Interaction]] = {}
        for interaction in cassette.interactions:
            key = (interaction.port, interaction.method)
            self._queues.setdefault(key, []).append(interaction)
        self._cursors: dict[PortMethod, int] = {key: 0 for key in self._queues}
        self._lock = threading.Lock()

    @property
    def pairs(self) -> list[PortMethod]:
        """(port, method) pairs present, in first-recorded order."""
        return list(self._queues)

    def next_interaction(self, port: str, method: str) -> Interaction:
        """Return the next unconsumed interaction for this pair.

        Raises UnknownInteractionError if the pair was never recorded and
        CassetteExhaustedError once every record for it has been served.
        """
        key = (port, method)
        with self._lock:
            queue = self._queues.get(key)
            if queue is None:
                available = [f"{p}::{m}" for p, m in self._queues]
                raise UnknownInteractionError(port, method, available)

            cursor = self._cursors[key]
            if cursor >= len(queue):
                raise CassetteExhaustedError(port, method, len(queue))

            self._cursors[key] = cursor + 1
            return queue[cursor]

    def remaining(self, port: str, method: str) -> int:
        key = (port, method)
        with self._lock:
            queue = self._queues.get(key)
            if queue is None:
                return 0
            return len(queue) - self._cursors[key]
