"""Record/replay of external calls for deterministic tests.

Format:   imagen/cassette/format.py   (Cassette, Interaction)
Recorder: imagen/cassette/recorder.py (capture during a live run)
Replayer: imagen/cassette/replayer.py (serve per port/method in order)
Store:    imagen/cassette/store.py    (YAML load / atomic persist)
"""

from imagen.cassette.format import Cassette, Interaction, ERR_TAG, OK_TAG, to_cassette_value
from imagen.cassette.recorder import CassetteRecorder
from imagen.cassette.replayer import CassetteReplayer
from imagen.cassette.store import (
    get_commit_hash,
    load_cassette,
    persist_cassette,
    read_cassette,
)

__all__ = [
    "Cassette",
    "Interaction",
    "OK_TAG",
    "ERR_TAG",
    "to_cassette_value",
    "CassetteRecorder",
    "CassetteReplayer",
    "get_commit_hash",
    "load_cassette",
    "persist_cassette",
    "read_cassette",
]
