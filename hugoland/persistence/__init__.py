"""
Persistence - Saved snapshots of player progress.

This package provides:
- Pydantic schemas for the persisted blob (camelCase, defaults everywhere)
- A codec between GameState and the blob
- Async storage backends behind PersistencePort

Only one thing is ever stored: the latest snapshot under one key.
The in-memory state stays authoritative; storage lags behind it.
"""

from .schemas import GameSnapshot, SNAPSHOT_VERSION
from .codec import decode_state, encode_state, merge_achievements, snapshot_to_state, state_to_snapshot
from .storage import InMemoryStorage, JsonFileStorage, PersistencePort

__all__ = [
    "GameSnapshot",
    "SNAPSHOT_VERSION",
    "decode_state",
    "encode_state",
    "merge_achievements",
    "snapshot_to_state",
    "state_to_snapshot",
    "InMemoryStorage",
    "JsonFileStorage",
    "PersistencePort",
]
