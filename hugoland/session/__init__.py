"""
Session Module - One player's running game.

A session wraps the engine for a live process:
- The store holds the canonical state and commits transitions
- Committed states are pushed to listeners and saved in the background
- The game loop owns the timers (answer reveal, question timeout, play clock)

The saved snapshot is loaded once at startup and only ever trails the
in-memory state.
"""

from .store import GameStore, build_store
from .game_loop import EncounterToken, GameLoop, LoopState

__all__ = [
    "GameStore",
    "build_store",
    "EncounterToken",
    "GameLoop",
    "LoopState",
]
