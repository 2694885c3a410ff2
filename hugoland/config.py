"""
Configuration - Engine settings and logging setup.

Settings come from environment variables with sensible defaults:
    HUGOLAND_SAVE_DIR     Directory holding the save file (default ~/.hugoland)
    HUGOLAND_STORAGE_KEY  Key the snapshot is stored under
    HUGOLAND_LOG_LEVEL    Logging level name (default INFO)
    HUGOLAND_SEED         Optional integer seed for the engine RNG
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import logging
import os
import sys

STORAGE_KEY = "hugoland_game_state"

# Gameplay constants
RESEARCH_COST = 150
MAX_SURVIVAL_LIVES = 3
PREMIUM_ZONE = 50
MYTHICAL_CHEST_COST = 2500

# Session timing (seconds)
REVEAL_DELAY = 2.0
TICK_INTERVAL = 1.0
ACHIEVEMENT_CHECK_DELAY = 0.1

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


@dataclass
class EngineConfig:
    """Runtime configuration for a game session."""
    save_dir: Path
    storage_key: str = STORAGE_KEY
    log_level: str = "INFO"
    seed: int | None = None

    reveal_delay: float = REVEAL_DELAY
    tick_interval: float = TICK_INTERVAL
    achievement_check_delay: float = ACHIEVEMENT_CHECK_DELAY

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build config from HUGOLAND_* environment variables."""
        save_dir = os.getenv("HUGOLAND_SAVE_DIR")
        seed = os.getenv("HUGOLAND_SEED")
        return cls(
            save_dir=Path(save_dir) if save_dir else Path.home() / ".hugoland",
            storage_key=os.getenv("HUGOLAND_STORAGE_KEY", STORAGE_KEY),
            log_level=os.getenv("HUGOLAND_LOG_LEVEL", "INFO").upper(),
            seed=int(seed) if seed else None,
        )


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Configure the package logger once.

    Repeated calls only adjust the level.
    """
    logger = logging.getLogger("hugoland")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
