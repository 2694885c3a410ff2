"""
Storage - Durable key-value backends for saved snapshots.

The store talks to storage through PersistencePort only. All methods
are async; the file backend pushes blocking I/O onto a worker thread.

Backends raise PersistenceError on failure. The store catches it,
logs it and carries on with the in-memory state.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
import asyncio
import json
import logging
import os

from ..errors import PersistenceError, SnapshotDecodeError

logger = logging.getLogger(__name__)


class PersistencePort(ABC):
    """Key-value store for JSON-serializable blobs."""

    @abstractmethod
    async def load(self, key: str) -> dict[str, Any] | None:
        """Return the blob under key, or None if nothing was saved."""
        pass

    @abstractmethod
    async def save(self, key: str, data: dict[str, Any]) -> None:
        """Replace the blob under key."""
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete the blob under key. Missing keys are not an error."""
        pass


class InMemoryStorage(PersistencePort):
    """
    Process-local storage.

    Blobs are round-tripped through JSON so callers never share
    mutable structures with the store.
    """

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None):
        self._blobs: dict[str, str] = {
            key: json.dumps(value) for key, value in (initial or {}).items()
        }

    async def load(self, key: str) -> dict[str, Any] | None:
        raw = self._blobs.get(key)
        return json.loads(raw) if raw is not None else None

    async def save(self, key: str, data: dict[str, Any]) -> None:
        try:
            self._blobs[key] = json.dumps(data)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Snapshot for {key} is not JSON-serializable") from exc

    async def remove(self, key: str) -> None:
        self._blobs.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._blobs)


class JsonFileStorage(PersistencePort):
    """
    File-based storage: one <key>.json per key.

    Usage:
        storage = JsonFileStorage("~/.hugoland")
        await storage.save("hugoland_game_state", blob)
        blob = await storage.load("hugoland_game_state")

    Writes go to a temporary file that replaces the target, so a crash
    mid-write never leaves a truncated save behind.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    async def load(self, key: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._read, self.path_for(key))

    async def save(self, key: str, data: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, self.path_for(key), data)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._unlink, self.path_for(key))

    def _read(self, path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SnapshotDecodeError(f"Save file {path} is not valid JSON") from exc
        except OSError as exc:
            raise PersistenceError(f"Cannot read {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SnapshotDecodeError(f"Save file {path} does not hold an object")
        return data

    def _write(self, path: Path, data: dict[str, Any]) -> None:
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Cannot write {path}: {exc}") from exc
        logger.debug("Saved snapshot to %s", path)

    def _unlink(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Cannot remove {path}: {exc}") from exc
