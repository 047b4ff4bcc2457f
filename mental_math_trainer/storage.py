"""Local key-value persistence for the trainer's level.

The only persisted value is the current level, stored under ``mathLevel`` as
a decimal string.  ``JsonFileStore`` keeps a flat JSON object of strings on
disk; ``MemoryStore`` is the in-process equivalent used by tests and headless
runs.  Neither store raises on I/O problems: a missing or corrupt file reads
as empty, and a failed write is logged while the in-memory value is kept.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

STORE_PATH_ENV = "MENTAL_MATH_STORE_PATH"
LEVEL_KEY = "mathLevel"
DEFAULT_LEVEL = 1


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)
        self.writes += 1


class JsonFileStore:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._data: dict[str, str] = {}
        self._load()

    @classmethod
    def default_path(cls) -> Path:
        explicit = os.environ.get(STORE_PATH_ENV)
        if explicit:
            return Path(explicit).expanduser()
        return Path.home() / ".mental_math_trainer.json"

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)
        self.save()

    def save(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            tmp_path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            logger.warning("Could not write store %s: %s", self._path, exc)

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self._path, exc)
            return
        if not isinstance(payload, dict):
            logger.warning("Ignoring store %s: expected a JSON object", self._path)
            return
        self._data = {str(k): str(v) for k, v in payload.items() if v is not None}


class LevelStore:
    """Reads and writes the persisted level through a KeyValueStore."""

    def __init__(self, store: KeyValueStore, *, key: str = LEVEL_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> int:
        raw = self._store.get(self._key)
        if raw is None:
            return DEFAULT_LEVEL
        try:
            level = int(raw.strip())
        except ValueError:
            logger.warning("Stored level %r is not an integer; using %d", raw, DEFAULT_LEVEL)
            return DEFAULT_LEVEL
        if level < 1:
            logger.warning("Stored level %d is below 1; using %d", level, DEFAULT_LEVEL)
            return DEFAULT_LEVEL
        return level

    def save(self, level: int) -> None:
        if level < 1:
            raise ValueError("level must be >= 1")
        self._store.set(self._key, str(int(level)))
        logger.debug("Persisted %s=%d", self._key, level)
