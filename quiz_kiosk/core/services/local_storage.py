"""Durable key/value storage backed by one JSON file per key."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import re
from typing import Protocol

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(Exception):
    """Raised when durable storage cannot be read or written."""


class KeyValueStorage(Protocol):
    """Minimal storage contract shared by the state store and usage ledger."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class LocalStorage:
    """Stores each key as ``<directory>/<key>.json``.

    Writes go through a temporary file and ``os.replace`` so a crash never
    leaves a half-written blob behind.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def read(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Unable to read '{key}' from {path}: {exc}") from exc

    def write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(".json.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(value, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError as exc:
            raise StorageError(f"Unable to write '{key}' to {path}: {exc}") from exc
        logger.debug("Persisted %s (%d bytes)", key, len(value))

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Unable to remove '{key}' at {path}: {exc}") from exc

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Storage key '{key}' contains unsupported characters.")
        return self._directory / f"{key}.json"


class MemoryStorage:
    """In-process storage for session-only runs and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)
