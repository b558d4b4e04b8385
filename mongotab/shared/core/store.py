"""Storage capability and the JSON store base class."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Protocol

from mongotab.shared.core.errors import StorageError

logger = logging.getLogger(__name__)

CONNECTIONS_KEY = "connections"
SESSION_KEY = "last-session"


class Storage(Protocol):
    """Key/value byte storage used for the persisted artifacts."""

    def load(self, key: str) -> bytes | None:
        """Return stored bytes or None when the key was never saved."""
        ...

    def save(self, key: str, data: bytes) -> None:
        """Store bytes. Raises StorageError on failure."""
        ...


class FileStorage:
    """One JSON file per key inside a directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc

    def save(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write {path}: {exc}") from exc


class InMemoryStorage:
    """In-memory storage for tests.

    ``fail_saves`` makes every save raise, ``block_saves()`` makes each save wait
    (a hung disk) until ``release()`` is called.
    """

    def __init__(self, initial: dict[str, bytes] | None = None, *, fail_saves: bool = False) -> None:
        self.data: dict[str, bytes] = dict(initial or {})
        self.fail_saves = fail_saves
        self.save_calls: list[str] = []
        self._gate: threading.Event | None = None

    def block_saves(self) -> None:
        self._gate = threading.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    def load(self, key: str) -> bytes | None:
        return self.data.get(key)

    def save(self, key: str, data: bytes) -> None:
        self.save_calls.append(key)
        if self._gate is not None:
            self._gate.wait()
        if self.fail_saves:
            raise StorageError(f"Refusing to save {key}")
        self.data[key] = data


class JSONFileStore:
    """Base class for stores that keep one JSON document under a storage key."""

    def __init__(self, storage: Storage, key: str) -> None:
        self.storage = storage
        self.key = key

    def _read_json(self) -> Any | None:
        """Read and decode the stored document.

        Missing data returns None. Unreadable or corrupt data is logged and
        also returns None so callers fall back to defaults.
        """
        try:
            raw = self.storage.load(self.key)
        except StorageError as exc:
            logger.warning("Could not load %s: %s", self.key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            logger.warning("Ignoring corrupt %s: %s", self.key, exc)
            return None

    def _write_json(self, data: Any) -> None:
        payload = json.dumps(data, indent=2, default=str).encode("utf-8")
        self.storage.save(self.key, payload)
