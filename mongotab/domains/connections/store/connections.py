"""Connection store for managing saved database connections."""

from __future__ import annotations

from typing import Any

from mongotab.domains.connections.domain.connection import Connection
from mongotab.shared.core.store import CONNECTIONS_KEY, JSONFileStore, Storage


class ConnectionStore(JSONFileStore):
    """Store for saved connections.

    Connections are stored as a versioned JSON object in ``connections.json``.
    A bare list (the legacy layout) is still accepted and rewritten on load.
    """

    _CURRENT_VERSION = 1
    _CONNECTIONS_KEY = "connections"
    _VERSION_KEY = "version"

    def __init__(self, storage: Storage) -> None:
        super().__init__(storage, CONNECTIONS_KEY)

    def load_all(self) -> list[Connection]:
        """Load all saved connections, or an empty list if none exist."""
        data = self._read_json()
        if data is None:
            return []
        version, raw_connections, needs_migration = self._unpack_connections_payload(data)
        connections = [Connection.from_dict(raw) for raw in raw_connections if isinstance(raw, dict)]
        if needs_migration:
            self._migrate_connections_payload(connections, version)
        return connections

    def save_all(self, connections: list[Connection]) -> None:
        """Save all connections. Raises StorageError when the write fails."""
        self._write_json(self._wrap_connections_payload([conn.to_dict() for conn in connections]))

    def _unpack_connections_payload(self, data: object) -> tuple[int, list[Any], bool]:
        if isinstance(data, list):
            return 0, data, True
        if isinstance(data, dict):
            raw_version = data.get(self._VERSION_KEY)
            raw_connections = data.get(self._CONNECTIONS_KEY)
            if isinstance(raw_connections, list):
                version = raw_version if isinstance(raw_version, int) else self._CURRENT_VERSION
                return version, raw_connections, False
        return 0, [], False

    def _wrap_connections_payload(self, connections: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            self._VERSION_KEY: self._CURRENT_VERSION,
            self._CONNECTIONS_KEY: connections,
        }

    def _migrate_connections_payload(self, connections: list[Connection], version: int) -> None:
        if version == self._CURRENT_VERSION:
            return
        try:
            self.save_all(connections)
        except Exception:
            # Best-effort migration; loading should still succeed.
            pass
