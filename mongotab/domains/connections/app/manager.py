"""Shared, read-mostly list of saved connections."""

from __future__ import annotations

import logging

from mongotab.domains.connections.domain.connection import Connection, find_connection
from mongotab.domains.connections.store.connections import ConnectionStore

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns the saved connections shared by every tab.

    Only explicit add/update/delete calls mutate the list, and each one is
    written through to the store immediately. A failed write raises
    ``StorageError`` after the in-memory change has been applied.
    """

    def __init__(self, store: ConnectionStore) -> None:
        self._store = store
        self._connections: list[Connection] = store.load_all()

    @property
    def connections(self) -> list[Connection]:
        return list(self._connections)

    def get(self, connection_id: str) -> Connection | None:
        return find_connection(self._connections, connection_id=connection_id)

    def find(self, *, connection_id: str | None = None, name: str | None = None) -> Connection | None:
        return find_connection(self._connections, connection_id=connection_id, name=name)

    def save(self, connection: Connection) -> bool:
        """Add a new connection or update the one sharing its id.

        Returns True when an existing connection was updated.
        """
        for index, existing in enumerate(self._connections):
            if existing.id == connection.id:
                self._connections[index] = connection
                self._persist()
                return True
        self._connections.append(connection)
        self._persist()
        return False

    def delete(self, connection_id: str) -> Connection | None:
        for index, existing in enumerate(self._connections):
            if existing.id == connection_id:
                removed = self._connections.pop(index)
                self._persist()
                return removed
        return None

    def _persist(self) -> None:
        logger.debug("Saving %d connections", len(self._connections))
        self._store.save_all(self._connections)
