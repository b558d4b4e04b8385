"""Store for the last-session snapshot."""

from __future__ import annotations

import logging

from mongotab.domains.session.domain.snapshot import SessionSnapshot
from mongotab.shared.core.errors import SnapshotError
from mongotab.shared.core.store import SESSION_KEY, JSONFileStore, Storage

logger = logging.getLogger(__name__)


class SessionStore(JSONFileStore):
    """Keeps one ``SessionSnapshot`` in ``last-session.json``."""

    def __init__(self, storage: Storage) -> None:
        super().__init__(storage, SESSION_KEY)

    def load(self) -> SessionSnapshot | None:
        """Return the saved snapshot, or None when missing or unusable."""
        data = self._read_json()
        if data is None:
            return None
        try:
            return SessionSnapshot.from_dict(data)
        except SnapshotError as exc:
            logger.warning("Ignoring unusable session snapshot: %s", exc)
            return None

    def save(self, snapshot: SessionSnapshot) -> None:
        """Write the snapshot. Raises StorageError when the write fails."""
        self._write_json(snapshot.to_dict())
