"""Dehydrate the running app into a snapshot and hydrate it back."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import TYPE_CHECKING

from mongotab.core.signals import ConnectionSelected, Message, Notified, SelectTab, Severity, Target
from mongotab.domains.connections.domain.connection import UNNAMED_CONNECTION, Connection, new_connection_id
from mongotab.domains.session.domain.snapshot import SessionSnapshot, TabSnapshot
from mongotab.domains.session.store.session import SessionStore
from mongotab.shared.core.errors import StorageError
from mongotab.shared.core.store import Storage

if TYPE_CHECKING:
    from mongotab.domains.shell.app.app import App
    from mongotab.domains.shell.app.tab import Tab

logger = logging.getLogger(__name__)


def dehydrate(app: App) -> SessionSnapshot:
    """Project every tab onto its persisted form, in tab order."""
    tabs = tuple(app.tabs[tab_id].persisted() for tab_id in app.focus.tab_ids)
    return SessionSnapshot(tabs=tabs, active_tab=app.focus.active_index)


def hydrate(app: App, snapshot: SessionSnapshot) -> None:
    """Recreate the snapshot's tabs.

    Each tab reconnects and walks back down to its database, collection and
    page as the listings arrive. Whatever no longer exists is reported and the
    tab stops at the deepest level that still does.
    """
    for tab_snapshot in snapshot.tabs:
        restore_tab(app, tab_snapshot, activate=False)
    if snapshot.active_tab is not None:
        app.queue.push_message(Message(Target.APP, SelectTab(snapshot.active_tab)))


def restore_tab(app: App, snapshot: TabSnapshot, *, activate: bool = True, connection: Connection | None = None) -> Tab:
    """Open a tab that reconnects and walks back to ``snapshot``.

    ``connection`` overrides the lookup. Otherwise a saved connection is found
    by id; an ad-hoc one is rebuilt from its stored url; failing both, a saved
    connection with the same name is used.
    """
    tab = app.open_tab(tab_id=snapshot.id, activate=activate)
    connections = app.services.connections
    if connection is None and snapshot.connection_id:
        connection = connections.get(snapshot.connection_id)
    if connection is None and snapshot.connection_url:
        connection = Connection(
            name=snapshot.connection_name or UNNAMED_CONNECTION,
            url=snapshot.connection_url,
            id=snapshot.connection_id or new_connection_id(),
        )
    if connection is None and snapshot.connection_name:
        connection = connections.find(name=snapshot.connection_name)
    if connection is None:
        label = snapshot.connection_name or snapshot.connection_id
        if label:
            logger.info("Tab %s: saved connection %s is gone", tab.id, label)
            app.queue.push_event(Notified(f"Connection '{label}' no longer exists", Severity.INFO, tab.id))
        return tab
    saved = connections.get(connection.id) is not None
    tab.restore = replace(
        snapshot,
        id=tab.id,
        connection_id=connection.id,
        connection_name=connection.name,
        connection_url=None if saved else connection.url,
    )
    app.queue.push_event(ConnectionSelected(tab.id, connection))
    return tab


def load_snapshot(storage: Storage) -> SessionSnapshot | None:
    return SessionStore(storage).load()


def save_snapshot(storage: Storage, snapshot: SessionSnapshot) -> None:
    SessionStore(storage).save(snapshot)


def save_session_bounded(storage: Storage, snapshot: SessionSnapshot, timeout_s: float) -> bool:
    """Save on a worker thread and wait at most ``timeout_s`` for it.

    Returns True only when the snapshot was written in time. A hung or failing
    write is logged and abandoned so the app can still exit.
    """
    outcome: dict[str, bool] = {}

    def worker() -> None:
        try:
            save_snapshot(storage, snapshot)
        except StorageError as exc:
            logger.warning("Could not save session: %s", exc)
            outcome["ok"] = False
        else:
            outcome["ok"] = True

    thread = threading.Thread(target=worker, name="mongotab-session-save", daemon=True)
    thread.start()
    thread.join(timeout_s)
    if thread.is_alive():
        logger.warning("Saving the session took longer than %.1fs; giving up", timeout_s)
        return False
    return outcome.get("ok", False)
