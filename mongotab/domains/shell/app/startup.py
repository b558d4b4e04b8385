"""Decide which tabs exist when the app starts."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mongotab.core.signals import ErrorOccurred, TabFocus
from mongotab.domains.connections.domain.connection import UNNAMED_CONNECTION, Connection
from mongotab.domains.session.app.persistence import hydrate, load_snapshot, restore_tab
from mongotab.domains.session.domain.snapshot import TabSnapshot
from mongotab.domains.shell.app.app import App
from mongotab.domains.shell.app.tab_state import new_tab_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartupOptions:
    url: str | None = None
    connection_name: str | None = None
    database: str | None = None
    collection: str | None = None
    restore: bool = False

    @property
    def explicit(self) -> bool:
        return bool(self.url or self.connection_name)


def _startup_connection(app: App, options: StartupOptions) -> Connection | None:
    if options.url:
        return Connection(name=options.connection_name or UNNAMED_CONNECTION, url=options.url)
    return app.services.connections.find(name=options.connection_name)


def _landing_focus(database: str | None, collection: str | None) -> TabFocus:
    if collection:
        return TabFocus.DOCUMENTS
    if database:
        return TabFocus.COLLECTIONS
    return TabFocus.DATABASES


def apply_startup(app: App, options: StartupOptions) -> None:
    """Open the initial tabs.

    An explicit connection wins and the last session is not read at all.
    Otherwise ``restore`` rehydrates the last session, and anything else
    starts with one fresh tab.
    """
    if options.explicit:
        connection = _startup_connection(app, options)
        if connection is None:
            tab = app.open_tab()
            app.queue.push_event(ErrorOccurred(f"No saved connection named '{options.connection_name}'", tab.id))
        else:
            collection = options.collection if options.database else None
            snapshot = TabSnapshot(
                id=new_tab_id(),
                connection_id=connection.id,
                connection_name=connection.name,
                database=options.database,
                collection=collection,
                focus=_landing_focus(options.database, collection),
            )
            restore_tab(app, snapshot, connection=connection)
    elif options.restore:
        snapshot = load_snapshot(app.services.storage)
        if snapshot is None or not snapshot.tabs:
            logger.info("No previous session to restore")
            app.open_tab()
        else:
            hydrate(app, snapshot)
    else:
        app.open_tab()
    app.tick()
