"""Single-owner state of one tab.

Child components read this through the tab's accessor and change it only by
pushing events that the tab handles.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from mongotab.core.signals import TabFocus
from mongotab.domains.connections.domain.connection import Connection
from mongotab.domains.documents.domain.filters import EMPTY_FILTER_TEXT

TITLE_SEPARATOR = "‣"
NEW_TAB_TITLE = "New Tab"

# Focus kept when a tab is persisted, for every transient focus.
STABLE_FOCUS: dict[TabFocus, TabFocus] = {
    TabFocus.CONNECTION_EDITOR: TabFocus.CONNECTIONS,
    TabFocus.QUERY: TabFocus.DOCUMENTS,
}


def new_tab_id() -> str:
    return uuid.uuid4().hex


@dataclass
class TabState:
    id: str = field(default_factory=new_tab_id)
    connection: Connection | None = None
    connected: bool = False
    database: str | None = None
    collection: str | None = None
    page: int = 0
    filter: dict[str, Any] = field(default_factory=dict)
    filter_text: str = EMPTY_FILTER_TEXT
    sort: dict[str, Any] | None = None
    sort_text: str = ""
    selected_doc_id: Any = None
    databases: list[str] = field(default_factory=list)
    collections: list[str] = field(default_factory=list)
    documents: list[dict[str, Any]] = field(default_factory=list)
    count: int | None = None
    loading: bool = False
    focus: TabFocus = TabFocus.CONNECTIONS
    background_focus: TabFocus = TabFocus.CONNECTIONS

    @property
    def title(self) -> str:
        if self.connection is None:
            return NEW_TAB_TITLE
        parts = [self.connection.name]
        if self.database:
            parts.append(self.database)
            if self.collection:
                parts.append(self.collection)
        return TITLE_SEPARATOR.join(parts)

    @property
    def stable_focus(self) -> TabFocus:
        focus = self.background_focus if self.focus.is_modal else self.focus
        return STABLE_FOCUS.get(focus, focus)

    def select_connection(self, connection: Connection | None) -> None:
        self.connection = connection
        self.connected = False
        self.databases = []
        self.select_database(None)

    def select_database(self, name: str | None) -> None:
        """Select a database; any change clears the collection and its documents."""
        if name != self.database:
            self.collections = []
        self.database = name
        self.select_collection(None)

    def select_collection(self, name: str | None) -> None:
        if name is not None and self.database is None:
            raise ValueError("A collection requires a selected database")
        self.collection = name
        self.page = 0
        self.documents = []
        self.count = None
        self.loading = False
        self.selected_doc_id = None
