"""Protocols for the tab state that shared components read."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol


class ConnectionRef(Protocol):
    id: str
    name: str


class TabStateProtocol(Protocol):
    id: str
    connection: ConnectionRef | None
    database: str | None
    collection: str | None
    page: int
    filter_text: str
    sort_text: str
    selected_doc_id: Any
    databases: list[str]
    collections: list[str]
    documents: list[dict[str, Any]]
    count: int | None
    loading: bool


StateAccessor = Callable[[], TabStateProtocol]
