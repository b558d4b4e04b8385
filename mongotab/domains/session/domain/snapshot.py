"""Persisted session model.

Readers ignore unknown fields and default missing ones, so older and newer
snapshots both load.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mongotab.core.signals import TabFocus
from mongotab.domains.documents.domain.filters import EMPTY_FILTER_TEXT
from mongotab.shared.core.errors import SnapshotError

SNAPSHOT_VERSION = 1

_STABLE_FOCI = (TabFocus.CONNECTIONS, TabFocus.DATABASES, TabFocus.COLLECTIONS, TabFocus.DOCUMENTS)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _parse_focus(value: Any) -> TabFocus:
    try:
        focus = TabFocus(value)
    except ValueError:
        return TabFocus.CONNECTIONS
    return focus if focus in _STABLE_FOCI else TabFocus.CONNECTIONS


@dataclass(frozen=True)
class TabSnapshot:
    id: str
    connection_id: str | None = None
    connection_name: str | None = None
    connection_url: str | None = None
    database: str | None = None
    collection: str | None = None
    page: int = 0
    filter: dict[str, Any] = field(default_factory=dict)
    filter_text: str = EMPTY_FILTER_TEXT
    sort: dict[str, Any] | None = None
    sort_text: str = ""
    selected_doc_id: Any = None
    focus: TabFocus = TabFocus.CONNECTIONS

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "connection_id": self.connection_id,
            "connection_name": self.connection_name,
            "connection_url": self.connection_url,
            "database": self.database,
            "collection": self.collection,
            "page": self.page,
            "filter": self.filter,
            "filter_text": self.filter_text,
            "sort": self.sort,
            "sort_text": self.sort_text,
            "selected_doc_id": self.selected_doc_id,
            "focus": self.focus.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TabSnapshot:
        raw_id = data.get("id")
        if not raw_id:
            raise SnapshotError("Tab entry without an id")
        database = _optional_str(data.get("database"))
        collection = _optional_str(data.get("collection")) if database else None
        raw_page = data.get("page", 0)
        page = raw_page if isinstance(raw_page, int) and raw_page >= 0 else 0
        raw_filter = data.get("filter")
        raw_sort = data.get("sort")
        return cls(
            id=str(raw_id),
            connection_id=_optional_str(data.get("connection_id")),
            connection_name=_optional_str(data.get("connection_name")),
            connection_url=_optional_str(data.get("connection_url")),
            database=database,
            collection=collection,
            page=page if collection else 0,
            filter=dict(raw_filter) if isinstance(raw_filter, dict) else {},
            filter_text=str(data.get("filter_text") or EMPTY_FILTER_TEXT),
            sort=dict(raw_sort) if isinstance(raw_sort, dict) else None,
            sort_text=str(data.get("sort_text") or ""),
            selected_doc_id=data.get("selected_doc_id"),
            focus=_parse_focus(data.get("focus")),
        )


@dataclass(frozen=True)
class SessionSnapshot:
    tabs: tuple[TabSnapshot, ...] = ()
    active_tab: int | None = None
    version: int = SNAPSHOT_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "active_tab": self.active_tab,
            "tabs": [tab.to_dict() for tab in self.tabs],
        }

    @classmethod
    def from_dict(cls, data: Any) -> SessionSnapshot:
        if not isinstance(data, dict):
            raise SnapshotError("Session snapshot must be a JSON object")
        raw_tabs = data.get("tabs")
        if not isinstance(raw_tabs, list):
            raise SnapshotError("Session snapshot has no tab list")
        tabs = tuple(TabSnapshot.from_dict(raw) for raw in raw_tabs if isinstance(raw, dict))
        raw_active = data.get("active_tab")
        active = raw_active if isinstance(raw_active, int) and 0 <= raw_active < len(tabs) else None
        if active is None and tabs:
            active = 0
        return cls(tabs=tabs, active_tab=active)
