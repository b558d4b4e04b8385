"""Connection domain model."""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_CREDENTIALS_RE = re.compile(r"^(?P<scheme>[a-z][a-z0-9+.-]*://)(?P<user>[^:@/]*):(?P<password>[^@/]*)@", re.I)

UNNAMED_CONNECTION = "Unnamed Connection"


def new_connection_id() -> str:
    return uuid.uuid4().hex


def mask_url(url: str) -> str:
    """Hide the password part of a connection url."""
    return _CREDENTIALS_RE.sub(lambda m: f"{m.group('scheme')}{m.group('user')}:***@", url, count=1)


@dataclass
class Connection:
    """A saved (or ad-hoc) connection to a document database."""

    name: str
    url: str
    id: str = field(default_factory=new_connection_id)

    @property
    def display_url(self) -> str:
        return mask_url(self.url)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "url": self.url}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Connection:
        """Build a connection, ignoring unknown fields and defaulting missing ones."""
        raw_id = data.get("id")
        raw_url = data.get("url", data.get("connection_str", ""))
        return cls(
            name=str(data.get("name") or UNNAMED_CONNECTION),
            url=str(raw_url or ""),
            id=str(raw_id) if raw_id else new_connection_id(),
        )


def find_connection(connections: list[Connection], *, connection_id: str | None = None, name: str | None = None) -> Connection | None:
    """Look a connection up by id, then by case-insensitive name."""
    if connection_id:
        for conn in connections:
            if conn.id == connection_id:
                return conn
    if name:
        lowered = name.casefold()
        for conn in connections:
            if conn.name.casefold() == lowered:
                return conn
    return None
