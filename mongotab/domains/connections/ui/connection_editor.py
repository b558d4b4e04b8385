"""Two-field form for creating or editing a connection."""

from __future__ import annotations

from mongotab.core.component import Area, Component, Line, Region
from mongotab.core.queue import SignalQueue
from mongotab.core.signals import (
    Cancel,
    Command,
    Confirm,
    ConnectionEditCanceled,
    ConnectionEdited,
    ConnectionEditRequested,
    ErrorOccurred,
    Event,
    FocusChanged,
    NavDown,
    NavUp,
    RawKey,
    TabFocus,
)
from mongotab.domains.connections.domain.connection import UNNAMED_CONNECTION, Connection
from mongotab.shared.ui.protocols import StateAccessor
from mongotab.shared.ui.text_field import TextField

DEFAULT_URL = "mongodb://localhost:27017"


class ConnectionEditor(Component):
    name = TabFocus.CONNECTION_EDITOR.value

    def __init__(self, state: StateAccessor) -> None:
        self._state = state
        self.name_field = TextField()
        self.url_field = TextField()
        self.active = 0
        self.editing: Connection | None = None

    @property
    def fields(self) -> tuple[TextField, TextField]:
        return (self.name_field, self.url_field)

    @property
    def raw_mode(self) -> bool:
        return True

    def load(self, connection: Connection | None) -> None:
        self.editing = connection
        self.name_field.set(connection.name if connection else "")
        self.url_field.set(connection.url if connection else DEFAULT_URL)
        self.active = 0

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        tab_id = self._state().id
        if isinstance(command, RawKey):
            return self.fields[self.active].apply(command)
        if isinstance(command, (NavUp, NavDown)):
            self.active = 1 - self.active
            return True
        if isinstance(command, Cancel):
            queue.push_event(ConnectionEditCanceled(tab_id))
            return True
        if isinstance(command, Confirm):
            if self.active == 0:
                self.active = 1
                return True
            url = self.url_field.text.strip()
            if not url:
                queue.push_event(ErrorOccurred("Connection url cannot be empty", tab_id))
                return True
            name = self.name_field.text.strip() or UNNAMED_CONNECTION
            if self.editing is not None:
                connection = Connection(name=name, url=url, id=self.editing.id)
            else:
                connection = Connection(name=name, url=url)
            queue.push_event(ConnectionEdited(tab_id, connection))
            return True
        return False

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, ConnectionEditRequested):
            self.load(event.connection)
        elif isinstance(event, FocusChanged) and event.focus != TabFocus.CONNECTION_EDITOR:
            self.active = 0

    def render(self, area: Area) -> Region:
        title = "Edit connection" if self.editing else "New connection"
        lines = []
        for index, (label, text_field) in enumerate((("Name", self.name_field), ("Url", self.url_field))):
            shown = text_field.render_with_cursor() if index == self.active else text_field.display
            lines.append(Line(f"{label}: {shown}", "cursor" if index == self.active else ""))
        return Region(self.name, title=title, lines=lines)

    def key_hints(self) -> list[tuple[type[Command], str]]:
        return [(Confirm, "next/save"), (NavDown, "switch field"), (Cancel, "cancel")]
