"""Saved-connection list shown on a tab's connection screen."""

from __future__ import annotations

from collections.abc import Callable

from mongotab.core.queue import SignalQueue
from mongotab.core.signals import (
    Command,
    Confirm,
    ConfirmKind,
    ConnectionEditRequested,
    ConnectionSelected,
    ConnectionsChanged,
    CreateNew,
    Delete,
    Edit,
    Event,
    Message,
    RequestConfirmation,
    TabFocus,
    Target,
)
from mongotab.domains.connections.domain.connection import Connection
from mongotab.shared.ui.list_view import ListComponent
from mongotab.shared.ui.protocols import StateAccessor


class ConnectionList(ListComponent):
    focus = TabFocus.CONNECTIONS
    title = "Connections"
    empty_text = "No saved connections. Press 'a' to add one."

    def __init__(self, state: StateAccessor, connections: Callable[[], list[Connection]]) -> None:
        super().__init__(state)
        self._connections = connections

    def items(self) -> list[str]:
        return [f"{conn.name}  {conn.display_url}" for conn in self._connections()]

    def selected_name(self) -> str | None:
        current = self.state.connection
        if current is None:
            return None
        for conn in self._connections():
            if conn.id == current.id:
                return f"{conn.name}  {conn.display_url}"
        return None

    @property
    def highlighted_connection(self) -> Connection | None:
        connections = self._connections()
        if self.cursor is None or not connections:
            return None
        return connections[min(self.cursor, len(connections) - 1)]

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if super().handle_command(command, queue):
            return True
        tab_id = self.state.id
        if isinstance(command, CreateNew):
            queue.push_event(ConnectionEditRequested(tab_id, None))
            return True
        conn = self.highlighted_connection
        if conn is None:
            return False
        if isinstance(command, Confirm):
            queue.push_event(ConnectionSelected(tab_id, conn))
            return True
        if isinstance(command, Edit):
            queue.push_event(ConnectionEditRequested(tab_id, conn))
            return True
        if isinstance(command, Delete):
            prompt = f"Delete connection '{conn.name}'?"
            request = RequestConfirmation(ConfirmKind.DELETE_CONNECTION, prompt, subject=conn.id)
            queue.push_message(Message(Target.TAB, request, tab_id))
            return True
        return False

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, ConnectionsChanged):
            self.items_changed(queue)
            return
        super().handle_event(event, queue)

    def key_hints(self) -> list[tuple[type[Command], str]]:
        return [(Confirm, "connect"), (CreateNew, "new"), (Edit, "edit"), (Delete, "delete")]
