"""Database and collection panes."""

from __future__ import annotations

from mongotab.core.queue import SignalQueue
from mongotab.core.signals import (
    CollectionHighlighted,
    CollectionsLoaded,
    CollectionSelected,
    Command,
    Confirm,
    ConfirmKind,
    CreateNew,
    DatabaseHighlighted,
    DatabasesLoaded,
    DatabaseSelected,
    Delete,
    Event,
    InputKind,
    Message,
    Notified,
    RequestConfirmation,
    RequestInput,
    TabFocus,
    Target,
)
from mongotab.shared.ui.list_view import ListComponent


class DatabaseList(ListComponent):
    focus = TabFocus.DATABASES
    title = "Databases"
    empty_text = "No databases"

    def items(self) -> list[str]:
        return self.state.databases

    def selected_name(self) -> str | None:
        return self.state.database

    def highlight_event(self, item: str) -> Event:
        return DatabaseHighlighted(self.state.id, item)

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if super().handle_command(command, queue):
            return True
        tab_id = self.state.id
        if isinstance(command, CreateNew):
            queue.push_event(Notified("Databases are created with their first collection", tab_id=tab_id))
            return True
        name = self.highlighted
        if name is None:
            return False
        if isinstance(command, Confirm):
            queue.push_event(DatabaseSelected(tab_id, name))
            return True
        if isinstance(command, Delete):
            request = RequestConfirmation(ConfirmKind.DROP_DATABASE, f"Drop database '{name}'?", subject=name)
            queue.push_message(Message(Target.TAB, request, tab_id))
            return True
        return False

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, DatabasesLoaded):
            self.items_changed(queue)
            return
        super().handle_event(event, queue)

    def key_hints(self) -> list[tuple[type[Command], str]]:
        return [(Confirm, "open"), (Delete, "drop")]


class CollectionList(ListComponent):
    focus = TabFocus.COLLECTIONS
    title = "Collections"
    empty_text = "No collections"

    def items(self) -> list[str]:
        return self.state.collections

    def selected_name(self) -> str | None:
        return self.state.collection

    def highlight_event(self, item: str) -> Event:
        return CollectionHighlighted(self.state.id, item)

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if super().handle_command(command, queue):
            return True
        tab_id = self.state.id
        if isinstance(command, CreateNew):
            request = RequestInput(InputKind.NEW_COLLECTION, "New collection name")
            queue.push_message(Message(Target.TAB, request, tab_id))
            return True
        name = self.highlighted
        if name is None:
            return False
        if isinstance(command, Confirm):
            queue.push_event(CollectionSelected(tab_id, name))
            return True
        if isinstance(command, Delete):
            request = RequestConfirmation(ConfirmKind.DROP_COLLECTION, f"Drop collection '{name}'?", subject=name)
            queue.push_message(Message(Target.TAB, request, tab_id))
            return True
        return False

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, DatabaseSelected):
            self.cursor = None
            return
        if isinstance(event, CollectionsLoaded):
            self.items_changed(queue)
            return
        super().handle_event(event, queue)

    def key_hints(self) -> list[tuple[type[Command], str]]:
        return [(Confirm, "open"), (CreateNew, "new"), (Delete, "drop")]
