"""Filter and sort input above the document view.

Viewing and editing are two modes of a private state machine: ``Confirm``
enters editing, ``Confirm`` again applies, ``Cancel`` restores the text that
was applied last.
"""

from __future__ import annotations

from mongotab.core.component import Area, Component, Line, Region
from mongotab.core.queue import SignalQueue
from mongotab.core.signals import (
    Cancel,
    Command,
    Confirm,
    ErrorOccurred,
    Event,
    ExpandCollapse,
    FilterChanged,
    FocusChanged,
    NavDown,
    NavUp,
    RawKey,
    Reset,
    StartEdit,
    TabFocus,
)
from mongotab.domains.documents.domain.filters import EMPTY_FILTER_TEXT, FilterSyntaxError, parse_filter, parse_sort
from mongotab.shared.ui.protocols import StateAccessor
from mongotab.shared.ui.text_field import TextField


class QueryInput(Component):
    name = TabFocus.QUERY.value

    def __init__(self, state: StateAccessor) -> None:
        self._state = state
        self.filter_field = TextField(EMPTY_FILTER_TEXT, len(EMPTY_FILTER_TEXT))
        self.sort_field = TextField()
        self.editing = False
        self.expanded = False
        self.active = 0

    @property
    def raw_mode(self) -> bool:
        return self.editing

    def _sync_from_state(self) -> None:
        state = self._state()
        self.filter_field.set(state.filter_text)
        self.sort_field.set(state.sort_text)

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if self.editing:
            return self._handle_editing(command, queue)
        if isinstance(command, (Confirm, StartEdit)):
            self.editing = True
            self.active = 0
            return True
        if isinstance(command, ExpandCollapse):
            self.expanded = not self.expanded
            return True
        if isinstance(command, Reset):
            self.filter_field.set(EMPTY_FILTER_TEXT)
            self.sort_field.set("")
            queue.push_event(FilterChanged(self._state().id, {}, None, EMPTY_FILTER_TEXT, ""))
            return True
        return False

    def _handle_editing(self, command: Command, queue: SignalQueue) -> bool:
        fields = (self.filter_field, self.sort_field) if self.expanded else (self.filter_field,)
        if isinstance(command, RawKey):
            fields[self.active].apply(command)
            return True
        if isinstance(command, (NavUp, NavDown)):
            if len(fields) > 1:
                self.active = 1 - self.active
            return True
        if isinstance(command, Cancel):
            self.editing = False
            self._sync_from_state()
            return True
        if isinstance(command, Confirm):
            self._apply(queue)
            return True
        return False

    def _apply(self, queue: SignalQueue) -> None:
        tab_id = self._state().id
        try:
            filter = parse_filter(self.filter_field.text)
            sort = parse_sort(self.sort_field.text)
        except FilterSyntaxError as exc:
            queue.push_event(ErrorOccurred(str(exc), tab_id))
            return
        self.editing = False
        filter_text = self.filter_field.text.strip() or EMPTY_FILTER_TEXT
        queue.push_event(FilterChanged(tab_id, filter, sort, filter_text, self.sort_field.text.strip()))

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, FilterChanged):
            self.filter_field.set(event.filter_text)
            self.sort_field.set(event.sort_text)
            if event.sort_text:
                self.expanded = True
        elif isinstance(event, FocusChanged) and event.focus != TabFocus.QUERY and self.editing:
            self.editing = False
            self._sync_from_state()

    def render(self, area: Area) -> Region:
        def field_line(label: str, text_field: TextField, index: int) -> Line:
            if self.editing and index == self.active:
                return Line(f"{label}: {text_field.render_with_cursor()}", "editing")
            return Line(f"{label}: {text_field.text}")

        lines = [field_line("Filter", self.filter_field, 0)]
        if self.expanded:
            lines.append(field_line("Sort", self.sort_field, 1))
        return Region(self.name, title="Query", lines=lines)

    def key_hints(self) -> list[tuple[type[Command], str]]:
        if self.editing:
            return [(Confirm, "apply"), (Cancel, "cancel")]
        return [(Confirm, "edit"), (ExpandCollapse, "sort"), (Reset, "reset")]
