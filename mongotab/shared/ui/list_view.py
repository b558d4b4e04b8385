"""Cursor-driven list component shared by the connection, database and collection panes."""

from __future__ import annotations

from mongotab.core.component import Area, Component, Line, Region
from mongotab.core.queue import SignalQueue
from mongotab.core.signals import Command, Event, FocusChanged, NavDown, NavUp, TabFocus
from mongotab.shared.ui.protocols import StateAccessor, TabStateProtocol


class ListComponent(Component):
    """A wrap-around list.

    Subclasses supply ``items`` and ``highlight_event``. Highlighting the first
    item happens when the list gains focus or receives new items while nothing
    is highlighted.
    """

    focus: TabFocus = TabFocus.CONNECTIONS
    title: str = ""
    empty_text: str = "Nothing here"

    def __init__(self, state: StateAccessor) -> None:
        self._state = state
        self.cursor: int | None = None

    @property
    def state(self) -> TabStateProtocol:
        return self._state()

    def items(self) -> list[str]:
        raise NotImplementedError

    def highlight_event(self, item: str) -> Event | None:
        return None

    def selected_name(self) -> str | None:
        """Name the cursor should land on when items reload."""
        return None

    @property
    def highlighted(self) -> str | None:
        items = self.items()
        if self.cursor is None or not items:
            return None
        return items[min(self.cursor, len(items) - 1)]

    def move(self, delta: int, queue: SignalQueue) -> None:
        items = self.items()
        if not items:
            return
        if self.cursor is None:
            self.cursor = 0
        else:
            self.cursor = (self.cursor + delta) % len(items)
        self._emit_highlight(queue)

    def _emit_highlight(self, queue: SignalQueue) -> None:
        item = self.highlighted
        if item is None:
            return
        event = self.highlight_event(item)
        if event is not None:
            queue.push_event(event)

    def items_changed(self, queue: SignalQueue) -> None:
        """Re-anchor the cursor after the items were replaced."""
        items = self.items()
        if not items:
            self.cursor = None
            return
        selected = self.selected_name()
        if selected in items:
            self.cursor = items.index(selected)
        elif self.cursor is None or self.cursor >= len(items):
            self.cursor = 0
        self._emit_highlight(queue)

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if isinstance(command, NavUp):
            self.move(-1, queue)
            return True
        if isinstance(command, NavDown):
            self.move(1, queue)
            return True
        return False

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, FocusChanged) and event.focus == self.focus and self.cursor is None:
            if self.items():
                self.cursor = 0
                self._emit_highlight(queue)

    def format_item(self, item: str) -> str:
        return item

    def render(self, area: Area) -> Region:
        items = self.items()
        lines: list[Line] = []
        if not items:
            lines.append(Line(self.empty_text, "muted"))
        selected = self.selected_name()
        for index, item in enumerate(items):
            style = "cursor" if index == self.cursor else ""
            if item == selected and style == "":
                style = "selected"
            lines.append(Line(self.format_item(item), style))
        return Region(self.focus.value, title=self.title, lines=lines)
