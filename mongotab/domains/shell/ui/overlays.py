"""App-level overlays: tab bar, status bar and help."""

from __future__ import annotations

from collections.abc import Callable

from mongotab.core.component import Area, Component, Line, Region
from mongotab.core.queue import SignalQueue
from mongotab.core.signals import (
    Command,
    ErrorOccurred,
    Event,
    Message,
    Notified,
    Quit,
    Severity,
    Target,
)

Hint = tuple[str, str]

SEVERITY_MARKERS: dict[Severity, str] = {
    Severity.INFO: "ℹ",
    Severity.SUCCESS: "✔",
    Severity.ERROR: "Error:",
}


class TabBar(Component):
    name = "tab_bar"

    def __init__(self, titles: Callable[[], list[str]], active: Callable[[], int | None]) -> None:
        self._titles = titles
        self._active = active

    def render(self, area: Area) -> Region:
        titles = self._titles()
        if not titles:
            return Region(self.name, lines=[Line("No tabs. Press T to open one.", "muted")], border=False)
        active = self._active()
        lines = [
            Line(f" {index + 1} {title} ", "tab-active" if index == active else "tab")
            for index, title in enumerate(titles)
        ]
        return Region(self.name, lines=lines, layout="inline", border=False)


class StatusBar(Component):
    """Latest status message, or key hints for the focused chain.

    A message stays until the app clears it on the next user command.
    """

    name = "status_bar"

    def __init__(self, active_tab_id: Callable[[], str | None], hints: Callable[[], list[Hint]]) -> None:
        self._active_tab_id = active_tab_id
        self._hints = hints
        self.message: str | None = None
        self.severity = Severity.INFO

    def show(self, message: str, severity: Severity) -> None:
        self.message = message
        self.severity = severity

    def clear(self) -> None:
        self.message = None
        self.severity = Severity.INFO

    def _concerns_active_tab(self, tab_id: str | None) -> bool:
        return tab_id is None or tab_id == self._active_tab_id()

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, ErrorOccurred) and self._concerns_active_tab(event.tab_id):
            self.show(event.message, Severity.ERROR)
        elif isinstance(event, Notified) and self._concerns_active_tab(event.tab_id):
            self.show(event.message, event.severity)

    def text(self) -> str:
        if self.message is not None:
            return f"{SEVERITY_MARKERS[self.severity]} {self.message}"
        return "  ".join(f"{key} {label}" for key, label in self._hints())

    def render(self, area: Area) -> Region:
        style = self.severity.value if self.message is not None else "muted"
        return Region(self.name, lines=[Line(self.text(), style)], border=False)


class HelpOverlay(Component):
    """Lists the key hints of the focused chain; any command closes it."""

    name = "help"

    def __init__(self, hints: Callable[[], list[Hint]]) -> None:
        self._hints = hints
        self.visible = False

    def handle_message(self, message: Message, queue: SignalQueue) -> bool:
        if message.target != Target.HELP:
            return False
        self.visible = not self.visible
        return True

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if not self.visible or isinstance(command, Quit):
            return False
        self.visible = False
        return True

    def render(self, area: Area) -> Region:
        width = max((len(key) for key, _ in self._hints()), default=0)
        lines = [Line(f"{key.rjust(width)}  {label}") for key, label in self._hints()]
        lines.append(Line(""))
        lines.append(Line("Press any key to close", "muted"))
        return Region(self.name, title="Help", lines=lines)
