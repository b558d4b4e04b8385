"""Component capability set and the draw-region tree."""

from __future__ import annotations

from dataclasses import dataclass, field

from mongotab.core.queue import SignalQueue
from mongotab.core.signals import Command, Event, Message


@dataclass(frozen=True)
class Area:
    """Space offered to a component when rendering."""

    width: int = 80
    height: int = 24


@dataclass(frozen=True)
class Line:
    """One line of text with a semantic style name (resolved by the host)."""

    text: str
    style: str = ""


@dataclass
class Region:
    """A node of the draw tree emitted by ``Component.render``.

    ``layout`` tells the host how to arrange children: ``"rows"`` stacks them,
    ``"columns"`` puts them side by side and ``"overlay"`` draws the last
    child on top of the first.
    """

    name: str
    title: str = ""
    lines: list[Line] = field(default_factory=list)
    children: list[Region] = field(default_factory=list)
    layout: str = "rows"
    focused: bool = False
    weight: int = 1
    border: bool = True

    def find(self, name: str) -> Region | None:
        """Depth-first search for a region by name."""
        if self.name == name:
            return self
        for child in self.children:
            found = child.find(name)
            if found is not None:
                return found
        return None

    def text(self) -> str:
        """Plain text of this region and its children, for tests and logs."""
        parts = [self.title] if self.title else []
        parts.extend(line.text for line in self.lines)
        parts.extend(child.text() for child in self.children)
        return "\n".join(part for part in parts if part)


class Component:
    """Base class for every addressable UI unit.

    All four capabilities are no-ops by default. Side effects are expressed by
    pushing signals onto the queue; components never call their siblings.
    """

    name: str = "component"

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        """Handle a command offered along the focus chain. Return True to stop it."""
        return False

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        """React to a broadcast event."""
        return None

    def handle_message(self, message: Message, queue: SignalQueue) -> bool:
        """Claim a targeted message. Return True to stop delivery."""
        return False

    def render(self, area: Area) -> Region:
        return Region(self.name, border=False)

    def key_hints(self) -> list[tuple[type[Command], str]]:
        """(command, label) pairs shown in the status bar while focused."""
        return []

    @property
    def raw_mode(self) -> bool:
        """True while the component wants printable keys as ``RawKey``."""
        return False
