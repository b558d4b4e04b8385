"""Per-tab confirmation and text-input modals."""

from __future__ import annotations

from typing import Any

from mongotab.core.component import Area, Component, Line, Region
from mongotab.core.queue import SignalQueue
from mongotab.core.signals import (
    Cancel,
    Command,
    Confirm,
    ConfirmKind,
    ConfirmNo,
    ConfirmYes,
    InputCanceled,
    InputConfirmed,
    InputKind,
    RawKey,
    TabFocus,
)
from mongotab.shared.ui.protocols import StateAccessor
from mongotab.shared.ui.text_field import TextField


class ConfirmModal(Component):
    name = TabFocus.CONFIRM.value

    def __init__(self, state: StateAccessor) -> None:
        self._state = state
        self.kind: ConfirmKind | None = None
        self.prompt = ""
        self.subject: Any = None

    def show(self, kind: ConfirmKind, prompt: str, subject: Any = None) -> None:
        self.kind = kind
        self.prompt = prompt
        self.subject = subject

    def hide(self) -> None:
        self.kind = None
        self.prompt = ""
        self.subject = None

    @property
    def visible(self) -> bool:
        return self.kind is not None

    @property
    def raw_mode(self) -> bool:
        return self.visible

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if self.kind is None:
            return False
        tab_id = self._state().id
        if isinstance(command, Confirm) or (isinstance(command, RawKey) and command.character in ("y", "Y")):
            queue.push_event(ConfirmYes(tab_id, self.kind, self.subject))
        elif isinstance(command, Cancel) or (isinstance(command, RawKey) and command.character in ("n", "N")):
            queue.push_event(ConfirmNo(tab_id, self.kind, self.subject))
        # A modal swallows everything else.
        return True

    def render(self, area: Area) -> Region:
        return Region(
            self.name,
            title="Confirm",
            lines=[Line(self.prompt), Line(""), Line("[enter/y] yes   [esc/n] no", "muted")],
        )

    def key_hints(self) -> list[tuple[type[Command], str]]:
        return [(Confirm, "yes"), (Cancel, "no")]


class InputModal(Component):
    name = TabFocus.INPUT.value

    def __init__(self, state: StateAccessor) -> None:
        self._state = state
        self.kind: InputKind | None = None
        self.prompt = ""
        self.field = TextField()

    def show(self, kind: InputKind, prompt: str, initial: str = "") -> None:
        self.kind = kind
        self.prompt = prompt
        self.field.set(initial)

    def hide(self) -> None:
        self.kind = None
        self.prompt = ""
        self.field.set("")

    @property
    def visible(self) -> bool:
        return self.kind is not None

    @property
    def raw_mode(self) -> bool:
        return self.visible

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if self.kind is None:
            return False
        tab_id = self._state().id
        if isinstance(command, RawKey):
            self.field.apply(command)
        elif isinstance(command, Confirm):
            value = self.field.text.strip()
            if value:
                queue.push_event(InputConfirmed(tab_id, self.kind, value))
        elif isinstance(command, Cancel):
            queue.push_event(InputCanceled(tab_id, self.kind))
        return True

    def render(self, area: Area) -> Region:
        return Region(
            self.name,
            title=self.prompt or "Input",
            lines=[Line(self.field.render_with_cursor(), "editing")],
        )

    def key_hints(self) -> list[tuple[type[Command], str]]:
        return [(Confirm, "ok"), (Cancel, "cancel")]
