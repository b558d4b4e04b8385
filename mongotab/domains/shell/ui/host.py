"""Textual application hosting the mongotab core."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any, ClassVar

from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.events import AppBlur, AppFocus, Key, Resize
from textual.widgets import Static

from mongotab.core.component import Area
from mongotab.core.signals import (
    AppGainedFocus,
    AppLostFocus,
    Command,
    ErrorOccurred,
    Event,
    Resized,
    Tick,
)
from mongotab.domains.shell.app.app import App as CoreApp
from mongotab.domains.shell.app.app import PendingEdit
from mongotab.domains.shell.app.startup import StartupOptions, apply_startup
from mongotab.domains.shell.ui.render import render_region
from mongotab.shared.app import AppServices, RuntimeConfig, build_app_services

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"


def editor_command() -> list[str]:
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or DEFAULT_EDITOR
    return shlex.split(editor)


class MongotabApp(App):
    """Translates terminal input into core commands and draws the core's tree."""

    TITLE = "mongotab"
    CSS_PATH = "host.tcss"
    ENABLE_COMMAND_PALETTE = False

    # Textual binds these on the screen; route them to the core first.
    BINDINGS: ClassVar[list[Any]] = [
        Binding("tab", "forward_key('tab')", show=False, priority=True),
        Binding("shift+tab", "forward_key('shift+tab')", show=False, priority=True),
        Binding("ctrl+q", "forward_key('ctrl+q')", show=False, priority=True),
    ]

    def __init__(
        self,
        *,
        services: AppServices | None = None,
        runtime: RuntimeConfig | None = None,
        startup: StartupOptions | None = None,
    ) -> None:
        super().__init__()
        self.services = services or build_app_services(runtime or RuntimeConfig.from_env())
        self.core = CoreApp(self.services)
        self._startup = startup or StartupOptions()

    def compose(self) -> ComposeResult:
        yield Static(id="tab-bar")
        yield Static(id="body")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        self.core.inbox.wakeup = self._wake_from_worker
        apply_startup(self.core, self._startup)
        self.set_interval(self.services.runtime.poll_interval_s, self._on_poll)
        self._redraw()

    # -- input ------------------------------------------------------------

    def on_key(self, event: Key) -> None:
        commands = self.core.keymap.translate(event.key, event.character, raw_mode=self.core.raw_mode)
        if not commands:
            return
        event.prevent_default()
        event.stop()
        self.run_tick(commands=commands)

    def action_forward_key(self, key: str) -> None:
        commands = self.core.keymap.translate(key, None, raw_mode=self.core.raw_mode)
        self.run_tick(commands=commands)

    def on_app_blur(self, event: AppBlur) -> None:
        self.run_tick(events=[AppLostFocus()])

    def on_app_focus(self, event: AppFocus) -> None:
        self.run_tick(events=[AppGainedFocus()])

    def on_resize(self, event: Resize) -> None:
        self.run_tick(events=[Resized(event.size.width, event.size.height)])

    # -- loop -------------------------------------------------------------

    def _wake_from_worker(self) -> None:
        # Runs on an executor thread.
        self.call_from_thread(self._on_poll)

    def _on_poll(self) -> None:
        if self.core.should_quit:
            return
        self.run_tick(events=[Tick()])

    def run_tick(self, *, commands: Sequence[Command] = (), events: Sequence[Event] = ()) -> None:
        notable = self.core.tick(list(commands), list(events))
        if self.core.should_quit:
            self.exit()
            return
        if notable:
            self._redraw()
        pending = self.core.take_pending_edit()
        if pending is not None:
            self._edit_externally(pending)

    def _redraw(self) -> None:
        region = self.core.render(Area(self.size.width, self.size.height))
        tab_bar, body, status_bar = region.children
        self.query_one("#tab-bar", Static).update(render_region(tab_bar))
        self.query_one("#body", Static).update(render_region(body))
        self.query_one("#status-bar", Static).update(render_region(status_bar))

    # -- external editor --------------------------------------------------

    def _edit_externally(self, pending: PendingEdit) -> None:
        with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False, encoding="utf-8") as handle:
            handle.write(pending.text)
            path = Path(handle.name)
        result: Event | None
        try:
            with self.suspend():
                completed = subprocess.run([*editor_command(), str(path)], check=False)
            text = path.read_text(encoding="utf-8") if completed.returncode == 0 else None
            result = self.core.finish_edit(pending, text)
        except (OSError, SuspendNotSupported) as exc:
            logger.warning("External editor failed: %s", exc)
            result = ErrorOccurred(f"Could not run editor: {exc}", pending.tab_id)
        finally:
            path.unlink(missing_ok=True)
        self.refresh()
        if result is not None:
            self.run_tick(events=[result])
        else:
            self._redraw()
