"""The application root: tab set, signal loop and app-level handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from mongotab.core.component import Area, Component, Line, Region
from mongotab.core.focus import FocusManager, FocusPath
from mongotab.core.keymap import KeymapProvider, get_keymap
from mongotab.core.queue import SignalQueue
from mongotab.core.signals import (
    AppGainedFocus,
    AppLostFocus,
    CloseTab,
    Command,
    ConfirmKind,
    ConfirmYes,
    ConnectionEdited,
    ConnectionsChanged,
    CopyDocument,
    DocumentEdited,
    DuplicateTab,
    EditMode,
    ErrorOccurred,
    Event,
    FocusChanged,
    GotoTab,
    Message,
    NewTab,
    NextTab,
    Notified,
    OpenEditor,
    PreviousTab,
    Quit,
    Resized,
    SelectTab,
    Severity,
    ShowHelp,
    Significance,
    TabChanged,
    TabClosed,
    TabCreated,
    Target,
    classify,
)
from mongotab.domains.documents.app.client import Client, Inbox
from mongotab.domains.session.app.persistence import dehydrate, restore_tab, save_session_bounded
from mongotab.domains.shell.app.tab import Tab
from mongotab.domains.shell.app.tab_state import TabState, new_tab_id
from mongotab.domains.shell.ui.overlays import HelpOverlay, StatusBar, TabBar
from mongotab.shared.app.services import AppServices
from mongotab.shared.core.errors import ClipboardError, StorageError, describe_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingEdit:
    """A document waiting to be edited by the host's external editor."""

    tab_id: str
    mode: EditMode
    text: str
    original_id: Any = None


class App(Component):
    """Owns the tabs and runs the signal loop.

    One ``tick`` handles finished operations, then side-channel events, then
    user commands. Each of those is followed by draining the signal queue, so
    every cascade settles before the next input. Queued driver work is issued
    at the end of the tick.
    """

    name = "app"

    def __init__(self, services: AppServices, *, keymap: KeymapProvider | None = None) -> None:
        self.services = services
        self.keymap = keymap or get_keymap()
        self.queue = SignalQueue()
        self.inbox = Inbox()
        self.focus = FocusManager()
        self.tabs: dict[str, Tab] = {}
        self.tab_bar = TabBar(self._tab_titles, lambda: self.focus.active_index)
        self.status_bar = StatusBar(lambda: self.focus.active_tab_id, self.hints)
        self.help = HelpOverlay(self.hints)
        self.app_focused = True
        self.area = Area()
        self.should_quit = False
        self.pending_edit: PendingEdit | None = None
        self._quit_started = False

    # -- tree -------------------------------------------------------------

    @property
    def active_tab(self) -> Tab | None:
        tab_id = self.focus.active_tab_id
        return self.tabs.get(tab_id) if tab_id is not None else None

    def ordered_tabs(self) -> list[Tab]:
        return [self.tabs[tab_id] for tab_id in self.focus.tab_ids]

    def mounted(self) -> list[Component]:
        return [self, self.help, self.status_bar, self.tab_bar, *self.ordered_tabs()]

    def _tab_titles(self) -> list[str]:
        return [tab.title for tab in self.ordered_tabs()]

    def focus_path(self) -> FocusPath:
        tab = self.active_tab
        return self.focus.path(tab.focus_path() if tab is not None else ())

    @property
    def raw_mode(self) -> bool:
        if self.help.visible:
            return False
        tab = self.active_tab
        return tab.raw_mode if tab is not None else False

    # -- loop -------------------------------------------------------------

    def tick(self, commands: tuple[Command, ...] | list[Command] = (), events: tuple[Event, ...] | list[Event] = ()) -> bool:
        """Run one loop iteration. Returns True when a redraw is needed."""
        notable = False
        for completion in self.inbox.drain():
            tab = self.tabs.get(completion.tab_id)
            if tab is None:
                logger.debug("Dropping %s result for closed tab %s", completion.key.kind.value, completion.tab_id)
                continue
            tab.complete(completion, self.queue)
            notable = True
        notable = self._drain() or notable
        for event in events:
            self.queue.push_event(event)
            notable = self._drain() or notable
        for command in commands:
            if self.should_quit:
                break
            notable = self.dispatch(command) or notable
            notable = self._drain() or notable
        if not self.should_quit:
            self._issue()
        return notable

    def dispatch(self, command: Command) -> bool:
        """Offer a command along the focus chain. Returns True when it was handled."""
        if isinstance(command, Quit):
            self.quit()
            return True
        self.status_bar.clear()
        if self.help.handle_command(command, self.queue):
            return True
        tab = self.active_tab
        if tab is not None and tab.handle_command(command, self.queue):
            return True
        if self.handle_command(command, self.queue):
            return True
        logger.debug("Unhandled command %s at %s", type(command).__name__, "/".join(self.focus_path()))
        return False

    def _drain(self) -> bool:
        notable = False
        while True:
            signal = self.queue.pop()
            if signal is None:
                return notable
            if classify(signal) == Significance.NOTABLE:
                notable = True
            if signal.event is not None:
                for component in self.mounted():
                    component.handle_event(signal.event, self.queue)
            elif signal.message is not None:
                self._deliver(signal.message)

    def _deliver(self, message: Message) -> None:
        for component in self.mounted():
            if component.handle_message(message, self.queue):
                return
        logger.debug("Unclaimed message %s for %s", type(message.action).__name__, message.target.value)

    def _issue(self) -> None:
        for tab in self.ordered_tabs():
            tab.flush()
            tab.client.exec_queued_ops()

    # -- tabs -------------------------------------------------------------

    def open_tab(self, *, tab_id: str | None = None, activate: bool = True, after_active: bool = False) -> Tab:
        if tab_id is None or tab_id in self.tabs:
            tab_id = new_tab_id()
        runtime = self.services.runtime
        client = Client(
            tab_id,
            executor=self.services.executor,
            inbox=self.inbox,
            driver_factory=self.services.driver_factory,
            page_size=runtime.page_size,
        )
        tab = Tab(
            TabState(id=tab_id),
            client,
            lambda: self.services.connections.connections,
            self.services.matcher,
        )
        self.tabs[tab_id] = tab
        if after_active:
            self.focus.insert_after_active(tab_id)
        else:
            self.focus.append(tab_id, activate=activate)
        logger.debug("Opened tab %s", tab_id)
        self.queue.push_event(TabCreated(tab_id))
        self._announce_active()
        return tab

    def close_tab(self, tab_id: str) -> bool:
        tab = self.tabs.get(tab_id)
        if tab is None:
            return False
        tab.client.disconnect()
        self.focus.remove(tab_id)
        del self.tabs[tab_id]
        logger.debug("Closed tab %s", tab_id)
        self.queue.push_event(TabClosed(tab_id))
        self._announce_active()
        return True

    def duplicate_tab(self, tab: Tab) -> Tab:
        snapshot = tab.persisted()
        return restore_tab(self, snapshot, activate=True)

    def _announce_active(self) -> None:
        self.queue.push_event(TabChanged(self.focus.active_index))
        tab = self.active_tab
        if tab is not None:
            self.queue.push_event(FocusChanged(tab.id, tab.state.focus))

    def _select(self, index: int) -> bool:
        if not self.focus.goto(index):
            return False
        self._announce_active()
        return True

    # -- handlers ---------------------------------------------------------

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if isinstance(command, NewTab):
            self.open_tab(after_active=True)
            return True
        if isinstance(command, CloseTab):
            tab = self.active_tab
            if tab is not None:
                self.close_tab(tab.id)
            return True
        if isinstance(command, DuplicateTab):
            tab = self.active_tab
            if tab is not None:
                self.duplicate_tab(tab)
            return True
        if isinstance(command, NextTab):
            if self.focus.next():
                self._announce_active()
            return True
        if isinstance(command, PreviousTab):
            if self.focus.previous():
                self._announce_active()
            return True
        if isinstance(command, GotoTab):
            self._select(command.index)
            return True
        if isinstance(command, ShowHelp):
            queue.push_message(Message(Target.HELP, ShowHelp()))
            return True
        return False

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, ConnectionEdited):
            self._save_connection(event, queue)
        elif isinstance(event, ConfirmYes) and event.kind == ConfirmKind.DELETE_CONNECTION:
            self._delete_connection(event, queue)
        elif isinstance(event, AppLostFocus):
            self.app_focused = False
        elif isinstance(event, AppGainedFocus):
            self.app_focused = True
        elif isinstance(event, Resized):
            self.area = Area(event.width, event.height)

    def _save_connection(self, event: ConnectionEdited, queue: SignalQueue) -> None:
        connection = event.connection
        try:
            updated = self.services.connections.save(connection)
        except StorageError as exc:
            logger.warning("Could not save connection %s: %s", connection.name, exc)
            queue.push_event(ErrorOccurred(f"Could not save connections: {describe_error(exc)}", event.tab_id))
            queue.push_event(ConnectionsChanged())
            return
        queue.push_event(ConnectionsChanged())
        verb = "Updated" if updated else "Saved"
        queue.push_event(Notified(f"{verb} connection '{connection.name}'", Severity.SUCCESS, event.tab_id))

    def _delete_connection(self, event: ConfirmYes, queue: SignalQueue) -> None:
        try:
            removed = self.services.connections.delete(event.subject)
        except StorageError as exc:
            logger.warning("Could not delete connection %s: %s", event.subject, exc)
            queue.push_event(ErrorOccurred(f"Could not save connections: {describe_error(exc)}", event.tab_id))
            queue.push_event(ConnectionsChanged())
            return
        if removed is None:
            return
        queue.push_event(ConnectionsChanged())
        queue.push_event(Notified(f"Deleted connection '{removed.name}'", Severity.SUCCESS, event.tab_id))

    def handle_message(self, message: Message, queue: SignalQueue) -> bool:
        if message.target != Target.APP:
            return False
        action = message.action
        if isinstance(action, SelectTab):
            self._select(action.index)
            return True
        if isinstance(action, CopyDocument):
            tab = self.tabs.get(message.tab_id or "")
            if tab is not None:
                self._copy_document(tab, action.document, queue)
            return True
        if isinstance(action, OpenEditor):
            tab = self.tabs.get(message.tab_id or "")
            if tab is None:
                return True
            self.pending_edit = PendingEdit(
                tab_id=tab.id,
                mode=action.mode,
                text=tab.client.encode_document(action.document),
                original_id=action.document.get("_id") if action.mode == EditMode.EDIT else None,
            )
            return True
        return False

    def _copy_document(self, tab: Tab, document: dict[str, Any], queue: SignalQueue) -> None:
        text = tab.client.encode_document(document)
        try:
            self.services.clipboard.copy(text)
        except ClipboardError as exc:
            logger.warning("Could not copy document: %s", exc)
            queue.push_event(ErrorOccurred(f"Could not copy document: {describe_error(exc)}", tab.id))
            return
        queue.push_event(Notified("Copied document to clipboard", Severity.SUCCESS, tab.id))

    # -- external editor --------------------------------------------------

    def take_pending_edit(self) -> PendingEdit | None:
        pending, self.pending_edit = self.pending_edit, None
        return pending

    def finish_edit(self, pending: PendingEdit, text: str | None) -> Event | None:
        """Turn the editor's output into the event to feed back.

        None, blank text, or unchanged text outside duplication means the user
        abandoned the edit.
        """
        tab = self.tabs.get(pending.tab_id)
        if tab is None or text is None or not text.strip():
            return None
        if text == pending.text and pending.mode != EditMode.DUPLICATE:
            return None
        try:
            document = tab.client.decode_document(text)
        except Exception as exc:
            logger.debug("Editor output for tab %s did not parse", pending.tab_id, exc_info=True)
            return ErrorOccurred(f"Invalid document: {describe_error(exc)}", pending.tab_id)
        if not isinstance(document, dict):
            return ErrorOccurred("Invalid document: expected a JSON object", pending.tab_id)
        return DocumentEdited(pending.tab_id, pending.mode, document, pending.original_id)

    # -- shutdown ---------------------------------------------------------

    def quit(self) -> None:
        """Persist the session and stop. Runs once; later calls do nothing."""
        if self._quit_started:
            return
        self._quit_started = True
        self.should_quit = True
        dropped = self.queue.clear()
        if dropped:
            logger.debug("Dropped %d pending signals on quit", dropped)
        snapshot = dehydrate(self)
        runtime = self.services.runtime
        save_session_bounded(self.services.storage, snapshot, runtime.save_timeout_s)
        for tab in self.ordered_tabs():
            tab.client.disconnect()
        self.services.executor.shutdown(wait=False, cancel_futures=True)

    # -- rendering --------------------------------------------------------

    def hints(self) -> list[tuple[str, str]]:
        pairs: list[tuple[type[Command], str]] = []
        tab = self.active_tab
        if tab is not None:
            pairs.extend(tab.key_hints())
        if tab is None or not tab.state.focus.is_modal:
            pairs.extend([(NewTab, "new tab"), (CloseTab, "close tab"), (ShowHelp, "help"), (Quit, "quit")])
        hints: list[tuple[str, str]] = []
        for command, label in pairs:
            key = self.keymap.key_for(command)
            if key is not None:
                hints.append((key, label))
        return hints

    def render(self, area: Area | None = None) -> Region:
        area = area or self.area
        tab = self.active_tab
        if tab is not None:
            body = tab.render(area, app_focused=self.app_focused)
        else:
            body = Region("empty", lines=[Line("No tabs open. Press T for a new tab, q to quit.", "muted")], border=False)
        if self.help.visible:
            body = Region("body", children=[body, self.help.render(area)], layout="overlay", border=False)
        return Region(
            self.name,
            children=[self.tab_bar.render(area), body, self.status_bar.render(area)],
            border=False,
        )
