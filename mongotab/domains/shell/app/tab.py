"""One independent browsing session."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace

from mongotab.core.component import Area, Component, Region
from mongotab.core.focus import FocusPath
from mongotab.core.queue import SignalQueue
from mongotab.core.signals import (
    Cancel,
    CollectionCreated,
    CollectionDropped,
    CollectionsLoaded,
    CollectionSelected,
    Command,
    ConfirmKind,
    ConfirmNo,
    ConfirmYes,
    ConnectionEditCanceled,
    ConnectionEdited,
    ConnectionEditRequested,
    ConnectionSelected,
    ConnectionSucceeded,
    CountLoaded,
    DatabaseDropped,
    DatabasesLoaded,
    DatabaseSelected,
    DocumentEdited,
    DocumentHighlighted,
    DocumentMutated,
    DocumentsLoaded,
    EditMode,
    ErrorOccurred,
    Event,
    FilterChanged,
    FocusChanged,
    FocusDown,
    FocusLeft,
    FocusRight,
    FocusUp,
    InputCanceled,
    InputConfirmed,
    InputKind,
    Message,
    Notified,
    PageChanged,
    Refresh,
    RequestConfirmation,
    RequestInput,
    Severity,
    TabEvent,
    TabFocus,
    Target,
)
from mongotab.domains.connections.domain.connection import Connection
from mongotab.domains.connections.ui.connection_editor import ConnectionEditor
from mongotab.domains.connections.ui.connection_list import ConnectionList
from mongotab.domains.documents.app.client import Client, Completion, OperationKind, QueryFingerprint
from mongotab.domains.documents.domain.search import Matcher
from mongotab.domains.documents.ui.document_view import DocumentView
from mongotab.domains.documents.ui.lists import CollectionList, DatabaseList
from mongotab.domains.documents.ui.query_input import QueryInput
from mongotab.domains.session.domain.snapshot import TabSnapshot
from mongotab.domains.shell.app.tab_state import TabState
from mongotab.domains.shell.ui.modals import ConfirmModal, InputModal
from mongotab.shared.core.errors import describe_error

logger = logging.getLogger(__name__)

CONNECTION_SCREEN = "connection_screen"
PRIMARY_SCREEN = "primary_screen"

# Pane moves on the primary screen: databases/collections on the left,
# query/documents on the right.
_FOCUS_MOVES: dict[type[Command], dict[TabFocus, TabFocus]] = {
    FocusRight: {TabFocus.DATABASES: TabFocus.DOCUMENTS, TabFocus.COLLECTIONS: TabFocus.DOCUMENTS},
    FocusLeft: {TabFocus.DOCUMENTS: TabFocus.COLLECTIONS, TabFocus.QUERY: TabFocus.COLLECTIONS},
    FocusUp: {TabFocus.COLLECTIONS: TabFocus.DATABASES, TabFocus.DOCUMENTS: TabFocus.QUERY},
    FocusDown: {TabFocus.DATABASES: TabFocus.COLLECTIONS, TabFocus.QUERY: TabFocus.DOCUMENTS},
}

_BACK: dict[TabFocus, TabFocus] = {
    TabFocus.DOCUMENTS: TabFocus.COLLECTIONS,
    TabFocus.QUERY: TabFocus.DOCUMENTS,
    TabFocus.COLLECTIONS: TabFocus.DATABASES,
    TabFocus.DATABASES: TabFocus.CONNECTIONS,
}


class Tab(Component):
    """A tab owns its state, its client and its child components.

    Scoped events are forwarded to the children only when they carry this
    tab's id. Query requests raised while handling a tick are coalesced and
    issued from ``flush`` against the final state of the tick.
    """

    name = "tab"

    def __init__(
        self,
        state: TabState,
        client: Client,
        connections: Callable[[], list[Connection]],
        matcher: Matcher | None = None,
    ) -> None:
        self.state = state
        self.client = client
        self.restore: TabSnapshot | None = None
        self._connections = connections
        self._wants_find = False
        self._wants_count = False
        accessor = self._get_state
        self.connection_list = ConnectionList(accessor, connections)
        self.connection_editor = ConnectionEditor(accessor)
        self.database_list = DatabaseList(accessor)
        self.collection_list = CollectionList(accessor)
        self.query_input = QueryInput(accessor)
        self.document_view = DocumentView(accessor, client.page_size, matcher)
        self.confirm_modal = ConfirmModal(accessor)
        self.input_modal = InputModal(accessor)
        self._by_focus: dict[TabFocus, Component] = {
            TabFocus.CONNECTIONS: self.connection_list,
            TabFocus.CONNECTION_EDITOR: self.connection_editor,
            TabFocus.DATABASES: self.database_list,
            TabFocus.COLLECTIONS: self.collection_list,
            TabFocus.QUERY: self.query_input,
            TabFocus.DOCUMENTS: self.document_view,
            TabFocus.CONFIRM: self.confirm_modal,
            TabFocus.INPUT: self.input_modal,
        }

    def _get_state(self) -> TabState:
        return self.state

    @property
    def id(self) -> str:
        return self.state.id

    @property
    def title(self) -> str:
        return self.state.title

    def children(self) -> list[Component]:
        return list(self._by_focus.values())

    def focused_child(self) -> Component:
        return self._by_focus[self.state.focus]

    @property
    def raw_mode(self) -> bool:
        return self.focused_child().raw_mode

    def screen(self) -> str:
        focus = self.state.background_focus if self.state.focus.is_modal else self.state.focus
        if focus in (TabFocus.CONNECTIONS, TabFocus.CONNECTION_EDITOR):
            return CONNECTION_SCREEN
        return PRIMARY_SCREEN

    def focus_path(self) -> FocusPath:
        return (self.screen(), self.state.focus.value)

    def set_focus(self, focus: TabFocus, queue: SignalQueue) -> bool:
        state = self.state
        if focus == state.focus:
            return False
        if focus.is_modal and not state.focus.is_modal:
            state.background_focus = state.focus
        state.focus = focus
        queue.push_event(FocusChanged(self.id, focus))
        return True

    # -- queries ----------------------------------------------------------

    def current_fingerprint(self) -> QueryFingerprint | None:
        state = self.state
        if state.database is None or state.collection is None:
            return None
        return QueryFingerprint.build(
            tab_id=self.id,
            connection_id=self.client.connection_id,
            database=state.database,
            collection=state.collection,
            filter=state.filter,
            sort=state.sort,
            page=state.page,
            page_size=self.client.page_size,
        )

    def request_documents(self, *, count: bool = True) -> None:
        self._wants_find = True
        self._wants_count = self._wants_count or count

    def flush(self) -> None:
        """Turn this tick's query wishes into client requests."""
        fingerprint = self.current_fingerprint()
        if fingerprint is not None:
            if self._wants_find:
                self.client.find(fingerprint, self.state.filter, self.state.sort)
                self.state.loading = True
            if self._wants_count:
                self.client.count(fingerprint, self.state.filter)
        self._wants_find = False
        self._wants_count = False

    def refresh(self) -> None:
        state = self.state
        if not state.connected:
            return
        self.client.list_databases()
        if state.database is not None:
            self.client.list_collections(state.database)
        if state.collection is not None:
            self.request_documents()

    # -- commands ---------------------------------------------------------

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if self.focused_child().handle_command(command, queue):
            return True
        state = self.state
        if isinstance(command, Refresh):
            self.refresh()
            return True
        moves = _FOCUS_MOVES.get(type(command))
        if moves is not None:
            target = moves.get(state.focus)
            if target is None:
                return False
            if target in (TabFocus.DOCUMENTS, TabFocus.QUERY) and state.collection is None:
                return True
            if target == TabFocus.COLLECTIONS and state.database is None:
                return True
            self.set_focus(target, queue)
            return True
        if isinstance(command, Cancel):
            target = _BACK.get(state.focus)
            if target is None:
                return False
            self.set_focus(target, queue)
            return True
        return False

    # -- messages ---------------------------------------------------------

    def handle_message(self, message: Message, queue: SignalQueue) -> bool:
        if message.target != Target.TAB or message.tab_id != self.id:
            return False
        action = message.action
        if isinstance(action, RequestConfirmation):
            self.confirm_modal.show(action.kind, action.prompt, action.subject)
            self.set_focus(TabFocus.CONFIRM, queue)
            return True
        if isinstance(action, RequestInput):
            self.input_modal.show(action.kind, action.prompt, action.initial)
            self.set_focus(TabFocus.INPUT, queue)
            return True
        return False

    # -- events -----------------------------------------------------------

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, TabEvent) and event.tab_id != self.id:
            return
        self._apply(event, queue)
        for child in self.children():
            child.handle_event(event, queue)

    def _apply(self, event: Event, queue: SignalQueue) -> None:
        state = self.state
        if isinstance(event, ConnectionSelected):
            if self.restore is not None and self.restore.connection_id != event.connection.id:
                self.restore = None
            state.select_connection(event.connection)
            self.client.connect(event.connection)
        elif isinstance(event, ConnectionSucceeded):
            state.connected = True
            self.client.list_databases()
            self.set_focus(TabFocus.DATABASES, queue)
            if state.connection is not None and self.restore is None:
                queue.push_event(Notified(f"Connected to {state.connection.name}", Severity.SUCCESS, self.id))
        elif isinstance(event, ConnectionEditRequested):
            self.set_focus(TabFocus.CONNECTION_EDITOR, queue)
        elif isinstance(event, (ConnectionEdited, ConnectionEditCanceled)):
            self.set_focus(TabFocus.CONNECTIONS, queue)
        elif isinstance(event, DatabasesLoaded):
            state.databases = list(event.names)
            if state.database is not None and state.database not in state.databases:
                state.select_database(None)
            self._continue_restore_databases(queue)
        elif isinstance(event, DatabaseSelected):
            state.select_database(event.name)
            self.client.list_collections(event.name)
            self.set_focus(TabFocus.COLLECTIONS, queue)
        elif isinstance(event, CollectionsLoaded):
            state.collections = list(event.names)
            if state.collection is not None and state.collection not in state.collections:
                state.select_collection(None)
            self._continue_restore_collections(queue)
        elif isinstance(event, CollectionSelected):
            if state.database is None:
                logger.debug("Tab %s: ignoring collection %s without a database", self.id, event.name)
                return
            state.select_collection(event.name)
            if self.restore is not None and self.restore.collection == event.name:
                state.page = self.restore.page
                state.selected_doc_id = self.restore.selected_doc_id
            self.request_documents()
            self.set_focus(TabFocus.DOCUMENTS, queue)
        elif isinstance(event, FilterChanged):
            state.filter = dict(event.filter)
            state.sort = dict(event.sort) if event.sort else None
            state.filter_text = event.filter_text
            state.sort_text = event.sort_text
            state.page = 0
            if state.collection is not None:
                self.request_documents()
        elif isinstance(event, PageChanged):
            state.page = event.page
            self.request_documents(count=False)
        elif isinstance(event, DocumentsLoaded):
            state.documents = list(event.documents)
            state.loading = False
            if self.restore is not None:
                self._finish_restore(queue)
        elif isinstance(event, CountLoaded):
            state.count = event.count
        elif isinstance(event, DocumentHighlighted):
            state.selected_doc_id = event.document_id
        elif isinstance(event, DocumentEdited):
            self._write_document(event)
        elif isinstance(event, DocumentMutated):
            self.request_documents()
            queue.push_event(Notified(f"Document {event.action} succeeded", Severity.SUCCESS, self.id))
        elif isinstance(event, (CollectionCreated, CollectionDropped)):
            if isinstance(event, CollectionDropped) and state.collection == event.name:
                state.select_collection(None)
                self.set_focus(TabFocus.COLLECTIONS, queue)
            if state.database is not None:
                self.client.list_collections(state.database)
        elif isinstance(event, DatabaseDropped):
            if state.database == event.name:
                state.select_database(None)
                self.set_focus(TabFocus.DATABASES, queue)
            self.client.list_databases()
        elif isinstance(event, ConfirmYes):
            self._close_modal(queue)
            self._confirmed(event)
        elif isinstance(event, (ConfirmNo, InputCanceled)):
            self._close_modal(queue)
        elif isinstance(event, InputConfirmed):
            self._close_modal(queue)
            if event.kind == InputKind.NEW_COLLECTION and state.database is not None:
                self.client.create_collection(state.database, event.value)

    def _close_modal(self, queue: SignalQueue) -> None:
        self.confirm_modal.hide()
        self.input_modal.hide()
        if self.state.focus.is_modal:
            self.set_focus(self.state.background_focus, queue)

    def _confirmed(self, event: ConfirmYes) -> None:
        state = self.state
        if event.kind == ConfirmKind.DROP_DATABASE:
            self.client.drop_database(event.subject)
        elif event.kind == ConfirmKind.DROP_COLLECTION and state.database is not None:
            self.client.drop_collection(state.database, event.subject)
        elif event.kind == ConfirmKind.DELETE_DOCUMENT and state.database and state.collection:
            self.client.delete(state.database, state.collection, event.subject)

    def _write_document(self, event: DocumentEdited) -> None:
        state = self.state
        if state.database is None or state.collection is None:
            return
        if event.mode == EditMode.EDIT:
            self.client.replace(state.database, state.collection, event.original_id, event.document)
        else:
            self.client.insert(state.database, state.collection, event.document)

    # -- restore ----------------------------------------------------------

    def _continue_restore_databases(self, queue: SignalQueue) -> None:
        restore = self.restore
        if restore is None or self.state.database is not None:
            return
        if restore.database is None:
            self._finish_restore(queue)
        elif restore.database in self.state.databases:
            queue.push_event(DatabaseSelected(self.id, restore.database))
        else:
            self.restore = None
            self.set_focus(TabFocus.DATABASES, queue)
            queue.push_event(Notified(f"Database '{restore.database}' no longer exists", Severity.INFO, self.id))

    def _continue_restore_collections(self, queue: SignalQueue) -> None:
        restore = self.restore
        state = self.state
        if restore is None or state.database != restore.database or state.collection is not None:
            return
        if restore.collection is None:
            self._finish_restore(queue)
        elif restore.collection in state.collections:
            queue.push_event(FilterChanged(self.id, restore.filter, restore.sort, restore.filter_text, restore.sort_text))
            queue.push_event(CollectionSelected(self.id, restore.collection))
        else:
            self.restore = None
            self.set_focus(TabFocus.COLLECTIONS, queue)
            message = f"Collection '{restore.collection}' no longer exists in '{restore.database}'"
            queue.push_event(Notified(message, Severity.INFO, self.id))

    def _finish_restore(self, queue: SignalQueue) -> None:
        restore = self.restore
        if restore is None:
            return
        self.restore = None
        focus = restore.focus
        if focus in (TabFocus.DOCUMENTS, TabFocus.QUERY) and self.state.collection is None:
            focus = TabFocus.COLLECTIONS
        if focus == TabFocus.COLLECTIONS and self.state.database is None:
            focus = TabFocus.DATABASES
        self.set_focus(focus, queue)

    def persisted(self) -> TabSnapshot:
        """Stable projection of this tab; a pending restore wins over partial state."""
        if self.restore is not None:
            return replace(self.restore, id=self.id)
        state = self.state
        connection = state.connection
        return TabSnapshot(
            id=state.id,
            connection_id=connection.id if connection else None,
            connection_name=connection.name if connection else None,
            connection_url=connection.url if connection and not self._is_saved(connection) else None,
            database=state.database,
            collection=state.collection,
            page=state.page,
            filter=dict(state.filter),
            filter_text=state.filter_text,
            sort=dict(state.sort) if state.sort else None,
            sort_text=state.sort_text,
            selected_doc_id=state.selected_doc_id,
            focus=state.stable_focus,
        )

    def _is_saved(self, connection: Connection) -> bool:
        return any(saved.id == connection.id for saved in self._connections())

    # -- completions ------------------------------------------------------

    def complete(self, completion: Completion, queue: SignalQueue) -> None:
        """Turn a finished operation into events, dropping stale results."""
        if not self.client.finish(completion):
            logger.debug("Tab %s: dropping result of replaced connection", self.id)
            return
        key = completion.key
        if self._is_stale(completion):
            logger.debug("Tab %s: discarding stale %s result", self.id, key.kind.value)
            return
        if completion.error is not None:
            queue.push_event(ErrorOccurred(describe_error(completion.error), self.id))
            if key.kind == OperationKind.CONNECT:
                self.restore = None
                self.state.connected = False
                self.set_focus(TabFocus.CONNECTIONS, queue)
            elif key.kind == OperationKind.FIND:
                self.state.loading = False
            return
        result = completion.result
        if key.kind == OperationKind.CONNECT:
            queue.push_event(ConnectionSucceeded(self.id, key.connection_id or ""))
        elif key.kind == OperationKind.LIST_DATABASES:
            queue.push_event(DatabasesLoaded(self.id, key, tuple(result)))
        elif key.kind == OperationKind.LIST_COLLECTIONS:
            queue.push_event(CollectionsLoaded(self.id, key, key.target, tuple(result)))
        elif key.kind == OperationKind.FIND:
            queue.push_event(DocumentsLoaded(self.id, key, tuple(result)))
        elif key.kind == OperationKind.COUNT:
            queue.push_event(CountLoaded(self.id, key, int(result)))
        elif key.kind in (OperationKind.INSERT, OperationKind.REPLACE, OperationKind.DELETE):
            ids = (result,) if key.kind == OperationKind.INSERT else ()
            queue.push_event(DocumentMutated(self.id, _MUTATION_LABELS[key.kind], ids))
        elif key.kind == OperationKind.CREATE_COLLECTION:
            queue.push_event(CollectionCreated(self.id, key.target.split(".", 1)[1]))
        elif key.kind == OperationKind.DROP_COLLECTION:
            queue.push_event(CollectionDropped(self.id, key.target.split(".", 1)[1]))
        elif key.kind == OperationKind.DROP_DATABASE:
            queue.push_event(DatabaseDropped(self.id, key.target))

    def _is_stale(self, completion: Completion) -> bool:
        key = completion.key
        if key.kind == OperationKind.FIND:
            return key.fingerprint != self.current_fingerprint()
        if key.kind == OperationKind.COUNT:
            current = self.current_fingerprint()
            return current is None or key.fingerprint != current.for_count()
        if key.kind == OperationKind.LIST_COLLECTIONS:
            return key.target != self.state.database
        return False

    # -- rendering --------------------------------------------------------

    def render(self, area: Area, *, app_focused: bool = True) -> Region:
        state = self.state
        focused = state.focus if app_focused else None

        def pane(component: Component, focus: TabFocus) -> Region:
            region = component.render(area)
            region.focused = focused == focus
            return region

        if self.screen() == CONNECTION_SCREEN:
            body = pane(self.connection_list, TabFocus.CONNECTIONS)
            if state.focus == TabFocus.CONNECTION_EDITOR or state.background_focus == TabFocus.CONNECTION_EDITOR:
                body = Region(
                    CONNECTION_SCREEN,
                    children=[body, pane(self.connection_editor, TabFocus.CONNECTION_EDITOR)],
                    border=False,
                )
            else:
                body = Region(CONNECTION_SCREEN, children=[body], border=False)
        else:
            left = Region(
                "sidebar",
                children=[pane(self.database_list, TabFocus.DATABASES), pane(self.collection_list, TabFocus.COLLECTIONS)],
                border=False,
            )
            right = Region(
                "main",
                children=[pane(self.query_input, TabFocus.QUERY), pane(self.document_view, TabFocus.DOCUMENTS)],
                border=False,
                weight=3,
            )
            body = Region(PRIMARY_SCREEN, children=[left, right], layout="columns", border=False)
        if self.confirm_modal.visible:
            return Region(self.name, children=[body, pane(self.confirm_modal, TabFocus.CONFIRM)], layout="overlay", border=False)
        if self.input_modal.visible:
            return Region(self.name, children=[body, pane(self.input_modal, TabFocus.INPUT)], layout="overlay", border=False)
        return Region(self.name, children=[body], border=False)

    def key_hints(self) -> list[tuple[type[Command], str]]:
        hints = list(self.focused_child().key_hints())
        if not self.state.focus.is_modal:
            hints.append((Refresh, "refresh"))
        return hints


_MUTATION_LABELS: dict[OperationKind, str] = {
    OperationKind.INSERT: "insert",
    OperationKind.REPLACE: "update",
    OperationKind.DELETE: "delete",
}
