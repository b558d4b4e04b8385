"""Signal model: commands, events, messages and the signal wrapper.

Commands travel down one focus chain, events are broadcast to every mounted
component, and messages are delivered to the first component that claims
them. All three are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Command:
    """A user intention produced by input translation."""


@dataclass(frozen=True)
class NavUp(Command):
    pass


@dataclass(frozen=True)
class NavDown(Command):
    pass


@dataclass(frozen=True)
class NavLeft(Command):
    pass


@dataclass(frozen=True)
class NavRight(Command):
    pass


@dataclass(frozen=True)
class FocusUp(Command):
    pass


@dataclass(frozen=True)
class FocusDown(Command):
    pass


@dataclass(frozen=True)
class FocusLeft(Command):
    pass


@dataclass(frozen=True)
class FocusRight(Command):
    pass


@dataclass(frozen=True)
class Confirm(Command):
    pass


@dataclass(frozen=True)
class Cancel(Command):
    pass


@dataclass(frozen=True)
class Reset(Command):
    pass


@dataclass(frozen=True)
class Refresh(Command):
    pass


@dataclass(frozen=True)
class ExpandCollapse(Command):
    pass


@dataclass(frozen=True)
class NextPage(Command):
    pass


@dataclass(frozen=True)
class PreviousPage(Command):
    pass


@dataclass(frozen=True)
class FirstPage(Command):
    pass


@dataclass(frozen=True)
class LastPage(Command):
    pass


@dataclass(frozen=True)
class Search(Command):
    pass


@dataclass(frozen=True)
class Yank(Command):
    pass


@dataclass(frozen=True)
class CreateNew(Command):
    pass


@dataclass(frozen=True)
class Edit(Command):
    pass


@dataclass(frozen=True)
class Delete(Command):
    pass


@dataclass(frozen=True)
class StartEdit(Command):
    pass


@dataclass(frozen=True)
class InsertDoc(Command):
    pass


@dataclass(frozen=True)
class EditDoc(Command):
    pass


@dataclass(frozen=True)
class DuplicateDoc(Command):
    pass


@dataclass(frozen=True)
class DeleteDoc(Command):
    pass


@dataclass(frozen=True)
class Quit(Command):
    pass


@dataclass(frozen=True)
class NewTab(Command):
    pass


@dataclass(frozen=True)
class DuplicateTab(Command):
    pass


@dataclass(frozen=True)
class CloseTab(Command):
    pass


@dataclass(frozen=True)
class NextTab(Command):
    pass


@dataclass(frozen=True)
class PreviousTab(Command):
    pass


@dataclass(frozen=True)
class GotoTab(Command):
    """Focus the tab at a 0-based index."""

    index: int


@dataclass(frozen=True)
class ShowHelp(Command):
    pass


@dataclass(frozen=True)
class RawKey(Command):
    """A key delivered verbatim to a field that is being edited."""

    key: str
    character: str | None = None


# ---------------------------------------------------------------------------
# Shared enums
# ---------------------------------------------------------------------------


class TabFocus(str, Enum):
    """Which pane of a tab owns its focus."""

    CONNECTIONS = "connections"
    CONNECTION_EDITOR = "connection_editor"
    DATABASES = "databases"
    COLLECTIONS = "collections"
    QUERY = "query"
    DOCUMENTS = "documents"
    CONFIRM = "confirm"
    INPUT = "input"

    @property
    def is_modal(self) -> bool:
        return self in (TabFocus.CONFIRM, TabFocus.INPUT)


class ConfirmKind(str, Enum):
    DELETE_CONNECTION = "delete_connection"
    DELETE_DOCUMENT = "delete_document"
    DROP_COLLECTION = "drop_collection"
    DROP_DATABASE = "drop_database"


class InputKind(str, Enum):
    NEW_COLLECTION = "new_collection"


class EditMode(str, Enum):
    INSERT = "insert"
    EDIT = "edit"
    DUPLICATE = "duplicate"


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Event:
    """Something that happened; broadcast to every mounted component."""


@dataclass(frozen=True)
class TabEvent(Event):
    """An event scoped to a single tab."""

    tab_id: str


@dataclass(frozen=True)
class Tick(Event):
    """Periodic heartbeat from the host. Never forces a redraw."""


@dataclass(frozen=True)
class AppLostFocus(Event):
    pass


@dataclass(frozen=True)
class AppGainedFocus(Event):
    pass


@dataclass(frozen=True)
class Resized(Event):
    width: int
    height: int


@dataclass(frozen=True)
class TabCreated(TabEvent):
    pass


@dataclass(frozen=True)
class TabClosed(TabEvent):
    pass


@dataclass(frozen=True)
class TabChanged(Event):
    index: int | None


@dataclass(frozen=True)
class FocusChanged(TabEvent):
    focus: TabFocus


@dataclass(frozen=True)
class ConnectionsChanged(Event):
    """The shared list of saved connections was modified."""


@dataclass(frozen=True)
class ConnectionEditRequested(TabEvent):
    connection: Any = None


@dataclass(frozen=True)
class ConnectionEdited(TabEvent):
    connection: Any


@dataclass(frozen=True)
class ConnectionEditCanceled(TabEvent):
    pass


@dataclass(frozen=True)
class ConnectionSelected(TabEvent):
    connection: Any


@dataclass(frozen=True)
class ConnectionSucceeded(TabEvent):
    connection_id: str


@dataclass(frozen=True)
class DatabasesLoaded(TabEvent):
    key: Any
    names: tuple[str, ...]


@dataclass(frozen=True)
class DatabaseHighlighted(TabEvent):
    name: str


@dataclass(frozen=True)
class DatabaseSelected(TabEvent):
    name: str


@dataclass(frozen=True)
class DatabaseDropped(TabEvent):
    name: str


@dataclass(frozen=True)
class CollectionsLoaded(TabEvent):
    key: Any
    database: str
    names: tuple[str, ...]


@dataclass(frozen=True)
class CollectionHighlighted(TabEvent):
    name: str


@dataclass(frozen=True)
class CollectionSelected(TabEvent):
    name: str


@dataclass(frozen=True)
class CollectionCreated(TabEvent):
    name: str


@dataclass(frozen=True)
class CollectionDropped(TabEvent):
    name: str


@dataclass(frozen=True)
class FilterChanged(TabEvent):
    filter: dict[str, Any] = field(default_factory=dict)
    sort: dict[str, Any] | None = None
    filter_text: str = "{}"
    sort_text: str = ""


@dataclass(frozen=True)
class PageChanged(TabEvent):
    page: int


@dataclass(frozen=True)
class DocumentsLoaded(TabEvent):
    key: Any
    documents: tuple[dict[str, Any], ...]


@dataclass(frozen=True)
class CountLoaded(TabEvent):
    key: Any
    count: int


@dataclass(frozen=True)
class DocumentHighlighted(TabEvent):
    document_id: Any


@dataclass(frozen=True)
class DocumentEdited(TabEvent):
    """The external editor returned a document to write."""

    mode: EditMode
    document: dict[str, Any]
    original_id: Any = None


@dataclass(frozen=True)
class DocumentMutated(TabEvent):
    action: str
    ids: tuple[Any, ...] = ()


@dataclass(frozen=True)
class ConfirmYes(TabEvent):
    kind: ConfirmKind
    subject: Any = None


@dataclass(frozen=True)
class ConfirmNo(TabEvent):
    kind: ConfirmKind
    subject: Any = None


@dataclass(frozen=True)
class InputConfirmed(TabEvent):
    kind: InputKind
    value: str


@dataclass(frozen=True)
class InputCanceled(TabEvent):
    kind: InputKind


@dataclass(frozen=True)
class ErrorOccurred(Event):
    message: str
    tab_id: str | None = None


@dataclass(frozen=True)
class Notified(Event):
    message: str
    severity: Severity = Severity.INFO
    tab_id: str | None = None


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Target(str, Enum):
    """Named recipients for targeted messages."""

    APP = "app"
    TAB = "tab"
    HELP = "help"


@dataclass(frozen=True)
class RequestConfirmation:
    kind: ConfirmKind
    prompt: str
    subject: Any = None


@dataclass(frozen=True)
class RequestInput:
    kind: InputKind
    prompt: str
    initial: str = ""


@dataclass(frozen=True)
class OpenEditor:
    mode: EditMode
    document: dict[str, Any]


@dataclass(frozen=True)
class CopyDocument:
    document: dict[str, Any]


@dataclass(frozen=True)
class SelectTab:
    index: int


@dataclass(frozen=True)
class Message:
    """A targeted signal. Delivery stops at the first component that claims it."""

    target: Target
    action: Any
    tab_id: str | None = None


# ---------------------------------------------------------------------------
# Signal wrapper and classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Signal:
    """Unit stored in the signal queue: exactly one of event or message."""

    event: Event | None = None
    message: Message | None = None

    def __post_init__(self) -> None:
        if (self.event is None) == (self.message is None):
            raise ValueError("Signal wraps exactly one event or message")

    @property
    def payload(self) -> Event | Message:
        return self.event if self.event is not None else self.message  # type: ignore[return-value]


class Significance(str, Enum):
    TRIVIAL = "trivial"
    NOTABLE = "notable"


TRIVIAL_EVENTS: tuple[type[Event], ...] = (Tick,)


def classify(item: Signal | Event | Message | Command) -> Significance:
    """Decide whether processing an item can change what is on screen."""
    if isinstance(item, Signal):
        item = item.payload
    if isinstance(item, TRIVIAL_EVENTS):
        return Significance.TRIVIAL
    return Significance.NOTABLE
