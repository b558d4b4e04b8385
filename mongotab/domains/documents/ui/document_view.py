"""Paged document view."""

from __future__ import annotations

import json
from typing import Any

from mongotab.core.component import Area, Component, Line, Region
from mongotab.core.queue import SignalQueue
from mongotab.core.signals import (
    Cancel,
    Command,
    Confirm,
    ConfirmKind,
    CopyDocument,
    DeleteDoc,
    DocumentHighlighted,
    DocumentsLoaded,
    DuplicateDoc,
    EditDoc,
    EditMode,
    Event,
    ExpandCollapse,
    FirstPage,
    FocusChanged,
    InsertDoc,
    LastPage,
    Message,
    NavDown,
    NavLeft,
    NavRight,
    NavUp,
    NextPage,
    OpenEditor,
    PageChanged,
    PreviousPage,
    RawKey,
    RequestConfirmation,
    Search,
    TabFocus,
    Target,
    Yank,
)
from mongotab.domains.documents.domain.search import FuzzyMatcher, Matcher, SearchItem, search
from mongotab.shared.ui.protocols import StateAccessor
from mongotab.shared.ui.text_field import TextField


def _format_value(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


def summarize(document: dict[str, Any], width: int) -> str:
    """One-line preview of a document, cut to ``width`` characters."""
    parts = [f"{key}: {_format_value(value)}" for key, value in document.items()]
    text = "{ " + ", ".join(parts) + " }"
    if width > 3 and len(text) > width:
        text = text[: width - 1] + "…"
    return text


def expand(document: dict[str, Any]) -> list[str]:
    return json.dumps(document, indent=2, default=str, ensure_ascii=False).splitlines()


class DocumentView(Component):
    """The documents of the current page.

    ``Search`` opens an incremental search over the page: typed keys refine
    the pattern, up and down step through the matches, ``Confirm`` keeps the
    cursor where it landed and ``Cancel`` puts it back.
    """

    name = TabFocus.DOCUMENTS.value

    def __init__(self, state: StateAccessor, page_size: int, matcher: Matcher | None = None) -> None:
        self._state = state
        self.page_size = page_size
        self.matcher: Matcher = matcher or FuzzyMatcher()
        self.cursor: int | None = None
        self.expanded: set[str] = set()
        self.search_field = TextField()
        self.searching = False
        self.matches: list[SearchItem] = []
        self.match_index = 0
        self._cursor_before_search: int | None = None

    @property
    def raw_mode(self) -> bool:
        return self.searching

    @property
    def documents(self) -> list[dict[str, Any]]:
        return self._state().documents

    @property
    def current(self) -> dict[str, Any] | None:
        docs = self.documents
        if self.cursor is None or not docs:
            return None
        return docs[min(self.cursor, len(docs) - 1)]

    @property
    def current_match(self) -> SearchItem | None:
        if not self.matches:
            return None
        return self.matches[self.match_index]

    def _highlight(self, queue: SignalQueue) -> None:
        doc = self.current
        if doc is not None:
            queue.push_event(DocumentHighlighted(self._state().id, doc.get("_id")))

    def handle_command(self, command: Command, queue: SignalQueue) -> bool:
        if self.searching:
            return self._handle_search(command, queue)
        state = self._state()
        tab_id = state.id
        docs = self.documents
        if isinstance(command, (NavUp, NavDown)):
            if not docs:
                return True
            delta = -1 if isinstance(command, NavUp) else 1
            start = 0 if self.cursor is None else self.cursor
            self.cursor = max(0, min(len(docs) - 1, start + delta))
            self._highlight(queue)
            return True
        if isinstance(command, (ExpandCollapse, Confirm, NavLeft, NavRight)):
            doc = self.current
            if doc is not None:
                key = _format_value(doc.get("_id"))
                if isinstance(command, NavRight):
                    self.expanded.add(key)
                elif isinstance(command, NavLeft) or key in self.expanded:
                    self.expanded.discard(key)
                else:
                    self.expanded.add(key)
            return True
        if isinstance(command, NextPage):
            if state.count is not None and (state.page + 1) * self.page_size < state.count:
                queue.push_event(PageChanged(tab_id, state.page + 1))
            return True
        if isinstance(command, PreviousPage):
            if state.page > 0:
                queue.push_event(PageChanged(tab_id, state.page - 1))
            return True
        if isinstance(command, FirstPage):
            if state.page > 0:
                queue.push_event(PageChanged(tab_id, 0))
            return True
        if isinstance(command, LastPage):
            if state.count is not None:
                last = max(0, (state.count - 1) // self.page_size)
                if last != state.page:
                    queue.push_event(PageChanged(tab_id, last))
            return True
        if state.collection is None:
            return False
        if isinstance(command, Search):
            self._start_search()
            return True
        if isinstance(command, InsertDoc):
            queue.push_message(Message(Target.APP, OpenEditor(EditMode.INSERT, {}), tab_id))
            return True
        doc = self.current
        if doc is None:
            return isinstance(command, (EditDoc, DuplicateDoc, DeleteDoc, Yank))
        if isinstance(command, Yank):
            queue.push_message(Message(Target.APP, CopyDocument(doc), tab_id))
            return True
        if isinstance(command, EditDoc):
            queue.push_message(Message(Target.APP, OpenEditor(EditMode.EDIT, doc), tab_id))
            return True
        if isinstance(command, DuplicateDoc):
            copy = {key: value for key, value in doc.items() if key != "_id"}
            queue.push_message(Message(Target.APP, OpenEditor(EditMode.DUPLICATE, copy), tab_id))
            return True
        if isinstance(command, DeleteDoc):
            doc_id = doc.get("_id")
            prompt = f"Delete document {_format_value(doc_id)}?"
            request = RequestConfirmation(ConfirmKind.DELETE_DOCUMENT, prompt, subject=doc_id)
            queue.push_message(Message(Target.TAB, request, tab_id))
            return True
        return False

    # -- search -----------------------------------------------------------

    def _start_search(self) -> None:
        self.searching = True
        self.search_field.set("")
        self.matches = []
        self.match_index = 0
        self._cursor_before_search = self.cursor

    def _end_search(self) -> None:
        self.searching = False
        self.matches = []
        self.match_index = 0

    def _handle_search(self, command: Command, queue: SignalQueue) -> bool:
        if isinstance(command, RawKey):
            self.search_field.apply(command)
            self._run_search(queue)
            return True
        if isinstance(command, (NavUp, NavDown)):
            if self.matches:
                delta = -1 if isinstance(command, NavUp) else 1
                self.match_index = (self.match_index + delta) % len(self.matches)
                self._jump(queue)
            return True
        if isinstance(command, Confirm):
            self._end_search()
            return True
        if isinstance(command, Cancel):
            self._end_search()
            if self._cursor_before_search != self.cursor:
                self.cursor = self._cursor_before_search
                self._highlight(queue)
            return True
        return False

    def _run_search(self, queue: SignalQueue) -> None:
        self.matches = search(self.matcher, self.search_field.text, self.documents)
        self.match_index = 0
        self._jump(queue)

    def _jump(self, queue: SignalQueue) -> None:
        match = self.current_match
        if match is None or match.document == self.cursor:
            return
        self.cursor = match.document
        self._highlight(queue)

    # -- events -----------------------------------------------------------

    def handle_event(self, event: Event, queue: SignalQueue) -> None:
        if isinstance(event, DocumentsLoaded):
            self._reanchor(queue)
            if self.searching:
                self._run_search(queue)
        elif isinstance(event, FocusChanged):
            if event.focus != TabFocus.DOCUMENTS and self.searching:
                self._end_search()
            elif event.focus == TabFocus.DOCUMENTS and self.cursor is None and self.documents:
                self.cursor = 0
                self._highlight(queue)

    def _reanchor(self, queue: SignalQueue) -> None:
        docs = self.documents
        if not docs:
            self.cursor = None
            return
        wanted = self._state().selected_doc_id
        ids = [doc.get("_id") for doc in docs]
        if wanted is not None and wanted in ids:
            self.cursor = ids.index(wanted)
        else:
            self.cursor = 0
        self._highlight(queue)

    def title(self) -> str:
        state = self._state()
        if state.collection is None:
            return "Documents"
        title = f"Documents ({state.collection})"
        if state.count == 0:
            title += " 0 of 0"
        elif state.count is not None and state.documents:
            start = state.page * self.page_size + 1
            end = start + len(state.documents) - 1
            title += f" {start}-{end} of {state.count}"
        if state.loading:
            title += " loading…"
        return title

    def _search_line(self) -> Line:
        text = f"/{self.search_field.render_with_cursor()}"
        match = self.current_match
        if match is not None:
            text += f"  [{self.match_index + 1}/{len(self.matches)}] {match.path}"
        elif self.search_field.text:
            text += "  no matches"
        return Line(text, "editing")

    def render(self, area: Area) -> Region:
        lines: list[Line] = []
        if self.searching:
            lines.append(self._search_line())
        docs = self.documents
        if not docs:
            lines.append(Line("No documents", "muted"))
        hits = {match.document for match in self.matches}
        for index, doc in enumerate(docs):
            if index == self.cursor:
                style = "cursor"
            elif index in hits:
                style = "selected"
            else:
                style = ""
            if _format_value(doc.get("_id")) in self.expanded:
                lines.extend(Line(text, style) for text in expand(doc))
            else:
                lines.append(Line(summarize(doc, area.width - 4), style))
        return Region(self.name, title=self.title(), lines=lines, weight=3)

    def key_hints(self) -> list[tuple[type[Command], str]]:
        if self.searching:
            return [(NavDown, "next match"), (Confirm, "done"), (Cancel, "cancel")]
        return [
            (ExpandCollapse, "expand"),
            (NavRight, "open"),
            (NavLeft, "close"),
            (NextPage, "next page"),
            (PreviousPage, "prev page"),
            (FirstPage, "first page"),
            (LastPage, "last page"),
            (Search, "search"),
            (Yank, "copy"),
            (InsertDoc, "insert"),
            (EditDoc, "edit"),
            (DuplicateDoc, "duplicate"),
            (DeleteDoc, "delete"),
        ]
