"""Tests for the document view: paging shortcuts, copying, search and expansion."""

from __future__ import annotations

import json

from mongotab.core.signals import (
    Cancel,
    Confirm,
    FirstPage,
    FocusUp,
    LastPage,
    NavDown,
    NavLeft,
    NavRight,
    NavUp,
    NextPage,
    PageChanged,
    Search,
    Severity,
    TabFocus,
    Yank,
)
from mongotab.domains.documents.domain.search import FuzzyMatcher, flatten_document, search
from mongotab.domains.shell.app.app import App
from mongotab.shared.app.clipboard import InMemoryClipboard
from mongotab.shared.core.utils import fuzzy_match, fuzzy_score
from tests.helpers import make_services, open_collection, press, settle, type_text


class LastHitMatcher:
    """Ranks plain substring hits last-first."""

    def __init__(self) -> None:
        self.patterns: list[str] = []

    def rank(self, pattern: str, items: list[str]) -> list[int]:
        self.patterns.append(pattern)
        return [index for index, item in reversed(list(enumerate(items))) if pattern in item]


class TestPagingShortcuts:
    def test_last_then_first_page(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, LastPage())
        settle(app)
        assert tab.state.page == 9
        assert [doc["_id"] for doc in tab.state.documents] == ["order-46", "order-47"]
        assert tab.document_view.title() == "Documents (orders) 46-47 of 47"

        press(app, NextPage())
        assert app.services.executor.pending == []

        press(app, FirstPage())
        settle(app)
        assert tab.state.page == 0
        assert tab.state.documents[0]["_id"] == "order-1"

    def test_first_page_on_first_page_is_ignored(self, app):
        open_collection(app)
        submitted = app.services.executor.submitted

        press(app, FirstPage())

        assert app.services.executor.submitted == submitted

    def test_last_page_of_exact_multiple(self, local_conn):
        dataset = {"db": {"items": [{"_id": n} for n in range(10)]}}
        app = App(make_services(connections=[local_conn], dataset=dataset))
        open_collection(app, "db", "items")

        press(app, LastPage())
        settle(app)

        assert app.active_tab.state.page == 1
        assert app.active_tab.document_view.title() == "Documents (items) 6-10 of 10"


class TestYank:
    def test_copies_selected_document(self, local_conn):
        clipboard = InMemoryClipboard()
        app = App(make_services(connections=[local_conn], clipboard=clipboard))
        open_collection(app)

        press(app, NavDown(), Yank())

        assert json.loads(clipboard.text) == app.active_tab.state.documents[1]
        assert app.status_bar.severity == Severity.SUCCESS
        assert "Copied document" in app.status_bar.text()

    def test_clipboard_failure_is_reported(self, local_conn):
        app = App(make_services(connections=[local_conn], clipboard=InMemoryClipboard(fail=True)))
        open_collection(app)

        press(app, Yank())

        assert app.status_bar.severity == Severity.ERROR
        assert "Could not copy document" in app.status_bar.text()

    def test_nothing_to_copy_without_documents(self, local_conn):
        clipboard = InMemoryClipboard()
        app = App(make_services(connections=[local_conn], clipboard=clipboard, dataset={"db": {"empty": []}}))
        open_collection(app, "db", "empty")

        press(app, Yank())

        assert clipboard.text is None
        assert app.status_bar.message is None


class TestSearch:
    def test_jumps_to_best_match(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, Search())
        assert app.raw_mode
        type_text(app, "pending")

        view = tab.document_view
        assert view.cursor == 2
        assert tab.state.selected_doc_id == "order-3"
        assert view.current_match.path == "status"
        assert "[1/1] status" in app.render().find("documents").text()

    def test_steps_through_matches_and_keeps_position(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, Search())
        type_text(app, "ship")
        assert tab.document_view.cursor == 0

        press(app, NavDown(), NavDown())
        assert tab.document_view.cursor == 3
        press(app, NavUp())
        assert tab.document_view.cursor == 1

        press(app, Confirm())
        assert not app.raw_mode
        assert tab.document_view.cursor == 1
        assert tab.state.selected_doc_id == "order-2"

    def test_cancel_restores_cursor(self, app):
        open_collection(app)
        tab = app.active_tab
        press(app, NavDown())

        press(app, Search())
        type_text(app, "pending")
        assert tab.document_view.cursor == 2

        press(app, Cancel())
        assert not tab.document_view.searching
        assert tab.document_view.cursor == 1
        assert tab.state.selected_doc_id == "order-2"

    def test_no_match_leaves_cursor(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, Search())
        type_text(app, "zzz")

        assert tab.document_view.matches == []
        assert tab.document_view.cursor == 0
        assert "no matches" in app.render().find("documents").text()

    def test_leaving_the_pane_ends_search(self, app):
        open_collection(app)
        press(app, Search())
        type_text(app, "ship")

        press(app, FocusUp())

        assert not app.active_tab.document_view.searching
        assert app.active_tab.state.focus == TabFocus.QUERY

    def test_uses_injected_matcher(self, local_conn):
        matcher = LastHitMatcher()
        app = App(make_services(connections=[local_conn], matcher=matcher))
        open_collection(app)

        press(app, Search())
        type_text(app, "ship")

        assert matcher.patterns[-1] == "ship"
        assert app.active_tab.document_view.cursor == 4

    def test_new_page_is_searched_again(self, app):
        open_collection(app)
        tab = app.active_tab
        press(app, Search())
        type_text(app, "order-7")
        assert tab.document_view.matches == []

        app.tick(events=[PageChanged(tab.id, 1)])
        settle(app)

        assert tab.document_view.searching
        assert tab.state.documents[tab.document_view.cursor]["_id"] == "order-7"


class TestExpand:
    def test_right_opens_and_left_closes(self, app):
        open_collection(app)
        view = app.active_tab.document_view

        press(app, NavRight())
        assert '"order-1"' in view.expanded
        assert len(app.render().find("documents").lines) > 5

        press(app, NavRight())
        assert '"order-1"' in view.expanded

        press(app, NavLeft())
        assert view.expanded == set()


class TestMatching:
    def test_fuzzy_match_is_smart_case(self):
        assert fuzzy_match("shp", "status:shipped") == (True, [0, 8, 10])
        assert fuzzy_match("Shp", "status:shipped")[0] is False
        assert fuzzy_match("", "anything") == (True, [])

    def test_word_starts_score_higher(self):
        assert fuzzy_score("st", "status") > fuzzy_score("st", "cost")
        assert fuzzy_score("xyz", "status") is None

    def test_flatten_walks_nested_values(self):
        items = flatten_document({"_id": 1, "address": {"city": "Utrecht"}, "tags": ["a"]})

        assert ("address.city", "Utrecht") in items
        assert ("address", "") in items
        assert ("tags.0", "a") in items
        assert ("_id", "1") in items

    def test_search_ranks_items_best_first(self):
        docs = [{"_id": "a", "note": "cost"}, {"_id": "b", "note": "status"}]

        hits = search(FuzzyMatcher(), "status", docs)

        assert hits[0].document == 1
        assert hits[0].path == "note"
