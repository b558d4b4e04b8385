"""Tests for session snapshots, hydration and the bounded save."""

from __future__ import annotations

import json
import time

import pytest

from mongotab.core.signals import (
    Confirm,
    Delete,
    DuplicateTab,
    FocusDown,
    FocusLeft,
    FocusUp,
    GotoTab,
    NavDown,
    NewTab,
    NextPage,
    Severity,
    TabFocus,
)
from mongotab.domains.session.app.persistence import (
    dehydrate,
    hydrate,
    load_snapshot,
    save_session_bounded,
    save_snapshot,
)
from mongotab.domains.session.domain.snapshot import SessionSnapshot, TabSnapshot
from mongotab.domains.shell.app.app import App
from mongotab.domains.shell.app.startup import StartupOptions, apply_startup
from mongotab.shared.core.errors import SnapshotError
from mongotab.shared.core.store import SESSION_KEY, InMemoryStorage
from tests.helpers import clear_field, make_services, open_collection, press, settle, type_text


def _browse_pending_orders(app: App) -> None:
    open_collection(app)
    press(app, FocusUp(), Confirm())
    clear_field(app)
    type_text(app, '{"status": "pending"}')
    press(app, Confirm())
    settle(app)
    press(app, FocusDown(), NextPage())
    settle(app)


def _fresh_app(local_conn, storage: InMemoryStorage | None = None) -> App:
    return App(make_services(connections=[local_conn], storage=storage))


class TestTabSnapshot:
    def test_missing_fields_take_defaults(self):
        snapshot = TabSnapshot.from_dict({"id": "t1"})

        assert snapshot.database is None
        assert snapshot.page == 0
        assert snapshot.filter == {}
        assert snapshot.filter_text == "{}"
        assert snapshot.focus == TabFocus.CONNECTIONS

    def test_unknown_fields_are_ignored(self):
        snapshot = TabSnapshot.from_dict({"id": "t1", "database": "shop", "colour": "blue"})

        assert snapshot.database == "shop"

    def test_missing_id_is_rejected(self):
        with pytest.raises(SnapshotError):
            TabSnapshot.from_dict({"database": "shop"})

    def test_collection_without_database_is_dropped(self):
        snapshot = TabSnapshot.from_dict({"id": "t1", "collection": "orders", "page": 3})

        assert snapshot.collection is None
        assert snapshot.page == 0

    def test_modal_focus_is_not_restored(self):
        snapshot = TabSnapshot.from_dict({"id": "t1", "focus": "confirm"})

        assert snapshot.focus == TabFocus.CONNECTIONS

    def test_bad_page_falls_back_to_first(self):
        snapshot = TabSnapshot.from_dict({"id": "t1", "database": "shop", "collection": "orders", "page": -2})

        assert snapshot.page == 0


class TestSessionSnapshot:
    def test_active_tab_out_of_range_points_at_first(self):
        snapshot = SessionSnapshot.from_dict({"tabs": [{"id": "a"}, {"id": "b"}], "active_tab": 9})

        assert snapshot.active_tab == 0

    def test_non_object_is_rejected(self):
        with pytest.raises(SnapshotError):
            SessionSnapshot.from_dict(["not", "a", "snapshot"])

    def test_corrupt_file_loads_as_none(self):
        storage = InMemoryStorage({SESSION_KEY: b"{not json"})

        assert load_snapshot(storage) is None

    def test_unusable_file_loads_as_none(self):
        storage = InMemoryStorage({SESSION_KEY: json.dumps({"tabs": "nope"}).encode()})

        assert load_snapshot(storage) is None

    def test_save_then_load(self):
        storage = InMemoryStorage()
        snapshot = SessionSnapshot(tabs=(TabSnapshot(id="t1", database="shop"),), active_tab=0)

        save_snapshot(storage, snapshot)

        assert load_snapshot(storage) == snapshot


class TestDehydrate:
    def test_captures_navigation(self, app):
        _browse_pending_orders(app)

        snapshot = dehydrate(app)

        assert snapshot.active_tab == 0
        (tab,) = snapshot.tabs
        assert tab.connection_id == "conn-local"
        assert tab.connection_name == "local"
        assert tab.connection_url is None
        assert (tab.database, tab.collection, tab.page) == ("shop", "orders", 1)
        assert tab.filter == {"status": "pending"}
        assert tab.filter_text == '{"status": "pending"}'
        assert tab.selected_doc_id == app.active_tab.state.documents[0]["_id"]
        assert tab.focus == TabFocus.DOCUMENTS

    def test_query_focus_persists_as_documents(self, app):
        open_collection(app)
        press(app, FocusUp())

        assert dehydrate(app).tabs[0].focus == TabFocus.DOCUMENTS

    def test_modal_focus_persists_as_background(self, app):
        open_collection(app)
        press(app, FocusLeft(), NavDown(), Delete())
        assert app.active_tab.state.focus == TabFocus.CONFIRM

        assert dehydrate(app).tabs[0].focus == TabFocus.COLLECTIONS


class TestHydrate:
    def test_round_trip_restores_the_view(self, app, local_conn):
        _browse_pending_orders(app)
        first = dehydrate(app)

        restored = _fresh_app(local_conn)
        hydrate(restored, first)
        restored.tick()
        # Before any listing arrives the pending restore is what persists.
        assert dehydrate(restored) == first

        settle(restored)
        tab = restored.active_tab
        assert tab.state.page == 1
        assert tab.state.count == 15
        assert tab.state.focus == TabFocus.DOCUMENTS
        assert tab.restore is None
        assert dehydrate(restored) == first

    def test_active_tab_is_restored(self, app, local_conn):
        app.open_tab()
        app.tick()
        press(app, NewTab(), NewTab(), NewTab(), GotoTab(2))
        snapshot = dehydrate(app)

        restored = _fresh_app(local_conn)
        hydrate(restored, snapshot)
        restored.tick()

        assert len(restored.tabs) == 4
        assert restored.focus.active_index == 2

    def test_missing_database_stops_at_database_list(self, local_conn):
        restored = _fresh_app(local_conn)
        snapshot = SessionSnapshot(
            tabs=(
                TabSnapshot(
                    id="t1",
                    connection_id="conn-local",
                    connection_name="local",
                    database="gone",
                    collection="orders",
                    focus=TabFocus.DOCUMENTS,
                ),
            ),
            active_tab=0,
        )

        hydrate(restored, snapshot)
        restored.tick()
        settle(restored)

        tab = restored.active_tab
        assert tab.state.connection.id == "conn-local"
        assert tab.state.focus == TabFocus.DATABASES
        assert tab.state.database is None
        assert restored.status_bar.severity == Severity.INFO
        assert "no longer exists" in restored.status_bar.text()

    def test_missing_collection_stops_at_collection_list(self, local_conn):
        restored = _fresh_app(local_conn)
        snapshot = SessionSnapshot(
            tabs=(TabSnapshot(id="t1", connection_id="conn-local", database="shop", collection="gone"),),
            active_tab=0,
        )

        hydrate(restored, snapshot)
        restored.tick()
        settle(restored)

        tab = restored.active_tab
        assert tab.state.database == "shop"
        assert tab.state.collection is None
        assert tab.state.focus == TabFocus.COLLECTIONS
        assert "Collection 'gone' no longer exists" in restored.status_bar.text()

    def test_missing_connection_stays_on_connection_list(self, local_conn):
        restored = _fresh_app(local_conn)
        snapshot = SessionSnapshot(
            tabs=(TabSnapshot(id="t1", connection_id="conn-gone", connection_name="gone", database="shop"),),
            active_tab=0,
        )

        hydrate(restored, snapshot)
        restored.tick()

        tab = restored.active_tab
        assert tab.state.focus == TabFocus.CONNECTIONS
        assert tab.state.connection is None
        assert restored.services.executor.submitted == 0
        assert "Connection 'gone' no longer exists" in restored.status_bar.text()

    def test_connection_found_by_name_after_id_change(self, local_conn):
        restored = _fresh_app(local_conn)
        snapshot = SessionSnapshot(
            tabs=(TabSnapshot(id="t1", connection_id="old-id", connection_name="local", focus=TabFocus.DATABASES),),
            active_tab=0,
        )

        hydrate(restored, snapshot)
        restored.tick()
        settle(restored)

        assert restored.active_tab.state.connection.id == "conn-local"
        assert restored.active_tab.state.focus == TabFocus.DATABASES

    def test_ad_hoc_connection_round_trips(self, local_conn):
        app = _fresh_app(local_conn)
        apply_startup(app, StartupOptions(url="mongodb://adhoc:27017", database="shop", collection="orders"))
        settle(app)
        first = dehydrate(app)
        (tab,) = first.tabs
        assert tab.connection_url == "mongodb://adhoc:27017"
        assert (tab.database, tab.collection, tab.focus) == ("shop", "orders", TabFocus.DOCUMENTS)

        restored = _fresh_app(local_conn)
        hydrate(restored, SessionSnapshot.from_dict(json.loads(json.dumps(first.to_dict()))))
        restored.tick()
        settle(restored)

        state = restored.active_tab.state
        assert state.connection.url == "mongodb://adhoc:27017"
        assert state.collection == "orders"
        assert restored.services.connections.connections == [local_conn]
        assert dehydrate(restored) == first


class TestDuplicateTab:
    def test_copy_walks_to_the_same_place(self, app):
        _browse_pending_orders(app)
        original = app.active_tab

        press(app, DuplicateTab())
        settle(app)

        assert len(app.tabs) == 2
        copy = app.active_tab
        assert copy.id != original.id
        assert copy.state.collection == "orders"
        assert copy.state.page == original.state.page
        assert copy.state.filter == original.state.filter
        assert copy.state.documents == original.state.documents

    def test_copy_of_ad_hoc_tab_reconnects(self, local_conn):
        app = _fresh_app(local_conn)
        apply_startup(app, StartupOptions(url="mongodb://adhoc:27017", database="shop"))
        settle(app)
        original = app.active_tab

        press(app, DuplicateTab())
        settle(app)

        copy = app.active_tab
        assert copy.id != original.id
        assert copy.state.connection.url == "mongodb://adhoc:27017"
        assert copy.state.database == "shop"
        assert copy.state.focus == TabFocus.COLLECTIONS
        assert "no longer exists" not in app.status_bar.text()


class TestBoundedSave:
    def test_successful_save(self):
        storage = InMemoryStorage()

        assert save_session_bounded(storage, SessionSnapshot(), 1.0) is True
        assert SESSION_KEY in storage.data

    def test_failing_save_reports_false(self):
        storage = InMemoryStorage(fail_saves=True)

        assert save_session_bounded(storage, SessionSnapshot(), 1.0) is False

    def test_hung_save_gives_up_after_timeout(self):
        storage = InMemoryStorage()
        storage.block_saves()
        started = time.monotonic()
        try:
            assert save_session_bounded(storage, SessionSnapshot(), 0.05) is False
            assert time.monotonic() - started < 1.0
        finally:
            storage.release()
