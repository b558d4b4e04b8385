"""End-to-end behaviour of one tab driven through the app loop."""

from __future__ import annotations

from mongotab.core.signals import (
    Cancel,
    Confirm,
    CreateNew,
    DatabasesLoaded,
    Delete,
    DeleteDoc,
    EditDoc,
    FocusLeft,
    FocusUp,
    InsertDoc,
    NavDown,
    NextPage,
    PreviousPage,
    Refresh,
    Severity,
    TabFocus,
)
from mongotab.domains.documents.app.memory import InMemoryDriver, demo_dataset
from mongotab.domains.shell.app.app import App
from tests.helpers import clear_field, make_services, open_collection, press, settle, type_text


class TestNavigation:
    def test_walks_down_to_documents(self, app):
        open_collection(app)
        tab = app.active_tab

        assert tab.state.focus == TabFocus.DOCUMENTS
        assert tab.title == "local‣shop‣orders"
        assert len(tab.state.documents) == 5
        assert tab.state.count == 47
        assert tab.state.selected_doc_id == "order-1"

    def test_first_focus_of_database_list_highlights_first_item(self, app):
        app.open_tab()
        app.tick()
        press(app, Confirm())
        settle(app)

        tab = app.active_tab
        assert tab.state.focus == TabFocus.DATABASES
        assert tab.database_list.cursor == 0
        assert tab.database_list.highlighted == "logs"

    def test_cursor_wraps_around(self, app):
        app.open_tab()
        app.tick()
        press(app, Confirm())
        settle(app)
        tab = app.active_tab

        press(app, NavDown(), NavDown())
        assert tab.database_list.highlighted == "logs"

    def test_render_shows_page_window(self, app):
        open_collection(app)
        region = app.render()

        assert region.find("documents").title == "Documents (orders) 1-5 of 47"
        assert "local‣shop‣orders" in region.find("tab_bar").text()
        assert region.find("documents").focused

    def test_cancel_walks_back_to_connection_screen(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, Cancel())
        assert tab.state.focus == TabFocus.COLLECTIONS
        press(app, Cancel())
        assert tab.state.focus == TabFocus.DATABASES
        press(app, Cancel())
        assert tab.state.focus == TabFocus.CONNECTIONS
        assert app.focus_path() == ("app", "tab:0", "connection_screen", "connections")

    def test_focus_moves_between_panes(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, FocusUp())
        assert tab.state.focus == TabFocus.QUERY
        press(app, FocusLeft())
        assert tab.state.focus == TabFocus.COLLECTIONS
        press(app, FocusUp())
        assert tab.state.focus == TabFocus.DATABASES

    def test_scoped_events_only_reach_their_tab(self, app):
        first = app.open_tab()
        second = app.open_tab()
        app.tick()

        app.tick(events=[DatabasesLoaded(first.id, None, ("only-first",))])

        assert first.state.databases == ["only-first"]
        assert second.state.databases == []


class TestPaging:
    def test_next_and_previous_page(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, NextPage())
        settle(app)
        assert tab.state.page == 1
        assert tab.state.documents[0]["_id"] == "order-6"
        assert tab.document_view.title() == "Documents (orders) 6-10 of 47"

        press(app, PreviousPage())
        settle(app)
        assert tab.state.page == 0

    def test_previous_on_first_page_is_ignored(self, app):
        open_collection(app)
        press(app, PreviousPage())
        assert app.active_tab.state.page == 0
        assert app.services.executor.pending == []

    def test_next_on_last_page_is_ignored(self, app):
        open_collection(app)
        tab = app.active_tab
        for _ in range(12):
            press(app, NextPage())
            settle(app)
        assert tab.state.page == 9
        assert [doc["_id"] for doc in tab.state.documents] == ["order-46", "order-47"]


class TestQueryInput:
    def test_apply_filter_resets_page_and_refetches(self, app):
        open_collection(app)
        tab = app.active_tab
        press(app, NextPage())
        settle(app)

        press(app, FocusUp(), Confirm())
        assert app.raw_mode
        clear_field(app)
        type_text(app, '{"status": "pending"}')
        press(app, Confirm())
        settle(app)

        assert not tab.query_input.editing
        assert tab.state.filter == {"status": "pending"}
        assert tab.state.page == 0
        assert tab.state.count == 15
        assert all(doc["status"] == "pending" for doc in tab.state.documents)

    def test_invalid_filter_keeps_editing_and_shows_error(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, FocusUp(), Confirm())
        clear_field(app)
        type_text(app, "oops")
        press(app, Confirm())

        assert tab.query_input.editing
        assert tab.state.filter == {}
        assert app.status_bar.severity == Severity.ERROR
        assert app.status_bar.text().startswith("Error: Invalid filter")

    def test_cancel_restores_previous_text(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, FocusUp(), Confirm())
        type_text(app, "junk")
        press(app, Cancel())

        assert not tab.query_input.editing
        assert tab.query_input.filter_field.text == "{}"
        assert tab.state.focus == TabFocus.QUERY


class TestModals:
    def test_drop_collection_after_confirmation(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, FocusLeft(), Delete())
        assert tab.state.focus == TabFocus.CONFIRM
        assert tab.confirm_modal.prompt == "Drop collection 'orders'?"

        press(app, Confirm())
        assert tab.state.focus == TabFocus.COLLECTIONS
        settle(app)

        assert tab.state.collection is None
        assert tab.state.collections == ["customers"]

    def test_declined_confirmation_changes_nothing(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, FocusLeft(), Delete(), Cancel())

        assert tab.state.focus == TabFocus.COLLECTIONS
        assert not tab.confirm_modal.visible
        assert app.services.executor.pending == []

    def test_create_collection_through_input_modal(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, FocusLeft(), CreateNew())
        assert tab.state.focus == TabFocus.INPUT
        type_text(app, "audit")
        press(app, Confirm())
        settle(app)

        assert tab.state.focus == TabFocus.COLLECTIONS
        assert "audit" in tab.state.collections

    def test_create_database_is_not_supported(self, app):
        app.open_tab()
        app.tick()
        press(app, Confirm())
        settle(app)

        press(app, CreateNew())

        assert app.status_bar.severity == Severity.INFO
        assert "first collection" in app.status_bar.text()


class TestDocumentWrites:
    def test_delete_document(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, DeleteDoc(), Confirm())
        settle(app)

        assert tab.state.count == 46
        assert tab.state.documents[0]["_id"] == "order-2"
        assert app.status_bar.severity == Severity.SUCCESS

    def test_edit_document_through_external_editor(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, EditDoc())
        pending = app.take_pending_edit()
        assert pending is not None
        assert pending.original_id == "order-1"

        event = app.finish_edit(pending, pending.text.replace('"total": 7,', '"total": 700,'))
        app.tick(events=[event])
        settle(app)

        assert tab.state.documents[0]["total"] == 700

    def test_unchanged_edit_is_abandoned(self, app):
        open_collection(app)
        press(app, EditDoc())
        pending = app.take_pending_edit()
        assert app.finish_edit(pending, pending.text) is None
        assert app.finish_edit(pending, None) is None

    def test_insert_document(self, app):
        open_collection(app)
        tab = app.active_tab

        press(app, InsertDoc())
        pending = app.take_pending_edit()
        event = app.finish_edit(pending, '{"_id": "order-new", "status": "new"}')
        app.tick(events=[event])
        settle(app)

        assert tab.state.count == 48

    def test_invalid_editor_output_is_reported(self, app):
        open_collection(app)
        press(app, InsertDoc())
        pending = app.take_pending_edit()

        event = app.finish_edit(pending, "{broken")
        app.tick(events=[event])

        assert app.status_bar.text().startswith("Error: Invalid document")


class TestConnectionScreen:
    def test_add_connection(self, app):
        app.open_tab()
        app.tick()
        tab = app.active_tab

        press(app, CreateNew())
        assert tab.state.focus == TabFocus.CONNECTION_EDITOR
        type_text(app, "staging")
        press(app, Confirm(), Confirm())

        assert tab.state.focus == TabFocus.CONNECTIONS
        assert [c.name for c in app.services.connections.connections] == ["local", "staging"]
        assert app.status_bar.text() == "✔ Saved connection 'staging'"

    def test_empty_url_is_rejected(self, app):
        app.open_tab()
        app.tick()
        tab = app.active_tab

        press(app, CreateNew(), Confirm())
        clear_field(app)
        press(app, Confirm())

        assert tab.state.focus == TabFocus.CONNECTION_EDITOR
        assert app.status_bar.severity == Severity.ERROR

    def test_delete_connection(self, app):
        app.open_tab()
        app.tick()

        press(app, Delete(), Confirm())

        assert app.services.connections.connections == []
        assert app.active_tab.state.focus == TabFocus.CONNECTIONS

    def test_connect_failure_is_reported(self, local_conn):
        app = App(make_services(connections=[local_conn], driver=InMemoryDriver(fail_connect=True)))
        app.open_tab()
        app.tick()

        press(app, Confirm())
        settle(app)

        tab = app.active_tab
        assert tab.state.focus == TabFocus.CONNECTIONS
        assert not tab.state.connected
        assert app.status_bar.text() == "Error: Connection refused"


class TestErrors:
    def test_query_error_keeps_last_good_documents(self, local_conn):
        driver = InMemoryDriver(demo_dataset())
        app = App(make_services(connections=[local_conn], driver=driver))
        open_collection(app)
        tab = app.active_tab
        before = list(tab.state.documents)

        driver.fail_queries = True
        press(app, Refresh())
        settle(app)

        assert tab.state.documents == before
        assert app.status_bar.severity == Severity.ERROR

    def test_failed_filter_query_keeps_last_good_documents(self, local_conn):
        driver = InMemoryDriver(demo_dataset())
        app = App(make_services(connections=[local_conn], driver=driver))
        open_collection(app)
        tab = app.active_tab
        before = list(tab.state.documents)

        driver.fail_queries = True
        press(app, FocusUp(), Confirm())
        clear_field(app)
        type_text(app, '{"status": "x"}')
        press(app, Confirm())
        assert tab.state.documents == before
        assert tab.document_view.title().endswith("loading…")

        settle(app)

        assert tab.state.documents == before
        assert tab.state.count == 47
        assert not tab.state.loading
        assert tab.state.filter == {"status": "x"}
        assert app.status_bar.severity == Severity.ERROR
        assert "failed" in app.status_bar.text()

    def test_status_clears_on_next_command(self, app):
        open_collection(app)
        press(app, FocusUp(), Confirm())
        clear_field(app)
        type_text(app, "x")
        press(app, Confirm())
        assert app.status_bar.message is not None

        press(app, Cancel())

        assert app.status_bar.message is None
