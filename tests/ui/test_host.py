"""Smoke tests for the Textual host."""

from __future__ import annotations

import pytest

from mongotab.core.signals import TabFocus
from mongotab.domains.session.app.persistence import load_snapshot
from mongotab.domains.shell.ui.host import MongotabApp


def _drive(app: MongotabApp) -> None:
    """Run queued driver work and feed the results back through the host."""
    executor = app.services.executor
    for _ in range(25):
        if not executor.pending:
            return
        executor.run_all()
        app.run_tick()


class TestHost:
    @pytest.mark.asyncio
    async def test_keys_drive_the_core(self, services):
        app = MongotabApp(services=services)

        async with app.run_test(size=(120, 40)) as pilot:
            assert len(app.core.tabs) == 1

            await pilot.press("enter")
            _drive(app)
            await pilot.pause()
            tab = app.core.active_tab
            assert tab.state.focus == TabFocus.DATABASES

            await pilot.press("down", "enter")
            _drive(app)
            await pilot.press("down", "enter")
            _drive(app)
            await pilot.pause()
            assert tab.title == "local‣shop‣orders"
            assert tab.state.count == 47

    @pytest.mark.asyncio
    async def test_tab_key_reaches_the_core(self, services):
        app = MongotabApp(services=services)

        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.press("T")
            assert app.core.focus.active_index == 1

            await pilot.press("tab")
            assert app.core.focus.active_index == 0

    @pytest.mark.asyncio
    async def test_quit_saves_session(self, services):
        app = MongotabApp(services=services)

        async with app.run_test(size=(120, 40)) as pilot:
            await pilot.press("T")
            await pilot.press("q")

        assert app.core.should_quit
        snapshot = load_snapshot(services.storage)
        assert snapshot is not None
        assert len(snapshot.tabs) == 2
