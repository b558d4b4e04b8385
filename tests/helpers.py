"""Builders and drivers for exercising the core without a terminal."""

from __future__ import annotations

from collections.abc import Iterable

from mongotab.core.signals import Command, Confirm, NavDown
from mongotab.domains.connections.app.manager import ConnectionManager
from mongotab.domains.connections.domain.connection import Connection
from mongotab.domains.connections.store.connections import ConnectionStore
from mongotab.domains.documents.app.executor import ManualExecutor
from mongotab.domains.documents.app.memory import Dataset, InMemoryDriver, demo_dataset
from mongotab.domains.documents.domain.search import FuzzyMatcher, Matcher
from mongotab.shared.app import AppServices, RuntimeConfig
from mongotab.shared.app.clipboard import InMemoryClipboard
from mongotab.shared.core.store import InMemoryStorage


def make_services(
    *,
    connections: Iterable[Connection] = (),
    driver: InMemoryDriver | None = None,
    dataset: Dataset | None = None,
    storage: InMemoryStorage | None = None,
    page_size: int = 5,
    save_timeout_s: float = 0.5,
    clipboard: InMemoryClipboard | None = None,
    matcher: Matcher | None = None,
) -> AppServices:
    storage = storage if storage is not None else InMemoryStorage()
    manager = ConnectionManager(ConnectionStore(storage))
    for conn in connections:
        manager.save(conn)
    shared_driver = driver if driver is not None else InMemoryDriver(dataset if dataset is not None else demo_dataset())
    return AppServices(
        runtime=RuntimeConfig(page_size=page_size, save_timeout_s=save_timeout_s),
        storage=storage,
        connections=manager,
        driver_factory=lambda connection: shared_driver,
        executor=ManualExecutor(),
        clipboard=clipboard if clipboard is not None else InMemoryClipboard(),
        matcher=matcher if matcher is not None else FuzzyMatcher(),
    )


def settle(app, max_rounds: int = 25) -> None:
    """Run every outstanding operation and feed results back until quiet."""
    executor = app.services.executor
    for _ in range(max_rounds):
        if not executor.pending and app.inbox.empty():
            return
        executor.run_all()
        app.tick()
    raise AssertionError("App did not settle")


def press(app, *commands: Command) -> bool:
    return app.tick(list(commands))


def choose(app, items: list[str], name: str) -> None:
    """Move a list cursor from the first item onto ``name`` and confirm it."""
    index = items.index(name)
    press(app, *([NavDown()] * index), Confirm())


def open_collection(app, database: str = "shop", collection: str = "orders") -> None:
    """From a fresh tab with one saved connection, navigate to a collection."""
    if not app.tabs:
        app.open_tab()
        app.tick()
    tab = app.active_tab
    press(app, Confirm())
    settle(app)
    choose(app, tab.state.databases, database)
    settle(app)
    choose(app, tab.state.collections, collection)
    settle(app)


def type_text(app, text: str) -> None:
    """Send ``text`` as raw keys, one tick per key like a terminal would."""
    from mongotab.core.signals import RawKey

    for char in text:
        press(app, RawKey("space" if char == " " else char, char))


def clear_field(app) -> None:
    from mongotab.core.signals import RawKey

    press(app, RawKey("end"), RawKey("ctrl+u"))
