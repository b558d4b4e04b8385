"""Service wiring for the application."""

from __future__ import annotations

from dataclasses import dataclass

from mongotab.domains.connections.app.manager import ConnectionManager
from mongotab.domains.connections.domain.connection import Connection
from mongotab.domains.connections.store.connections import ConnectionStore
from mongotab.domains.documents.app.client import DriverFactory
from mongotab.domains.documents.app.driver import DocumentDriver, PyMongoDriver
from mongotab.domains.documents.app.executor import Executor, ThreadExecutor
from mongotab.domains.documents.app.memory import InMemoryDriver, demo_dataset
from mongotab.domains.documents.domain.search import FuzzyMatcher, Matcher
from mongotab.shared.app.clipboard import Clipboard, SystemClipboard
from mongotab.shared.app.runtime import RuntimeConfig
from mongotab.shared.core.store import FileStorage, Storage


@dataclass
class AppServices:
    """Capabilities the core consumes. Tests build their own."""

    runtime: RuntimeConfig
    storage: Storage
    connections: ConnectionManager
    driver_factory: DriverFactory
    executor: Executor
    clipboard: Clipboard
    matcher: Matcher


def _mock_driver_factory() -> DriverFactory:
    shared = InMemoryDriver(demo_dataset())

    def factory(connection: Connection) -> DocumentDriver:
        return shared

    return factory


def build_app_services(runtime: RuntimeConfig) -> AppServices:
    storage = FileStorage(runtime.resolved_config_dir)
    driver_factory: DriverFactory = _mock_driver_factory() if runtime.mock else PyMongoDriver
    return AppServices(
        runtime=runtime,
        storage=storage,
        connections=ConnectionManager(ConnectionStore(storage)),
        driver_factory=driver_factory,
        executor=ThreadExecutor(),
        clipboard=SystemClipboard(),
        matcher=FuzzyMatcher(),
    )
