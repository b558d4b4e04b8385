"""Per-tab asynchronous operation manager.

Requests raised during a tick are queued, deduplicated by key and issued by
``exec_queued_ops``. Operations run on an executor and report back through a
thread-safe inbox that the app drains on the UI thread; no tab state is
touched from a worker thread.
"""

from __future__ import annotations

import logging
import queue
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mongotab.domains.connections.domain.connection import Connection
from mongotab.domains.documents.app.driver import DocumentDriver, decode_plain, encode_plain
from mongotab.domains.documents.app.executor import Executor
from mongotab.domains.documents.domain.filters import canonical_json

logger = logging.getLogger(__name__)

DriverFactory = Callable[[Connection], DocumentDriver]


class OperationKind(str, Enum):
    CONNECT = "connect"
    LIST_DATABASES = "list_databases"
    LIST_COLLECTIONS = "list_collections"
    FIND = "find"
    COUNT = "count"
    INSERT = "insert"
    REPLACE = "replace"
    DELETE = "delete"
    CREATE_COLLECTION = "create_collection"
    DROP_COLLECTION = "drop_collection"
    DROP_DATABASE = "drop_database"


@dataclass(frozen=True)
class QueryFingerprint:
    """Identifies the documents a tab currently wants to show."""

    tab_id: str
    connection_id: str | None
    database: str
    collection: str
    filter: str
    sort: str
    page: int
    page_size: int

    @classmethod
    def build(
        cls,
        *,
        tab_id: str,
        connection_id: str | None,
        database: str,
        collection: str,
        filter: dict[str, Any],
        sort: dict[str, Any] | None,
        page: int,
        page_size: int,
    ) -> QueryFingerprint:
        return cls(
            tab_id=tab_id,
            connection_id=connection_id,
            database=database,
            collection=collection,
            filter=canonical_json(filter),
            sort=canonical_json(sort or {}),
            page=page,
            page_size=page_size,
        )

    def for_count(self) -> QueryFingerprint:
        """Counting ignores paging and ordering."""
        return QueryFingerprint(
            tab_id=self.tab_id,
            connection_id=self.connection_id,
            database=self.database,
            collection=self.collection,
            filter=self.filter,
            sort="{}",
            page=0,
            page_size=0,
        )


@dataclass(frozen=True)
class OperationKey:
    """Deduplication key of an operation.

    ``session`` changes on every (re)connect so results from a replaced
    driver can be recognised on arrival.
    """

    kind: OperationKind
    tab_id: str
    connection_id: str | None
    session: int
    fingerprint: QueryFingerprint | None = None
    target: str = ""


@dataclass
class Operation:
    key: OperationKey
    run: Callable[[DocumentDriver], Any]


@dataclass(frozen=True)
class Completion:
    """Outcome of an operation, handed from a worker thread to the UI thread."""

    key: OperationKey
    result: Any = None
    error: BaseException | None = None

    @property
    def tab_id(self) -> str:
        return self.key.tab_id

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Inbox:
    """Thread-safe completion queue with an optional wake-up hook."""

    _items: queue.SimpleQueue[Completion] = field(default_factory=queue.SimpleQueue)
    wakeup: Callable[[], None] | None = None

    def put(self, completion: Completion) -> None:
        self._items.put(completion)
        if self.wakeup is not None:
            try:
                self.wakeup()
            except Exception:
                logger.debug("Inbox wakeup failed", exc_info=True)

    def drain(self) -> list[Completion]:
        items: list[Completion] = []
        while True:
            try:
                items.append(self._items.get_nowait())
            except queue.Empty:
                return items

    def empty(self) -> bool:
        return self._items.empty()


class Client:
    """Issues driver operations for one tab.

    A request whose key matches a queued or in-flight operation is dropped:
    the outstanding operation's completion satisfies both.
    """

    def __init__(
        self,
        tab_id: str,
        *,
        executor: Executor,
        inbox: Inbox,
        driver_factory: DriverFactory,
        page_size: int,
    ) -> None:
        self.tab_id = tab_id
        self.page_size = page_size
        self._executor = executor
        self._inbox = inbox
        self._driver_factory = driver_factory
        self._driver: DocumentDriver | None = None
        self._connection: Connection | None = None
        self._session = 0
        self._queued: dict[OperationKey, Operation] = {}
        self._in_flight: set[OperationKey] = set()

    @property
    def connection(self) -> Connection | None:
        return self._connection

    @property
    def connection_id(self) -> str | None:
        return self._connection.id if self._connection else None

    @property
    def session(self) -> int:
        return self._session

    @property
    def in_flight(self) -> frozenset[OperationKey]:
        return frozenset(self._in_flight)

    @property
    def queued(self) -> tuple[OperationKey, ...]:
        return tuple(self._queued)

    def _key(self, kind: OperationKind, *, fingerprint: QueryFingerprint | None = None, target: str = "") -> OperationKey:
        return OperationKey(kind, self.tab_id, self.connection_id, self._session, fingerprint, target)

    def request(self, operation: Operation) -> bool:
        """Queue an operation unless an identical one is outstanding."""
        key = operation.key
        if key in self._queued or key in self._in_flight:
            logger.debug("Tab %s: %s already outstanding", self.tab_id, key.kind.value)
            return False
        self._queued[key] = operation
        return True

    def exec_queued_ops(self) -> int:
        """Issue every queued operation. Returns how many were issued."""
        if not self._queued:
            return 0
        operations = list(self._queued.values())
        self._queued.clear()
        driver = self._driver
        issued = 0
        for operation in operations:
            if driver is None:
                logger.debug("Tab %s: dropping %s, not connected", self.tab_id, operation.key.kind.value)
                continue
            self._in_flight.add(operation.key)
            self._executor.submit(self._run, operation, driver)
            issued += 1
        return issued

    def _run(self, operation: Operation, driver: DocumentDriver) -> None:
        # Worker thread: only the inbox is touched here.
        try:
            result = operation.run(driver)
        except Exception as exc:
            logger.debug("Operation %s failed: %s", operation.key.kind.value, exc)
            self._inbox.put(Completion(operation.key, error=exc))
        else:
            self._inbox.put(Completion(operation.key, result=result))

    def finish(self, completion: Completion) -> bool:
        """Retire a completion. Returns False when it belongs to a replaced session."""
        self._in_flight.discard(completion.key)
        return completion.key.session == self._session

    # -- requests -------------------------------------------------------

    def connect(self, connection: Connection) -> None:
        """Replace the tab's connection and queue a connect operation."""
        self.disconnect()
        self._connection = connection
        self._driver = self._driver_factory(connection)
        self.request(Operation(self._key(OperationKind.CONNECT), lambda driver: driver.connect()))

    def disconnect(self) -> None:
        self._session += 1
        self._queued.clear()
        driver, self._driver = self._driver, None
        self._connection = None
        if driver is not None:
            self._executor.submit(_close_quietly, driver)

    def list_databases(self) -> None:
        self.request(Operation(self._key(OperationKind.LIST_DATABASES), lambda driver: driver.list_databases()))

    def list_collections(self, database: str) -> None:
        self.request(
            Operation(
                self._key(OperationKind.LIST_COLLECTIONS, target=database),
                lambda driver: driver.list_collections(database),
            )
        )

    def find(self, fingerprint: QueryFingerprint, filter: dict[str, Any], sort: dict[str, Any] | None) -> None:
        skip = fingerprint.page * fingerprint.page_size
        self.request(
            Operation(
                self._key(OperationKind.FIND, fingerprint=fingerprint),
                lambda driver: driver.find(
                    fingerprint.database, fingerprint.collection, filter, sort, skip, fingerprint.page_size
                ),
            )
        )

    def count(self, fingerprint: QueryFingerprint, filter: dict[str, Any]) -> None:
        fingerprint = fingerprint.for_count()
        self.request(
            Operation(
                self._key(OperationKind.COUNT, fingerprint=fingerprint),
                lambda driver: driver.count(fingerprint.database, fingerprint.collection, filter),
            )
        )

    def insert(self, database: str, collection: str, document: dict[str, Any]) -> None:
        target = f"{database}.{collection}:{canonical_json(document)}"
        self.request(
            Operation(
                self._key(OperationKind.INSERT, target=target),
                lambda driver: driver.insert_one(database, collection, document),
            )
        )

    def replace(self, database: str, collection: str, document_id: Any, document: dict[str, Any]) -> None:
        target = f"{database}.{collection}:{document_id!r}:{canonical_json(document)}"
        self.request(
            Operation(
                self._key(OperationKind.REPLACE, target=target),
                lambda driver: driver.replace_one(database, collection, document_id, document),
            )
        )

    def delete(self, database: str, collection: str, document_id: Any) -> None:
        self.request(
            Operation(
                self._key(OperationKind.DELETE, target=f"{database}.{collection}:{document_id!r}"),
                lambda driver: driver.delete_one(database, collection, document_id),
            )
        )

    def create_collection(self, database: str, collection: str) -> None:
        self.request(
            Operation(
                self._key(OperationKind.CREATE_COLLECTION, target=f"{database}.{collection}"),
                lambda driver: driver.create_collection(database, collection),
            )
        )

    def drop_collection(self, database: str, collection: str) -> None:
        self.request(
            Operation(
                self._key(OperationKind.DROP_COLLECTION, target=f"{database}.{collection}"),
                lambda driver: driver.drop_collection(database, collection),
            )
        )

    def drop_database(self, database: str) -> None:
        self.request(
            Operation(
                self._key(OperationKind.DROP_DATABASE, target=database),
                lambda driver: driver.drop_database(database),
            )
        )

    # -- editor codec ---------------------------------------------------

    def encode_document(self, document: dict[str, Any]) -> str:
        if self._driver is None:
            return encode_plain(document)
        return self._driver.encode_document(document)

    def decode_document(self, text: str) -> dict[str, Any]:
        if self._driver is None:
            return decode_plain(text)
        return self._driver.decode_document(text)


def _close_quietly(driver: DocumentDriver) -> None:
    try:
        driver.close()
    except Exception:
        logger.debug("Closing %s driver failed", driver.name, exc_info=True)

