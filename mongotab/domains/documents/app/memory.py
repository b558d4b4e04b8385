"""In-memory driver used by ``--mock`` mode and by tests."""

from __future__ import annotations

import copy
import threading
import uuid
from typing import Any

from mongotab.domains.documents.app.driver import DocumentDriver
from mongotab.shared.core.errors import DriverError

Dataset = dict[str, dict[str, list[dict[str, Any]]]]


def _lookup(document: dict[str, Any], dotted: str) -> Any:
    value: Any = document
    for part in dotted.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def _matches(document: dict[str, Any], filter: dict[str, Any]) -> bool:
    for key, expected in filter.items():
        actual = _lookup(document, key)
        if isinstance(expected, dict) and expected and all(op.startswith("$") for op in expected):
            for op, operand in expected.items():
                if op == "$eq" and actual != operand:
                    return False
                if op == "$ne" and actual == operand:
                    return False
                if op == "$in" and actual not in operand:
                    return False
                if op == "$gt" and not (actual is not None and actual > operand):
                    return False
                if op == "$lt" and not (actual is not None and actual < operand):
                    return False
        elif actual != expected:
            return False
    return True


def _sort_key(value: Any) -> tuple[int, Any]:
    if value is None:
        return (0, "")
    if isinstance(value, (int, float)):
        return (1, value)
    return (2, str(value))


class InMemoryDriver(DocumentDriver):
    """A thread-safe document store held in a nested dict.

    ``fail_connect`` makes ``connect`` raise and ``fail_queries`` makes reads
    raise, which lets tests drive the error paths.
    """

    def __init__(
        self,
        data: Dataset | None = None,
        *,
        fail_connect: bool = False,
        fail_queries: bool = False,
    ) -> None:
        self._data: Dataset = copy.deepcopy(data) if data else {}
        self._lock = threading.Lock()
        self.fail_connect = fail_connect
        self.fail_queries = fail_queries
        self.connected = False
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    @property
    def name(self) -> str:
        return "In-memory"

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def _collection(self, database: str, collection: str) -> list[dict[str, Any]]:
        try:
            return self._data[database][collection]
        except KeyError:
            raise DriverError(f"Collection {database}.{collection} does not exist") from None

    def connect(self) -> None:
        self._record("connect")
        if self.fail_connect:
            raise DriverError("Connection refused")
        self.connected = True

    def list_databases(self) -> list[str]:
        self._record("list_databases")
        with self._lock:
            return sorted(self._data)

    def list_collections(self, database: str) -> list[str]:
        self._record("list_collections", database)
        with self._lock:
            return sorted(self._data.get(database, {}))

    def find(
        self,
        database: str,
        collection: str,
        filter: dict[str, Any],
        sort: dict[str, Any] | None,
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        self._record("find", database, collection, filter, sort, skip, limit)
        if self.fail_queries:
            raise DriverError("Query failed")
        with self._lock:
            docs = [doc for doc in self._collection(database, collection) if _matches(doc, filter)]
        for field_name, direction in reversed(list((sort or {}).items())):
            docs.sort(key=lambda doc: _sort_key(_lookup(doc, field_name)), reverse=direction == -1)
        return copy.deepcopy(docs[skip : skip + limit])

    def count(self, database: str, collection: str, filter: dict[str, Any]) -> int:
        self._record("count", database, collection, filter)
        if self.fail_queries:
            raise DriverError("Count failed")
        with self._lock:
            return sum(1 for doc in self._collection(database, collection) if _matches(doc, filter))

    def insert_one(self, database: str, collection: str, document: dict[str, Any]) -> Any:
        self._record("insert_one", database, collection, document)
        doc = copy.deepcopy(document)
        doc.setdefault("_id", uuid.uuid4().hex)
        with self._lock:
            self._data.setdefault(database, {}).setdefault(collection, []).append(doc)
        return doc["_id"]

    def replace_one(self, database: str, collection: str, document_id: Any, document: dict[str, Any]) -> int:
        self._record("replace_one", database, collection, document_id, document)
        with self._lock:
            docs = self._collection(database, collection)
            for index, existing in enumerate(docs):
                if existing.get("_id") == document_id:
                    body = {key: value for key, value in document.items() if key != "_id"}
                    docs[index] = {"_id": document_id, **copy.deepcopy(body)}
                    return 1
        return 0

    def delete_one(self, database: str, collection: str, document_id: Any) -> int:
        self._record("delete_one", database, collection, document_id)
        with self._lock:
            docs = self._collection(database, collection)
            for index, existing in enumerate(docs):
                if existing.get("_id") == document_id:
                    del docs[index]
                    return 1
        return 0

    def create_collection(self, database: str, collection: str) -> None:
        self._record("create_collection", database, collection)
        with self._lock:
            colls = self._data.setdefault(database, {})
            if collection in colls:
                raise DriverError(f"Collection {collection} already exists")
            colls[collection] = []

    def drop_collection(self, database: str, collection: str) -> None:
        self._record("drop_collection", database, collection)
        with self._lock:
            self._data.get(database, {}).pop(collection, None)

    def drop_database(self, database: str) -> None:
        self._record("drop_database", database)
        with self._lock:
            self._data.pop(database, None)


def demo_dataset() -> Dataset:
    """A small dataset for ``--mock`` sessions."""
    return {
        "shop": {
            "orders": [
                {"_id": f"order-{n}", "status": "shipped" if n % 3 else "pending", "total": n * 7, "items": [n, n + 1]}
                for n in range(1, 48)
            ],
            "customers": [
                {"_id": f"cust-{n}", "name": f"Customer {n}", "address": {"city": "Utrecht", "zip": f"35{n:02d}"}}
                for n in range(1, 12)
            ],
        },
        "logs": {"events": [{"_id": n, "level": "info", "message": f"event {n}"} for n in range(1, 6)]},
    }
