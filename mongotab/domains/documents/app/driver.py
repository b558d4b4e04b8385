"""Document database drivers.

The core never speaks the wire protocol: it calls a ``DocumentDriver`` from a
worker thread and turns the result into an event.
"""

from __future__ import annotations

import importlib
import json
from abc import ABC, abstractmethod
from types import ModuleType
from typing import Any

from mongotab.domains.connections.domain.connection import Connection
from mongotab.shared.core.errors import DriverError, MissingDriverError

SERVER_SELECTION_TIMEOUT_MS = 5000


def encode_plain(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2, default=str)


def decode_plain(text: str) -> dict[str, Any]:
    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError("A document must be a JSON object")
    return parsed


class DocumentDriver(ABC):
    """Abstract base class for document database drivers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this driver."""

    @property
    def install_extra(self) -> str | None:
        """Name of the [extra] for pip install."""
        return None

    @property
    def install_package(self) -> str | None:
        return None

    def _import_driver_module(self, module_name: str) -> ModuleType:
        try:
            return importlib.import_module(module_name)
        except ImportError as exc:
            raise MissingDriverError(self.name, self.install_package or module_name, self.install_extra) from exc

    @abstractmethod
    def connect(self) -> None:
        """Open the connection and verify the server answers."""

    @abstractmethod
    def list_databases(self) -> list[str]:
        pass

    @abstractmethod
    def list_collections(self, database: str) -> list[str]:
        pass

    @abstractmethod
    def find(
        self,
        database: str,
        collection: str,
        filter: dict[str, Any],
        sort: dict[str, Any] | None,
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def count(self, database: str, collection: str, filter: dict[str, Any]) -> int:
        pass

    @abstractmethod
    def insert_one(self, database: str, collection: str, document: dict[str, Any]) -> Any:
        """Insert a document and return its id."""

    @abstractmethod
    def replace_one(self, database: str, collection: str, document_id: Any, document: dict[str, Any]) -> int:
        """Replace a document and return the number of matched documents."""

    @abstractmethod
    def delete_one(self, database: str, collection: str, document_id: Any) -> int:
        pass

    @abstractmethod
    def create_collection(self, database: str, collection: str) -> None:
        pass

    @abstractmethod
    def drop_collection(self, database: str, collection: str) -> None:
        pass

    @abstractmethod
    def drop_database(self, database: str) -> None:
        pass

    def close(self) -> None:
        """Release the underlying client."""
        return None

    def encode_document(self, document: dict[str, Any]) -> str:
        """Serialize a document for the external editor."""
        return encode_plain(document)

    def decode_document(self, text: str) -> dict[str, Any]:
        """Parse editor output back into a document."""
        return decode_plain(text)


class PyMongoDriver(DocumentDriver):
    """MongoDB driver backed by pymongo."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection
        self._client: Any | None = None

    @property
    def name(self) -> str:
        return "MongoDB"

    @property
    def install_extra(self) -> str | None:
        return "mongo"

    @property
    def install_package(self) -> str | None:
        return "pymongo"

    @property
    def client(self) -> Any:
        if self._client is None:
            raise DriverError("Not connected")
        return self._client

    def connect(self) -> None:
        pymongo = self._import_driver_module("pymongo")
        errors = self._import_driver_module("pymongo.errors")
        try:
            client = pymongo.MongoClient(
                self.connection.url,
                serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
            )
            client.admin.command("ping")
        except (errors.PyMongoError, ValueError) as exc:
            raise DriverError(f"Could not connect to {self.connection.display_url}: {exc}") from exc
        self._client = client

    def list_databases(self) -> list[str]:
        return sorted(self.client.list_database_names())

    def list_collections(self, database: str) -> list[str]:
        return sorted(self.client[database].list_collection_names())

    def _to_bson(self, value: dict[str, Any]) -> dict[str, Any]:
        # Extended JSON ({"$oid": ...}, {"$date": ...}) to native BSON types.
        json_util = self._import_driver_module("bson.json_util")
        return json_util.loads(json.dumps(value, default=str))

    def find(
        self,
        database: str,
        collection: str,
        filter: dict[str, Any],
        sort: dict[str, Any] | None,
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        cursor = self.client[database][collection].find(self._to_bson(filter))
        if sort:
            cursor = cursor.sort(list(sort.items()))
        return list(cursor.skip(skip).limit(limit))

    def count(self, database: str, collection: str, filter: dict[str, Any]) -> int:
        return int(self.client[database][collection].count_documents(self._to_bson(filter)))

    def insert_one(self, database: str, collection: str, document: dict[str, Any]) -> Any:
        return self.client[database][collection].insert_one(document).inserted_id

    def replace_one(self, database: str, collection: str, document_id: Any, document: dict[str, Any]) -> int:
        body = {key: value for key, value in document.items() if key != "_id"}
        return self.client[database][collection].replace_one({"_id": document_id}, body).matched_count

    def delete_one(self, database: str, collection: str, document_id: Any) -> int:
        return self.client[database][collection].delete_one({"_id": document_id}).deleted_count

    def create_collection(self, database: str, collection: str) -> None:
        self.client[database].create_collection(collection)

    def drop_collection(self, database: str, collection: str) -> None:
        self.client[database].drop_collection(collection)

    def drop_database(self, database: str) -> None:
        self.client.drop_database(database)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def encode_document(self, document: dict[str, Any]) -> str:
        json_util = self._import_driver_module("bson.json_util")
        return json_util.dumps(document, indent=2, json_options=json_util.RELAXED_JSON_OPTIONS)

    def decode_document(self, text: str) -> dict[str, Any]:
        json_util = self._import_driver_module("bson.json_util")
        parsed = json_util.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError("A document must be a JSON object")
        return parsed
