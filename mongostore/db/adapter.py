"""MongoDB document adapter.

A thin passthrough over pymongo that owns one client, tracks the selected
database and collection, and converts driver failures into StoreErrors.
The cache and session backends use it to establish their collection once,
at application startup.

Usage:
    adapter = MongoAdapter.configuration("localhost:27017", "app", "secret")
    adapter.set_database("shop").set_collection("orders")
    order_id = adapter.insert({"sku": "A-1", "qty": 2})
    adapter.update({"qty": 3}, {"_id": str(order_id)})
"""

import json
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import quote_plus

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    CollectionInvalid,
    ConnectionFailure,
    OperationFailure,
    PyMongoError,
)
from pymongo.errors import (
    ConfigurationError as DriverConfigurationError,
)

from mongostore.config.models.storage import MongoBackendConfig
from mongostore.db.errors import (
    ConfigurationError,
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from mongostore.observability.logging import get_logger

logger = get_logger(__name__)

# Server error code for a missing database or collection
NAMESPACE_NOT_FOUND = 26


def build_connection_uri(
    host: str, user: str | None = None, password: str | None = None
) -> str:
    """Build a mongodb:// URI, embedding credentials only when both are given."""
    if user and password:
        return f"mongodb://{quote_plus(user)}:{quote_plus(password)}@{host}"
    return f"mongodb://{host}"


def _object_id(value: Any) -> Any:
    """Convert a hex string to an ObjectId, leaving other values untouched."""
    if isinstance(value, str):
        try:
            return ObjectId(value)
        except InvalidId as e:
            raise ValidationError(f"Invalid ObjectId: {value!r}", cause=e) from e
    return value


class MongoAdapter:
    """Passthrough over a pymongo client with database/collection selection."""

    def __init__(self, client: MongoClient) -> None:
        """Wrap an already constructed client.

        Args:
            client: pymongo client, owned by the application
        """
        self._client = client
        self._database: Database | None = None
        self._collection: Collection | None = None
        self._inserted_id: Any = None

    @classmethod
    def configuration(
        cls,
        host: str,
        user: str | None = None,
        password: str | None = None,
        **client_options: Any,
    ) -> "MongoAdapter":
        """Create an adapter with a fresh client for the given host.

        Raises:
            ConfigurationError: If the driver rejects the URI or options
        """
        uri = build_connection_uri(host, user, password)
        try:
            client: MongoClient = MongoClient(uri, **client_options)
        except DriverConfigurationError as e:
            raise ConfigurationError(f"Invalid MongoDB configuration: {e}", cause=e) from e

        logger.debug("mongo_client_created", host=host, authenticated=bool(user and password))
        return cls(client)

    @classmethod
    def from_config(
        cls,
        config: MongoBackendConfig,
        client: MongoClient | None = None,
    ) -> "MongoAdapter":
        """Connect, select the configured database and ensure its collection.

        Fails fast: nothing is returned unless the server answered a ping
        and the target collection exists.

        Raises:
            ConfigurationError: If no database name is configured
            ConnectionError: If the server cannot be reached
        """
        if not config.database:
            raise ConfigurationError(
                f"No MongoDB database configured for collection '{config.collection}'"
            )

        if client is None:
            adapter = cls.configuration(
                config.host,
                config.user,
                config.password,
                serverSelectionTimeoutMS=config.server_selection_timeout_ms,
                tz_aware=True,
            )
        else:
            adapter = cls(client)

        adapter.ping()
        adapter.set_database(config.database)
        adapter.ensure_collection(config.collection)
        adapter.set_collection(config.collection)
        return adapter

    @property
    def client(self) -> MongoClient:
        """The underlying pymongo client."""
        return self._client

    def ping(self) -> None:
        """Round-trip to the server.

        Raises:
            ConnectionError: If no server answered
        """
        try:
            self._client.admin.command("ping")
        except PyMongoError as e:
            logger.error("mongo_ping_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to MongoDB: {e}", cause=e) from e

    def close(self) -> None:
        self._client.close()

    def get_database(self) -> Database:
        if self._database is None:
            raise ConfigurationError("No database selected, call set_database() first")
        return self._database

    def set_database(self, database: str) -> "MongoAdapter":
        self._database = self._client.get_database(database)
        return self

    def get_collection(self) -> Collection:
        if self._collection is None:
            raise ConfigurationError("No collection selected, call set_collection() first")
        return self._collection

    def set_collection(self, collection: str) -> "MongoAdapter":
        self._collection = self.get_database().get_collection(collection)
        return self

    set_table = set_collection

    def get_collections(self, database: str) -> list[str]:
        """List the collection names of a database."""
        try:
            return self._client.get_database(database).list_collection_names()
        except ConnectionFailure as e:
            raise ConnectionError(f"Failed to list collections: {e}", cause=e) from e
        except PyMongoError as e:
            raise StoreError(f"Failed to list collections: {e}", cause=e) from e

    def ensure_collection(self, collection: str) -> bool:
        """Create the collection in the selected database if it is missing.

        Returns:
            True if the collection was created by this call
        """
        database = self.get_database()
        if collection in self.get_collections(database.name):
            return False

        try:
            database.create_collection(collection)
        except CollectionInvalid:
            # Created concurrently by another process
            return False
        except PyMongoError as e:
            raise StoreError(f"Failed to create collection {collection}: {e}", cause=e) from e

        logger.info("mongo_collection_created", database=database.name, collection=collection)
        return True

    def describe_collection(self, collection: str) -> dict[str, Any]:
        """Summarize a collection's statistics.

        Raises:
            NotFoundError: If the collection does not exist
        """
        try:
            stats = self.get_database().command("collStats", collection)
        except OperationFailure as e:
            if e.code == NAMESPACE_NOT_FOUND:
                raise NotFoundError(f"Collection not found: {collection}", cause=e) from e
            raise StoreError(f"Failed to describe collection {collection}: {e}", cause=e) from e
        except PyMongoError as e:
            raise StoreError(f"Failed to describe collection {collection}: {e}", cause=e) from e

        return {
            "collection_name": stats["ns"],
            "document_count": stats["count"],
            "storage_size": f"{stats['storageSize']} bytes",
            "indexes": json.dumps(stats.get("indexSizes", {}), indent=4),
        }

    def count(self, where: Mapping[str, Any] | None = None) -> int:
        """Count the documents matching a filter (all documents by default)."""
        return self.get_collection().count_documents(dict(where or {}))

    def select(
        self,
        where: Mapping[str, Any] | None = None,
        *,
        many: bool = False,
        limit: int = 0,
        latest: bool = False,
    ) -> Any:
        """Find one document, or every matching document when ``many`` is set.

        ``latest`` returns the most recently inserted document only.
        Driver failures are logged and reported as None.
        """
        collection = self.get_collection()
        query = dict(where or {})
        sort = None
        if latest:
            sort = [("_id", DESCENDING)]
            limit = 1

        try:
            if not many:
                return collection.find_one(query, sort=sort)
            return list(collection.find(query, sort=sort, limit=limit))
        except PyMongoError as e:
            logger.error(
                "mongo_select_failed",
                collection=collection.name,
                error=str(e),
            )
            return None

    def insert(self, data: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> Any:
        """Insert one document, or many when given a sequence of documents.

        Returns:
            The inserted id, or the list of inserted ids
        """
        collection = self.get_collection()
        try:
            if isinstance(data, Mapping):
                result = collection.insert_one(dict(data))
                self._inserted_id = result.inserted_id
            else:
                results = collection.insert_many([dict(doc) for doc in data])
                self._inserted_id = results.inserted_ids
        except ConnectionFailure as e:
            raise ConnectionError(f"Failed to insert: {e}", cause=e) from e
        except PyMongoError as e:
            raise StoreError(f"Failed to insert into {collection.name}: {e}", cause=e) from e

        return self._inserted_id

    def last_insert_id(self) -> Any:
        """Id (or ids) produced by the most recent insert()."""
        return self._inserted_id

    def update(self, data: Mapping[str, Any], where: Mapping[str, Any]) -> dict[str, int]:
        """Set fields on every document matching ``where``."""
        query = dict(where)
        if "_id" in query:
            query = {"_id": _object_id(query["_id"])}

        collection = self.get_collection()
        try:
            result = collection.update_many(query, {"$set": dict(data)})
        except ConnectionFailure as e:
            raise ConnectionError(f"Failed to update: {e}", cause=e) from e
        except PyMongoError as e:
            raise StoreError(f"Failed to update {collection.name}: {e}", cause=e) from e

        return {
            "matched_count": result.matched_count,
            "modified_count": result.modified_count,
        }

    def delete(self, where: Mapping[str, Any]) -> int:
        """Delete every document matching ``where``; returns the deleted count."""
        query = dict(where)
        for key in ("id", "_id"):
            if key in query:
                query = {"_id": _object_id(query[key])}
                break

        collection = self.get_collection()
        try:
            result = collection.delete_many(query)
        except ConnectionFailure as e:
            raise ConnectionError(f"Failed to delete: {e}", cause=e) from e
        except PyMongoError as e:
            raise StoreError(f"Failed to delete from {collection.name}: {e}", cause=e) from e

        return result.deleted_count
