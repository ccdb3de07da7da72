"""MongoDB implementation of CacheStore.

Documents look like ``{key, value, expiry}``. Reads ignore entries whose
expiry has passed; a TTL index lets the server remove them eventually.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, PyMongoError

from mongostore.cache.store import CacheStore
from mongostore.config.models.storage import CacheStoreConfig
from mongostore.db.adapter import MongoAdapter
from mongostore.db.errors import ConnectionError, StoreError
from mongostore.observability.logging import get_logger
from mongostore.observability.metrics import CACHE_REQUESTS

logger = get_logger(__name__)


class MongoCacheStore(CacheStore):
    """Cache entries stored one document per key."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    @classmethod
    def from_config(
        cls,
        config: CacheStoreConfig,
        client: MongoClient | None = None,
    ) -> "MongoCacheStore":
        """Connect, prepare the cache collection and its indexes.

        Raises:
            ConfigurationError: If no database is configured
            ConnectionError: If MongoDB cannot be reached
        """
        adapter = MongoAdapter.from_config(config, client)
        store = cls(adapter.get_collection())
        store.ensure_indexes()
        logger.info(
            "cache_store_ready",
            database=config.database,
            collection=config.collection,
        )
        return store

    def ensure_indexes(self) -> None:
        """Unique key lookup and server-side expiry."""
        try:
            self._collection.create_index([("key", ASCENDING)], unique=True)
            self._collection.create_index([("expiry", ASCENDING)], expireAfterSeconds=0)
        except ConnectionFailure as e:
            raise ConnectionError(f"Failed to create cache indexes: {e}", cause=e) from e
        except PyMongoError as e:
            raise StoreError(f"Failed to create cache indexes: {e}", cause=e) from e

    def get(self, key: str) -> Any | None:
        try:
            document = self._collection.find_one(
                {"key": key, "expiry": {"$gt": datetime.now(UTC)}}
            )
        except ConnectionFailure as e:
            raise ConnectionError(f"Failed to get cache entry: {e}", cause=e) from e
        except PyMongoError as e:
            logger.error("cache_get_failed", key=key, error=str(e))
            raise StoreError(f"Failed to get cache entry {key}: {e}", cause=e) from e

        if document is None:
            CACHE_REQUESTS.labels(operation="get", result="miss").inc()
            return None

        CACHE_REQUESTS.labels(operation="get", result="hit").inc()
        return document.get("value")

    def delete(self, key: str) -> bool:
        try:
            result = self._collection.delete_one({"key": key})
        except ConnectionFailure as e:
            raise ConnectionError(f"Failed to delete cache entry: {e}", cause=e) from e
        except PyMongoError as e:
            logger.error("cache_delete_failed", key=key, error=str(e))
            CACHE_REQUESTS.labels(operation="delete", result="error").inc()
            return False

        CACHE_REQUESTS.labels(operation="delete", result="ok").inc()
        return result.acknowledged and result.deleted_count > 0

    def save(self, key: str, data: Any, expiration_time: int) -> bool:
        expiry = datetime.now(UTC) + timedelta(seconds=expiration_time)
        try:
            result = self._collection.update_one(
                {"key": key},
                {"$set": {"value": data, "expiry": expiry}},
                upsert=True,
            )
        except ConnectionFailure as e:
            raise ConnectionError(f"Failed to save cache entry: {e}", cause=e) from e
        except PyMongoError as e:
            logger.error("cache_save_failed", key=key, error=str(e))
            CACHE_REQUESTS.labels(operation="save", result="error").inc()
            return False

        CACHE_REQUESTS.labels(operation="save", result="ok").inc()
        logger.debug("cache_saved", key=key, expiration_time=expiration_time)
        return result.acknowledged
