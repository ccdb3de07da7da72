"""CacheStore factory for creating backend instances."""

from pymongo import MongoClient

from mongostore.cache.store import CacheStore
from mongostore.cache.stores.inmemory import InMemoryCacheStore
from mongostore.cache.stores.mongodb import MongoCacheStore
from mongostore.config.models.storage import CacheStoreConfig
from mongostore.db.errors import ConfigurationError
from mongostore.observability.logging import get_logger

logger = get_logger(__name__)


def create_cache_store(
    config: CacheStoreConfig,
    client: MongoClient | None = None,
) -> CacheStore:
    """Create a CacheStore instance based on configuration.

    Raises:
        ConfigurationError: If the backend is unknown or the database is missing
        ConnectionError: If MongoDB cannot be reached
    """
    backend = config.backend

    if backend == "inmemory":
        logger.info("creating_cache_store", backend="inmemory")
        return InMemoryCacheStore()

    elif backend == "mongodb":
        logger.info(
            "creating_cache_store",
            backend="mongodb",
            host=config.host,
            database=config.database,
            collection=config.collection,
        )
        return MongoCacheStore.from_config(config, client)

    raise ConfigurationError(f"Unsupported cache backend: {backend}")
