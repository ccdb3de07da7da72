"""SessionHandler factory for creating backend instances."""

from pymongo import MongoClient

from mongostore.config.models.storage import SessionStoreConfig
from mongostore.db.errors import ConfigurationError
from mongostore.observability.logging import get_logger
from mongostore.session.handler import SessionHandler
from mongostore.session.handlers.inmemory import InMemorySessionHandler
from mongostore.session.handlers.mongodb import MongoSessionHandler

logger = get_logger(__name__)


def create_session_handler(
    config: SessionStoreConfig,
    client: MongoClient | None = None,
) -> SessionHandler:
    """Create a SessionHandler based on configuration.

    Args:
        config: Session store configuration from settings
        client: Shared client to reuse instead of connecting anew

    Raises:
        ConfigurationError: If the backend is unknown or the database is missing
        ConnectionError: If MongoDB cannot be reached
    """
    backend = config.backend

    if backend == "inmemory":
        logger.info("creating_session_handler", backend="inmemory")
        return InMemorySessionHandler()

    elif backend == "mongodb":
        logger.info(
            "creating_session_handler",
            backend="mongodb",
            host=config.host,
            database=config.database,
            collection=config.collection,
        )
        return MongoSessionHandler.from_config(config, client)

    raise ConfigurationError(f"Unsupported session backend: {backend}")
