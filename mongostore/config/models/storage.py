"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "mongodb"]

SESSION_COLLECTION = "mongostore_session"
CACHE_COLLECTION = "mongostore_cache"


class MongoBackendConfig(BaseModel):
    """Configuration for a single MongoDB-backed store.

    Credentials should come from environment variables
    (MONGOSTORE_STORAGE__SESSION__PASSWORD), not from config files.
    """

    backend: BackendType = Field(
        default="mongodb",
        description="Backend type",
    )
    host: str = Field(
        default="localhost:27017",
        description="MongoDB host[:port], as used in the connection URI",
    )
    user: str | None = Field(default=None, description="MongoDB user")
    password: str | None = Field(default=None, description="MongoDB password")
    database: str | None = Field(
        default=None,
        description="Target database; required by the mongodb backend",
    )
    collection: str = Field(
        default="mongostore",
        min_length=1,
        description="Collection holding the store's documents",
    )
    server_selection_timeout_ms: int = Field(
        default=5000,
        gt=0,
        description="How long the driver waits for a reachable server (ms)",
    )


class SessionStoreConfig(MongoBackendConfig):
    """Session handler configuration."""

    collection: str = Field(
        default=SESSION_COLLECTION,
        min_length=1,
        description="Collection holding one document per session",
    )


class CacheStoreConfig(MongoBackendConfig):
    """Cache store configuration."""

    collection: str = Field(
        default=CACHE_COLLECTION,
        min_length=1,
        description="Collection holding cache entries",
    )


class StorageConfig(BaseModel):
    """Configuration for all storage backends."""

    session: SessionStoreConfig = Field(
        default_factory=SessionStoreConfig,
        description="Session handler backend",
    )
    cache: CacheStoreConfig = Field(
        default_factory=CacheStoreConfig,
        description="Cache store backend",
    )
