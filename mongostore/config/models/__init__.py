"""Configuration model exports.

    from mongostore.config.models import SessionStoreConfig, StorageConfig
"""

from mongostore.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from mongostore.config.models.storage import (
    CACHE_COLLECTION,
    SESSION_COLLECTION,
    CacheStoreConfig,
    MongoBackendConfig,
    SessionStoreConfig,
    StorageConfig,
)

__all__ = [
    # Observability
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    # Storage
    "CACHE_COLLECTION",
    "SESSION_COLLECTION",
    "CacheStoreConfig",
    "MongoBackendConfig",
    "SessionStoreConfig",
    "StorageConfig",
]
