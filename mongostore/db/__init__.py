"""MongoDB access layer: the document adapter and the store error hierarchy."""

from mongostore.db.adapter import MongoAdapter, build_connection_uri
from mongostore.db.errors import (
    ConfigurationError,
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
)

__all__ = [
    "MongoAdapter",
    "build_connection_uri",
    "StoreError",
    "ConfigurationError",
    "ConnectionError",
    "NotFoundError",
    "ValidationError",
]
