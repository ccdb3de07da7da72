"""Key/value cache with expiry, backed by MongoDB."""

from mongostore.cache.factory import create_cache_store
from mongostore.cache.store import CacheStore
from mongostore.cache.stores import InMemoryCacheStore, MongoCacheStore

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "MongoCacheStore",
    "create_cache_store",
]
