"""Cache store backends."""

from mongostore.cache.store import CacheStore
from mongostore.cache.stores.inmemory import InMemoryCacheStore
from mongostore.cache.stores.mongodb import MongoCacheStore

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "MongoCacheStore",
]
