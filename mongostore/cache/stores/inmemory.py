"""In-memory implementation of CacheStore."""

import threading
from datetime import UTC, datetime, timedelta
from typing import Any

from mongostore.cache.store import CacheStore
from mongostore.observability.metrics import CACHE_REQUESTS


class InMemoryCacheStore(CacheStore):
    """In-memory implementation of CacheStore for testing and development.

    Expired entries are dropped lazily, when they are next looked up.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._entries: dict[str, tuple[Any, datetime]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[1] <= datetime.now(UTC):
                del self._entries[key]
                entry = None

        if entry is None:
            CACHE_REQUESTS.labels(operation="get", result="miss").inc()
            return None

        CACHE_REQUESTS.labels(operation="get", result="hit").inc()
        return entry[0]

    def delete(self, key: str) -> bool:
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        CACHE_REQUESTS.labels(operation="delete", result="ok").inc()
        return removed

    def save(self, key: str, data: Any, expiration_time: int) -> bool:
        expiry = datetime.now(UTC) + timedelta(seconds=expiration_time)
        with self._lock:
            self._entries[key] = (data, expiry)
        CACHE_REQUESTS.labels(operation="save", result="ok").inc()
        return True
