"""CacheStore abstract interface."""

from abc import ABC, abstractmethod
from typing import Any


class CacheStore(ABC):
    """Abstract interface for key/value caching with expiry.

    Expired entries behave exactly like missing ones.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Get the cached value, None if missing or expired."""
        pass

    def has(self, key: str) -> bool:
        """Whether a live value is cached under ``key``."""
        return self.get(key) is not None

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete an entry; returns whether one was removed."""
        pass

    @abstractmethod
    def save(self, key: str, data: Any, expiration_time: int) -> bool:
        """Cache ``data`` under ``key`` for ``expiration_time`` seconds."""
        pass
