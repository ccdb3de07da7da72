"""Configuration for mongostore.

``Settings()`` reads config/default.toml, the ``MONGOSTORE_ENV`` overlay
and ``MONGOSTORE_*`` variables every time it is built; ``get_settings()``
keeps one instance per process.

Usage:
    from mongostore.config import get_settings

    settings = get_settings()
    database = settings.storage.session.database
"""

from functools import lru_cache

from mongostore.config.settings import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, built on first use."""
    return Settings()


def reload_settings() -> Settings:
    """Drop the cached settings and read the configuration again."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
