"""Bootstrap module for application startup.

Wires configuration, logging, metrics and the two stores in one call, so a
web application only has to keep the returned context around:

    from mongostore.bootstrap import bootstrap

    ctx = bootstrap()
    payload = ctx.session_handler.read(session_id)
"""

from dataclasses import dataclass

from pymongo import MongoClient

from mongostore.cache import CacheStore, create_cache_store
from mongostore.config import Settings, get_settings
from mongostore.observability.logging import get_logger, setup_logging
from mongostore.observability.metrics import setup_metrics
from mongostore.session import SessionHandler, create_session_handler

logger = get_logger(__name__)


@dataclass
class BootstrapContext:
    """Process-wide stores built from settings."""

    settings: Settings
    session_handler: SessionHandler
    cache_store: CacheStore


def bootstrap(
    settings: Settings | None = None,
    *,
    client: MongoClient | None = None,
    serve_metrics: bool = False,
) -> BootstrapContext:
    """Build the session handler and cache store from configuration.

    Args:
        settings: Settings to use (default: loaded from config/ and env)
        client: Client shared by both stores instead of one client each
        serve_metrics: Expose Prometheus metrics over HTTP

    Raises:
        ConfigurationError: If a mongodb backend has no database configured
        ConnectionError: If MongoDB cannot be reached
    """
    settings = settings or get_settings()

    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )
    setup_metrics(settings.observability.metrics, serve=serve_metrics)

    session_handler = create_session_handler(settings.storage.session, client)
    cache_store = create_cache_store(settings.storage.cache, client)

    logger.info(
        "mongostore_bootstrapped",
        app_name=settings.app_name,
        session_backend=settings.storage.session.backend,
        cache_backend=settings.storage.cache.backend,
    )
    return BootstrapContext(
        settings=settings,
        session_handler=session_handler,
        cache_store=cache_store,
    )
