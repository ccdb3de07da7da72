"""Prometheus metrics for mongostore.

Counts session lifecycle calls, garbage-collected records and cache traffic.
"""

from prometheus_client import Counter, start_http_server

from mongostore.config.models.observability import MetricsConfig

# Session metrics
SESSION_OPERATIONS = Counter(
    "mongostore_session_operations_total",
    "Total number of session handler operations",
    labelnames=["operation", "outcome"],
)

SESSION_GC_DELETED = Counter(
    "mongostore_session_gc_deleted_total",
    "Total number of session records removed by garbage collection",
)

# Cache metrics
CACHE_REQUESTS = Counter(
    "mongostore_cache_requests_total",
    "Total number of cache store requests",
    labelnames=["operation", "result"],
)


def setup_metrics(config: MetricsConfig, *, serve: bool = False) -> bool:
    """Initialize metrics at application startup.

    Metrics are registered when defined; this only exposes them over HTTP
    when asked to and when metrics are enabled.

    Returns:
        True if the metrics HTTP server was started
    """
    if not (config.enabled and serve):
        return False
    start_http_server(config.port)
    return True
