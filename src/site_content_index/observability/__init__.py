"""Logging, metrics and tracing."""

from site_content_index.observability.logging import JsonFormatter, configure_logging
from site_content_index.observability.metrics import (
    CONTENT_LOAD_ERRORS,
    INDEX_DOC_COUNT,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from site_content_index.observability.tracing import TraceContextMiddleware, create_span, init_tracing


__all__ = [
    "CONTENT_LOAD_ERRORS",
    "INDEX_DOC_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "JsonFormatter",
    "TraceContextMiddleware",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "init_tracing",
    "track_latency",
]
