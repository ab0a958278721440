"""Observability for appctx.

Components:
    - logging: Structured logging with structlog
    - metrics: Prometheus metrics for the application context lifecycle

Usage:
    from appctx.observability import get_logger, set_gauge

    logger = get_logger(__name__)
    logger.info("context_refreshed", components=7)

    set_gauge("components_registered", 7)
"""

from appctx.observability.logging import (
    configure_logging,
    get_logger,
    set_correlation_id,
)
from appctx.observability.metrics import (
    get_metrics_registry,
    increment_counter,
    record_histogram,
    set_gauge,
    track_duration,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "set_correlation_id",
    "increment_counter",
    "record_histogram",
    "set_gauge",
    "track_duration",
    "get_metrics_registry",
]
