"""Prometheus-compatible metrics for the application context.

Metrics are kept in a module-level registry rather than the prometheus
default one so tests and embedding applications do not collide with
other collectors.

Usage:
    from appctx.observability.metrics import increment_counter, set_gauge

    increment_counter("context_events_total", labels={"event": "refreshed"})
    set_gauge("components_registered", 7)

    with track_duration("context_refresh_seconds"):
        context.refresh()
"""

import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


# Global registry for metrics
_registry = CollectorRegistry()

components_registered = Gauge(
    "appctx_components_registered",
    "Number of components in the active application context",
    registry=_registry,
)

context_refresh_seconds = Histogram(
    "appctx_context_refresh_seconds",
    "Time spent instantiating all component definitions",
    registry=_registry,
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, float("inf")),
)

context_events_total = Counter(
    "appctx_context_events_total",
    "Application context lifecycle events",
    ["event"],
    registry=_registry,
)

_METRICS = {
    "components_registered": components_registered,
    "context_refresh_seconds": context_refresh_seconds,
    "context_events_total": context_events_total,
}


def _lookup(name: str):
    try:
        return _METRICS[name]
    except KeyError:
        raise ValueError(f"Unknown metric: {name}") from None


def _labelled(metric, labels: Optional[Dict[str, str]]):
    return metric.labels(**labels) if labels else metric


def increment_counter(
    name: str, value: float = 1.0, labels: Optional[Dict[str, str]] = None
) -> None:
    """Increment a counter metric.

    Raises:
        ValueError: If the metric name is unknown
    """
    _labelled(_lookup(name), labels).inc(value)


def set_gauge(
    name: str, value: float, labels: Optional[Dict[str, str]] = None
) -> None:
    """Set a gauge metric to ``value``."""
    _labelled(_lookup(name), labels).set(value)


def record_histogram(
    name: str, value: float, labels: Optional[Dict[str, str]] = None
) -> None:
    """Record an observation on a histogram metric."""
    _labelled(_lookup(name), labels).observe(value)


@contextmanager
def track_duration(
    name: str, labels: Optional[Dict[str, str]] = None
) -> Iterator[None]:
    """Record the wall-clock duration of the ``with`` block on a histogram."""
    start = time.perf_counter()
    try:
        yield
    finally:
        record_histogram(name, time.perf_counter() - start, labels)


def get_metrics_registry() -> CollectorRegistry:
    """Return the registry holding all appctx metrics."""
    return _registry


def get_metrics_output() -> bytes:
    """Render all metrics in the Prometheus text exposition format."""
    return generate_latest(_registry)


def get_metrics_content_type() -> str:
    """Content type to serve alongside :func:`get_metrics_output`."""
    return CONTENT_TYPE_LATEST


__all__ = [
    "increment_counter",
    "set_gauge",
    "record_histogram",
    "track_duration",
    "get_metrics_registry",
    "get_metrics_output",
    "get_metrics_content_type",
]
