"""Prometheus metrics for search, indexing and content loading.

Each metric is a Prometheus collector mirrored onto an OpenTelemetry
instrument, so the ``/metrics`` scrape and any configured meter provider
see the same values.
"""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_meter_holder: dict[str, Any] = {"meter": None, "provider": None}


def init_metrics(service_name: str = "site-content-index") -> MeterProvider:
    """Install a meter provider once; later calls return the existing one."""
    provider = _meter_holder.get("provider")
    if isinstance(provider, MeterProvider):
        return provider

    provider = MeterProvider(resource=Resource.create({"service.name": service_name}))
    otel_metrics.set_meter_provider(provider)
    _meter_holder["provider"] = provider
    _meter_holder["meter"] = otel_metrics.get_meter(__name__)
    return provider


def _get_meter():
    if _meter_holder.get("meter") is None:
        init_metrics()
    return _meter_holder["meter"]


class _BoundMetric:
    def __init__(self, bridge: MetricBridge, labels: dict[str, str]) -> None:
        self._bridge = bridge
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._bridge.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._bridge.observe(self._labels, value)

    def set(self, value: float) -> None:
        self._bridge.set(self._labels, value)


class MetricBridge:
    """Write to a Prometheus collector and its OTel twin in one call."""

    def __init__(
        self,
        prom_metric: Counter | Histogram | Gauge,
        *,
        otel_name: str,
        otel_description: str,
        otel_kind: str,
    ) -> None:
        self._prom_metric = prom_metric
        self._otel_name = otel_name
        self._otel_description = otel_description
        self._otel_kind = otel_kind
        self._otel_instrument = None
        self._last_values: dict[tuple[tuple[str, str], ...], float] = {}

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _instrument(self):
        if self._otel_instrument is not None:
            return self._otel_instrument
        meter = _get_meter()
        match self._otel_kind:
            case "counter":
                self._otel_instrument = meter.create_counter(self._otel_name, description=self._otel_description)
            case "histogram":
                self._otel_instrument = meter.create_histogram(self._otel_name, description=self._otel_description)
            case "gauge":
                self._otel_instrument = meter.create_up_down_counter(
                    self._otel_name, description=self._otel_description
                )
            case _:
                raise ValueError(f"Unknown metric kind: {self._otel_kind}")
        return self._otel_instrument

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self._prom_metric.labels(**labels).inc(amount)
        self._instrument().add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).observe(value)
        self._instrument().record(value, labels)

    def set(self, labels: dict[str, str], value: float) -> None:
        # OTel has no synchronous gauge here; emit the delta on an up-down counter.
        self._prom_metric.labels(**labels).set(value)
        key = tuple(sorted(labels.items()))
        delta = value - self._last_values.get(key, 0.0)
        if delta:
            self._instrument().add(delta, labels)
        self._last_values[key] = value


SEARCH_LATENCY = MetricBridge(
    Histogram(
        "content_search_latency_seconds",
        "Search query latency",
        ["operation"],
        buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
    ),
    otel_name="content_search_latency_seconds",
    otel_description="Search query latency",
    otel_kind="histogram",
)

SEARCH_REQUESTS = MetricBridge(
    Counter("content_search_requests_total", "Search requests by outcome", ["status"]),
    otel_name="content_search_requests_total",
    otel_description="Search requests by outcome",
    otel_kind="counter",
)

CONTENT_LOAD_ERRORS = MetricBridge(
    Counter("content_load_errors_total", "Content files skipped during load", ["source"]),
    otel_name="content_load_errors_total",
    otel_description="Content files skipped during load",
    otel_kind="counter",
)

INDEX_DOC_COUNT = MetricBridge(
    Gauge("content_index_document_count", "Records in the active search index", ["source"]),
    otel_name="content_index_document_count",
    otel_description="Records in the active search index",
    otel_kind="gauge",
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Observe the wall time of the wrapped block."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
