"""Prometheus metrics for kb-ingest and the telemetry adapter that feeds them.

All metrics use the 'kbingest_' prefix for namespace isolation.
Metric objects are module-level singletons registered once per process.
"""

import logging
import time
from typing import Any

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# --- File processing metrics ---
files_processed_total = Counter(
    "kbingest_files_processed_total",
    "Total files run through text extraction",
    labelnames=["status", "type", "error"],
)

file_processing_duration_ms = Histogram(
    "kbingest_file_processing_duration_ms",
    "Text extraction latency in milliseconds",
    labelnames=["file_type", "status"],
    buckets=(10, 50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000),
)

file_content_length_chars = Histogram(
    "kbingest_file_content_length_chars",
    "Length of extracted text in characters",
    labelnames=["file_type"],
    buckets=(100, 1_000, 10_000, 100_000, 1_000_000, 10_000_000),
)

# --- Tracing ---
span_duration_seconds = Histogram(
    "kbingest_span_duration_seconds",
    "Duration of telemetry spans in seconds",
    labelnames=["span", "error"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

# pipeline metric name -> (metric, label names)
COUNTERS = {
    "files_processed_total": (files_processed_total, ("status", "type", "error")),
}

HISTOGRAMS = {
    "file_processing_duration_ms": (file_processing_duration_ms, ("file_type", "status")),
    "file_content_length_chars": (file_content_length_chars, ("file_type",)),
}


def _label_values(labelnames: tuple[str, ...], labels: dict[str, str] | None) -> dict[str, str]:
    """Fill every declared label, dropping ones the metric does not know."""
    labels = labels or {}
    return {name: str(labels.get(name, "")) for name in labelnames}


class PrometheusSpan:
    """Span whose duration is observed into ``span_duration_seconds``."""

    def __init__(self, name: str, attributes: dict[str, Any] | None = None):
        self.name = name
        self.attributes: dict[str, Any] = dict(attributes or {})
        self._start = time.perf_counter()
        self._ended = False

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def end(self) -> None:
        if self._ended:
            return
        self._ended = True
        duration = time.perf_counter() - self._start
        span_duration_seconds.labels(
            span=self.name,
            error=str(bool(self.attributes.get("error", False))).lower(),
        ).observe(duration)
        logger.debug("span %s ended after %.3fs %s", self.name, duration, self.attributes)


class PrometheusTelemetry:
    """Telemetry port backed by prometheus_client.

    Unknown metric names are logged once and ignored so a new call site
    never breaks extraction.
    """

    def __init__(self):
        self._unknown: set[str] = set()

    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> PrometheusSpan:
        return PrometheusSpan(name, attributes)

    def increment_counter(self, name: str, labels: dict[str, str] | None = None) -> None:
        entry = COUNTERS.get(name)
        if entry is None:
            self._warn_unknown(name)
            return
        metric, labelnames = entry
        metric.labels(**_label_values(labelnames, labels)).inc()

    def record_histogram(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        entry = HISTOGRAMS.get(name)
        if entry is None:
            self._warn_unknown(name)
            return
        metric, labelnames = entry
        metric.labels(**_label_values(labelnames, labels)).observe(value)

    def _warn_unknown(self, name: str) -> None:
        if name not in self._unknown:
            self._unknown.add(name)
            logger.warning("No Prometheus metric registered for %s", name)
