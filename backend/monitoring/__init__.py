"""Monitoring and observability for kb-ingest (telemetry port + Prometheus)."""

from .metrics import (
    PrometheusTelemetry,
    file_content_length_chars,
    file_processing_duration_ms,
    files_processed_total,
    span_duration_seconds,
)
from .telemetry import NoopTelemetry, Span, Telemetry, get_telemetry, set_telemetry

__all__ = [
    "Telemetry",
    "Span",
    "NoopTelemetry",
    "PrometheusTelemetry",
    "get_telemetry",
    "set_telemetry",
    "files_processed_total",
    "file_processing_duration_ms",
    "file_content_length_chars",
    "span_duration_seconds",
]
