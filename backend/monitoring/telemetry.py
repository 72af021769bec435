"""Telemetry port used by the ingestion pipeline.

The pipeline only talks to the ``Telemetry`` protocol. The default
implementation does nothing; a process can install a real one with
``set_telemetry`` or pass one explicitly to the entry points.
"""

from __future__ import annotations

from typing import Any, Protocol


class Span(Protocol):
    def set_attribute(self, key: str, value: Any) -> None: ...

    def end(self) -> None: ...


class Telemetry(Protocol):
    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> Span: ...

    def increment_counter(self, name: str, labels: dict[str, str] | None = None) -> None: ...

    def record_histogram(self, name: str, value: float, labels: dict[str, str] | None = None) -> None: ...


class NoopSpan:
    """Span that records nothing."""

    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def end(self) -> None:
        pass


class NoopTelemetry:
    """Default telemetry: every call is a no-op."""

    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> Span:
        return NoopSpan()

    def increment_counter(self, name: str, labels: dict[str, str] | None = None) -> None:
        pass

    def record_histogram(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        pass


_telemetry: Telemetry = NoopTelemetry()


def set_telemetry(impl: Telemetry | None) -> None:
    """Install *impl* process-wide; ``None`` restores the no-op default."""
    global _telemetry
    _telemetry = impl if impl is not None else NoopTelemetry()


def get_telemetry() -> Telemetry:
    return _telemetry
