"""
Sinks - Pluggable export backends.

Provides a common interface for where records end up:
- otel: OTLP/HTTP export through the OpenTelemetry SDK
- console: Write records to the local log (dry runs, debugging)

Export cadence, batching, and retries belong to the backend. The pipeline
only hands records over and never waits on the network.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from ..config.schemas import CollectorSettings
from ..models import MetricRecord

logger = logging.getLogger(__name__)


class MetricSink(ABC):
    """
    Abstract base class for detection metric backends.

    Each call to `record` is one increment of the detection counter with the
    record's attributes.
    """

    @abstractmethod
    def record(self, record: MetricRecord) -> None:
        """
        Record one detection.

        Args:
            record: Deduplicated detection to count
        """
        pass

    def shutdown(self) -> None:
        """Flush and release backend resources."""


class LogSink(ABC):
    """Abstract base class for event log backends."""

    @abstractmethod
    def emit(self, body: str, attributes: dict[str, Any]) -> None:
        """
        Emit one log record.

        Args:
            body: Human-readable record body
            attributes: Record attributes
        """
        pass

    def shutdown(self) -> None:
        """Flush and release backend resources."""


def create_metric_sink(settings: CollectorSettings, console: bool = False) -> MetricSink:
    """
    Factory function to create the metric sink for the given settings.

    Args:
        settings: Validated plugin settings (endpoint required unless console)
        console: Log records locally instead of exporting

    Returns:
        Configured MetricSink instance

    Raises:
        ValueError: If no endpoint is configured for OTLP export
    """
    if console:
        from .console import ConsoleMetricSink

        return ConsoleMetricSink()

    if not settings.endpoint:
        raise ValueError("OTLP export requires an endpoint")

    from .otel import OtelMetricSink

    return OtelMetricSink(
        endpoint=settings.endpoint,
        export_interval_ms=settings.export_interval,
    )


def create_log_sink(settings: CollectorSettings, console: bool = False) -> LogSink:
    """
    Factory function to create the event log sink for the given settings.

    Raises:
        ValueError: If no endpoint is configured for OTLP export
    """
    if console:
        from .console import ConsoleLogSink

        return ConsoleLogSink()

    if not settings.endpoint:
        raise ValueError("OTLP export requires an endpoint")

    from .otel import OtelLogSink

    return OtelLogSink(
        endpoint=settings.endpoint,
        max_queue_size=settings.batch_size,
        schedule_delay_ms=settings.batch_timeout,
    )


__all__ = [
    "LogSink",
    "MetricSink",
    "create_log_sink",
    "create_metric_sink",
]
