"""
OpenTelemetry Sinks - OTLP/HTTP export of detection metrics and event logs.

Both sinks own their provider. Export happens on the SDK's background
reader/processor threads, so record()/emit() only enqueue.
"""

import logging
import time
from typing import Any
from urllib.parse import urlparse, urlunparse

from opentelemetry._logs import LogRecord, SeverityNumber
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk._logs import LoggerProvider, LogRecordProcessor
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from ..models import MetricRecord
from ..utils.constants import (
    DETECTION_COUNTER_DESCRIPTION,
    DETECTION_COUNTER_NAME,
    DETECTION_COUNTER_UNIT,
    LOGGER_SCOPE,
    METER_SCOPE,
    SERVICE_NAME,
    SERVICE_VERSION,
)
from . import LogSink, MetricSink

logger = logging.getLogger(__name__)

SIGNAL_PATHS = {"logs": "/v1/logs", "metrics": "/v1/metrics"}


def signal_endpoint(endpoint: str, signal: str) -> str:
    """
    Resolve the OTLP/HTTP URL for one signal.

    A bare collector URL gets the standard signal path appended; a URL that
    already ends in another signal's path is pointed at this one.

    Examples:
        http://localhost:4318          -> http://localhost:4318/v1/metrics
        http://localhost:4318/v1/logs  -> http://localhost:4318/v1/metrics
        http://collector/custom/path   -> unchanged
    """
    parsed = urlparse(endpoint)
    path = parsed.path.rstrip("/")
    for known_path in SIGNAL_PATHS.values():
        if path.endswith(known_path):
            path = path[: -len(known_path)]
            break
    else:
        if path:
            return endpoint
    return urlunparse(parsed._replace(path=path + SIGNAL_PATHS[signal]))


def build_resource() -> Resource:
    """Resource attributes identifying this exporter."""
    return Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": SERVICE_VERSION,
        }
    )


class OtelMetricSink(MetricSink):
    """
    Counts detections on an OTEL monotonic counter.

    Args:
        endpoint: Collector URL (ignored when a reader is supplied)
        export_interval_ms: How often the periodic reader exports
        reader: Pre-built metric reader (tests use InMemoryMetricReader)
    """

    def __init__(
        self,
        endpoint: str | None = None,
        export_interval_ms: int = 5000,
        reader: MetricReader | None = None,
    ):
        if reader is None:
            if not endpoint:
                raise ValueError("endpoint is required without an explicit reader")
            url = signal_endpoint(endpoint, "metrics")
            reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=url),
                export_interval_millis=export_interval_ms,
            )
            logger.debug(f"Metric exporter -> {url} every {export_interval_ms}ms")

        self._provider = MeterProvider(resource=build_resource(), metric_readers=[reader])
        meter = self._provider.get_meter(METER_SCOPE, SERVICE_VERSION)
        self._counter = meter.create_counter(
            DETECTION_COUNTER_NAME,
            unit=DETECTION_COUNTER_UNIT,
            description=DETECTION_COUNTER_DESCRIPTION,
        )

    def record(self, record: MetricRecord) -> None:
        self._counter.add(1, attributes=record.to_attributes())

    def shutdown(self) -> None:
        self._provider.shutdown()


class OtelLogSink(LogSink):
    """
    Emits host events as OTEL log records through a batching processor.

    Args:
        endpoint: Collector URL (ignored when a processor is supplied)
        max_queue_size: Maximum records buffered before the oldest are dropped
        schedule_delay_ms: Maximum time between batch exports
        processor: Pre-built record processor (tests use an in-memory exporter)
    """

    def __init__(
        self,
        endpoint: str | None = None,
        max_queue_size: int = 100,
        schedule_delay_ms: int = 5000,
        processor: LogRecordProcessor | None = None,
    ):
        if processor is None:
            if not endpoint:
                raise ValueError("endpoint is required without an explicit processor")
            url = signal_endpoint(endpoint, "logs")
            # max_export_batch_size may not exceed max_queue_size
            processor = BatchLogRecordProcessor(
                OTLPLogExporter(endpoint=url),
                schedule_delay_millis=schedule_delay_ms,
                max_queue_size=max_queue_size,
                max_export_batch_size=min(max_queue_size, 512),
            )
            logger.debug(f"Log exporter -> {url}")

        self._provider = LoggerProvider(resource=build_resource())
        self._provider.add_log_record_processor(processor)
        self._logger = self._provider.get_logger(LOGGER_SCOPE, SERVICE_VERSION)

    def emit(self, body: str, attributes: dict[str, Any]) -> None:
        self._logger.emit(
            LogRecord(
                timestamp=time.time_ns(),
                severity_text="INFO",
                severity_number=SeverityNumber.INFO,
                body=body,
                attributes=attributes,
            )
        )

    def shutdown(self) -> None:
        self._provider.shutdown()
