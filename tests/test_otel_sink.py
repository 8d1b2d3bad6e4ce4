"""
Tests for the OpenTelemetry sinks
"""

import unittest

from opentelemetry.sdk._logs.export import InMemoryLogRecordExporter, SimpleLogRecordProcessor
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from scrypted_otel.models import MetricRecord
from scrypted_otel.sinks.otel import OtelLogSink, OtelMetricSink, signal_endpoint


def make_record(class_name="person", session_id="s1"):
    return MetricRecord(
        device_id="d1",
        device_name="Driveway",
        device_type="Camera",
        class_name=class_name,
        score="0.92",
        session_id=session_id,
    )


class TestSignalEndpoint(unittest.TestCase):
    """Test OTLP signal path resolution."""

    def test_bare_endpoint(self):
        self.assertEqual(
            signal_endpoint("http://localhost:4318", "metrics"),
            "http://localhost:4318/v1/metrics",
        )
        self.assertEqual(
            signal_endpoint("http://localhost:4318/", "logs"),
            "http://localhost:4318/v1/logs",
        )

    def test_swaps_signal_path(self):
        self.assertEqual(
            signal_endpoint("http://localhost:4318/v1/logs", "metrics"),
            "http://localhost:4318/v1/metrics",
        )

    def test_custom_path_kept(self):
        self.assertEqual(
            signal_endpoint("https://collector/ingest", "metrics"),
            "https://collector/ingest",
        )


class TestOtelMetricSink(unittest.TestCase):
    """Test counter increments through the SDK."""

    def setUp(self):
        self.reader = InMemoryMetricReader()
        self.sink = OtelMetricSink(reader=self.reader)

    def tearDown(self):
        self.sink.shutdown()

    def data_points(self):
        data = self.reader.get_metrics_data()
        return [
            point
            for resource_metrics in data.resource_metrics
            for scope_metrics in resource_metrics.scope_metrics
            for metric in scope_metrics.metrics
            if metric.name == "scrypted.detections"
            for point in metric.data.data_points
        ]

    def test_counter_attributes(self):
        record = make_record()
        self.sink.record(record)

        points = self.data_points()

        self.assertEqual(len(points), 1)
        self.assertEqual(points[0].value, 1)
        self.assertEqual(dict(points[0].attributes), record.to_attributes())

    def test_increments_by_attribute_set(self):
        self.sink.record(make_record("person", "s1"))
        self.sink.record(make_record("person", "s1"))
        self.sink.record(make_record("car", "s2"))

        values = sorted(p.value for p in self.data_points())

        self.assertEqual(values, [1, 2])

    def test_service_resource(self):
        self.sink.record(make_record())

        data = self.reader.get_metrics_data()
        resource = data.resource_metrics[0].resource

        self.assertEqual(resource.attributes["service.name"], "scrypted-otel-collector")

    def test_requires_endpoint_or_reader(self):
        with self.assertRaises(ValueError):
            OtelMetricSink()


class TestOtelLogSink(unittest.TestCase):
    """Test log record emission through the SDK."""

    def test_emit_body_and_attributes(self):
        exporter = InMemoryLogRecordExporter()
        sink = OtelLogSink(processor=SimpleLogRecordProcessor(exporter))

        sink.emit("Scrypted event: on", {"scrypted.device.id": "7"})

        finished = exporter.get_finished_logs()
        self.assertEqual(len(finished), 1)
        record = finished[0].log_record
        self.assertEqual(record.body, "Scrypted event: on")
        self.assertEqual(dict(record.attributes), {"scrypted.device.id": "7"})
        self.assertEqual(record.severity_text, "INFO")
        sink.shutdown()

    def test_small_queue_builds(self):
        """A queue smaller than the default export batch size is accepted."""
        for size in (1, 50, 100):
            sink = OtelLogSink("http://localhost:4318", max_queue_size=size)
            sink.shutdown()

    def test_requires_endpoint_or_processor(self):
        with self.assertRaises(ValueError):
            OtelLogSink()


if __name__ == "__main__":
    unittest.main()
