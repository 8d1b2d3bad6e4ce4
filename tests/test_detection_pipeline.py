"""
Tests for the composed detection pipeline
"""

import threading
import unittest

from scrypted_otel.config import FilterConfiguration
from scrypted_otel.models import DeviceIdentity
from scrypted_otel.pipeline import CooldownState, DetectionPipeline, PipelineStats
from scrypted_otel.sinks import MetricSink


class RecordingSink(MetricSink):
    """Keeps every record it is handed."""

    def __init__(self):
        self.records = []

    def record(self, record):
        self.records.append(record)


class FailingSink(MetricSink):
    """Raises on every record, like a broken exporter."""

    def __init__(self):
        self.attempts = 0

    def record(self, record):
        self.attempts += 1
        raise RuntimeError("exporter down")


DEVICE = DeviceIdentity(id="d1", name="Driveway", type="Camera")


def session(session_id, *detections, **extra):
    payload = {"detections": [{"className": c, "score": s} for c, s in detections]}
    if session_id is not None:
        payload["detectionId"] = session_id
    payload.update(extra)
    return payload


class TestDetectionPipeline(unittest.TestCase):
    """Test classifier, gate, filter, and dedup composed together."""

    def make_pipeline(self, denylist=(), cooldown=10, sink=None):
        self.sink = sink if sink is not None else RecordingSink()
        config = FilterConfiguration(denylist=denylist, cooldown_seconds=cooldown)
        return DetectionPipeline(config, self.sink)

    def test_denylisted_class_dropped(self):
        """person survives, motion is filtered."""
        pipeline = self.make_pipeline(denylist=("motion",))

        records = pipeline.process(
            DEVICE, session("s1", ("person", 0.92), ("motion", 1.0)), now=0.0
        )

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].class_name, "person")
        self.assertEqual(records[0].score, "0.92")
        self.assertEqual(records[0].session_id, "s1")
        self.assertEqual(self.sink.records, records)

    def test_duplicate_classes_first_wins(self):
        """Three vehicles produce one metric with the first score."""
        pipeline = self.make_pipeline()

        records = pipeline.process(
            DEVICE,
            session("s2", ("vehicle", 0.83), ("vehicle", 0.89), ("vehicle", 0.94)),
            now=0.0,
        )

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].class_name, "vehicle")
        self.assertEqual(records[0].score, "0.83")

    def test_cooldown_suppresses_session(self):
        pipeline = self.make_pipeline(cooldown=10)
        pipeline.process(DEVICE, session("s1", ("person", 0.9)), now=0.0)

        records = pipeline.process(DEVICE, session("s2", ("car", 0.9)), now=7.0)

        self.assertEqual(records, [])
        self.assertEqual(len(self.sink.records), 1)
        self.assertEqual(pipeline.remaining_cooldown("d1", now=7.0), 3)
        self.assertEqual(pipeline.state.last_emission("d1"), 0.0)

    def test_suppressed_session_does_not_extend_window(self):
        pipeline = self.make_pipeline(cooldown=10)
        pipeline.process(DEVICE, session("s1", ("person", 0.9)), now=0.0)
        pipeline.process(DEVICE, session("s2", ("person", 0.9)), now=9.0)

        records = pipeline.process(DEVICE, session("s3", ("person", 0.9)), now=10.0)

        self.assertEqual(len(records), 1)
        self.assertEqual(pipeline.state.last_emission("d1"), 10.0)

    def test_missing_session_id_is_noop(self):
        pipeline = self.make_pipeline()

        records = pipeline.process(DEVICE, session(None, ("person", 0.9)), now=0.0)

        self.assertEqual(records, [])
        self.assertEqual(len(pipeline.state), 0)
        self.assertEqual(pipeline.stats.dropped_noise, 1)

    def test_empty_detections_keep_cooldown_token(self):
        pipeline = self.make_pipeline()

        self.assertEqual(pipeline.process(DEVICE, session("s1"), now=0.0), [])
        self.assertNotIn("d1", pipeline.state)

        records = pipeline.process(DEVICE, session("s2", ("person", 0.5)), now=1.0)
        self.assertEqual(len(records), 1)

    def test_missing_detections_array(self):
        pipeline = self.make_pipeline()

        records = pipeline.process(DEVICE, {"detectionId": "s1"}, now=0.0)

        self.assertEqual(records, [])
        self.assertNotIn("d1", pipeline.state)

    def test_all_filtered_does_not_consume_cooldown(self):
        """An all-noise session must not block a real one moments later."""
        pipeline = self.make_pipeline(denylist=("motion",))

        first = pipeline.process(DEVICE, session("s1", ("motion", 1.0)), now=0.0)
        second = pipeline.process(DEVICE, session("s1", ("motion", 1.0)), now=0.5)
        third = pipeline.process(DEVICE, session("s2", ("person", 0.8)), now=1.0)

        self.assertEqual(first, [])
        self.assertEqual(second, [])
        self.assertEqual(len(third), 1)
        self.assertEqual(pipeline.state.last_emission("d1"), 1.0)

    def test_denylist_ignores_score(self):
        pipeline = self.make_pipeline(denylist=("package",))

        records = pipeline.process(
            DEVICE, session("s1", ("Package", 0.99), ("package_box", 1.0)), now=0.0
        )

        self.assertEqual(records, [])

    def test_filtered_duplicate_does_not_block_class(self):
        """Dedup only counts detections that survived the filter."""
        pipeline = self.make_pipeline(denylist=("motion",))

        records = pipeline.process(
            DEVICE,
            session("s1", ("person", 0.7), ("motion", 1.0), ("person", 0.9), ("car", 0.4)),
            now=0.0,
        )

        self.assertEqual([(r.class_name, r.score) for r in records], [("person", "0.70"), ("car", "0.40")])
        self.assertEqual(pipeline.stats.filtered, 1)
        self.assertEqual(pipeline.stats.duplicates, 1)

    def test_unresolvable_device_dropped(self):
        pipeline = self.make_pipeline()

        records = pipeline.process(DeviceIdentity(), session("s1", ("person", 0.9)), now=0.0)

        self.assertEqual(records, [])
        self.assertEqual(pipeline.stats.dropped_no_device, 1)

    def test_defaults_for_malformed_detection(self):
        pipeline = self.make_pipeline()

        records = pipeline.process(DEVICE, {"detectionId": "s1", "detections": [{}]}, now=0.0)

        self.assertEqual(records[0].class_name, "unknown")
        self.assertEqual(records[0].score, "0.00")

    def test_device_metadata_carried(self):
        pipeline = self.make_pipeline()
        device = DeviceIdentity(id="d9")

        records = pipeline.process(
            device, session("s1", ("person", 0.9), timestamp=1234), now=0.0
        )

        self.assertEqual(records[0].device_name, "unknown")
        self.assertEqual(records[0].device_type, "unknown")
        self.assertEqual(records[0].timestamp, 1234)

    def test_sink_failure_contained(self):
        """A failing sink never raises and still counts as emitted."""
        sink = FailingSink()
        pipeline = self.make_pipeline(sink=sink)

        records = pipeline.process(DEVICE, session("s1", ("person", 0.9), ("car", 0.8)), now=0.0)

        self.assertEqual(len(records), 2)
        self.assertEqual(sink.attempts, 2)
        self.assertEqual(pipeline.stats.sink_errors, 2)
        self.assertEqual(pipeline.state.last_emission("d1"), 0.0)

    def test_clock_used_without_now(self):
        sink = RecordingSink()
        pipeline = DetectionPipeline(
            FilterConfiguration(cooldown_seconds=10), sink, clock=lambda: 500.0
        )

        pipeline.process(DEVICE, session("s1", ("person", 0.9)))

        self.assertEqual(pipeline.state.last_emission("d1"), 500.0)

    def test_injected_state_shared(self):
        state = CooldownState()
        state.mark_emitted("d1", 0.0)
        pipeline = DetectionPipeline(
            FilterConfiguration(cooldown_seconds=10), RecordingSink(), state=state
        )

        self.assertEqual(pipeline.process(DEVICE, session("s1", ("person", 0.9)), now=5.0), [])

    def test_devices_independent(self):
        pipeline = self.make_pipeline()
        pipeline.process(DEVICE, session("s1", ("person", 0.9)), now=0.0)

        other = DeviceIdentity(id="d2", name="Backyard", type="Camera")
        records = pipeline.process(other, session("s2", ("person", 0.9)), now=1.0)

        self.assertEqual(len(records), 1)

    def test_concurrent_sessions_same_device(self):
        """Only one of several simultaneous sessions passes the gate."""
        pipeline = self.make_pipeline()
        barrier = threading.Barrier(8)
        results = []
        lock = threading.Lock()

        def worker(i):
            barrier.wait()
            records = pipeline.process(DEVICE, session(f"s{i}", ("person", 0.9)), now=100.0)
            with lock:
                results.append(len(records))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(sum(results), 1)
        self.assertEqual(len(self.sink.records), 1)


class TestPipelineStats(unittest.TestCase):
    """Test outcome counters under concurrent devices."""

    def test_counts_exact_across_devices(self):
        sink = RecordingSink()
        pipeline = DetectionPipeline(FilterConfiguration(denylist=("motion",)), sink)
        devices = 16
        rounds = 50
        barrier = threading.Barrier(devices)

        def worker(i):
            device = DeviceIdentity(id=f"d{i}")
            barrier.wait()
            for n in range(rounds):
                pipeline.process(device, session(None, ("person", 0.9)), now=float(n))
                pipeline.process(device, session(f"s{i}-{n}", ("motion", 1.0)), now=float(n))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(devices)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stats = pipeline.stats.as_dict()
        self.assertEqual(stats["received"], devices * rounds * 2)
        self.assertEqual(stats["dropped_noise"], devices * rounds)
        self.assertEqual(stats["filtered"], devices * rounds)
        self.assertEqual(stats["emitted"], 0)

    def test_as_dict_excludes_lock(self):
        self.assertNotIn("_lock", PipelineStats().as_dict())


if __name__ == "__main__":
    unittest.main()
