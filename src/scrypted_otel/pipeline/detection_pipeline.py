"""
Detection Pipeline

Turns a noisy stream of per-frame detection events into at most one metric
per object class per session, and at most one emitting session per device
per cooldown window.

Per event:
    received -> classified (accept/drop) -> cooldown-checked (pass/suppress)
      -> per detection: class-filtered (skip/pass) -> dedup-checked (skip/emit)
      -> cooldown updated if anything was emitted

There is no retry and no buffering: a dropped or suppressed session is gone.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from typing import Any

from ..config.schemas import FilterConfiguration
from ..models import DetectionSession, DeviceIdentity, MetricRecord, format_score
from ..sinks import MetricSink
from ..utils.constants import UNKNOWN
from .class_filter import should_skip_class
from .classifier import classify_event
from .cooldown import CooldownGate, CooldownState
from .dedup import SessionDeduplicator

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    """Running counts of where events ended up. Shared by all devices."""

    received: int = 0
    dropped_noise: int = 0
    dropped_no_device: int = 0
    suppressed_cooldown: int = 0
    filtered: int = 0
    duplicates: int = 0
    emitted: int = 0
    sink_errors: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def increment(self, name: str) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + 1)

    def as_dict(self) -> dict[str, int]:
        with self._lock:
            return {
                f.name: getattr(self, f.name)
                for f in fields(self)
                if not f.name.startswith("_")
            }


class DetectionPipeline:
    """
    Composes classifier, cooldown gate, class filter, and deduplicator.

    One instance corresponds to one settings snapshot. Reconfiguring means
    building a new pipeline, which also discards the cooldown state.

    Args:
        config: Filter snapshot read for every session
        sink: Where surviving records are sent
        state: Cooldown state (a fresh one is created if omitted)
        clock: Wall-clock source in seconds, used when process() gets no `now`
    """

    def __init__(
        self,
        config: FilterConfiguration,
        sink: MetricSink,
        state: CooldownState | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.sink = sink
        self.state = state if state is not None else CooldownState()
        self.gate = CooldownGate(self.state, config.cooldown_seconds)
        self.clock = clock
        self.stats = PipelineStats()

    def process(
        self,
        device: DeviceIdentity,
        payload: Any,
        now: float | None = None,
    ) -> list[MetricRecord]:
        """
        Run one raw host event through the pipeline.

        Never raises: sink failures are logged and the event is considered
        handled.

        Args:
            device: Event source identity
            payload: Raw event data (expected to be a detection session)
            now: Receipt time in seconds (defaults to the clock)

        Returns:
            Records handed to the sink for this event
        """
        self.stats.increment("received")

        if not classify_event(payload):
            self.stats.increment("dropped_noise")
            return []

        if not device.id:
            logger.debug("Dropping detection session from unresolvable device")
            self.stats.increment("dropped_no_device")
            return []

        session = DetectionSession.from_payload(payload, device.id)
        if now is None:
            now = self.clock()
        return self.process_session(session, device, now)

    def process_session(
        self,
        session: DetectionSession,
        device: DeviceIdentity,
        now: float,
    ) -> list[MetricRecord]:
        """Gate, filter, deduplicate, and emit one classified session."""
        device_id = session.device_id
        if not session.session_id or not device_id:
            return []

        with self.gate.hold(device_id):
            if not self.gate.check(device_id, now):
                self.stats.increment("suppressed_cooldown")
                return []

            records = self._select(session, device)
            for record in records:
                self._emit(record)

            if records:
                self.gate.record_emission(device_id, now)
                logger.info(
                    f"Emitted {len(records)} detection(s) for {device.name or device_id}: "
                    f"{', '.join(r.class_name for r in records)}"
                )

        return records

    def _select(
        self, session: DetectionSession, device: DeviceIdentity
    ) -> list[MetricRecord]:
        dedup = SessionDeduplicator()
        records = []
        for detection in session.detections:
            if should_skip_class(detection.class_name, self.config.denylist):
                logger.debug(f"Filtered class: {detection.class_name}")
                self.stats.increment("filtered")
                continue
            if not dedup.should_emit(detection.class_name):
                self.stats.increment("duplicates")
                continue
            records.append(
                MetricRecord(
                    device_id=session.device_id,
                    device_name=device.name or UNKNOWN,
                    device_type=device.type or UNKNOWN,
                    class_name=detection.class_name,
                    score=format_score(detection.score),
                    session_id=session.session_id,
                    timestamp=session.timestamp,
                )
            )
        return records

    def _emit(self, record: MetricRecord) -> None:
        # An attempted emission counts for cooldown even if the sink fails
        self.stats.increment("emitted")
        try:
            self.sink.record(record)
        except Exception as e:
            self.stats.increment("sink_errors")
            logger.error(f"Failed to record detection metric: {e}", exc_info=True)

    def remaining_cooldown(self, device_id: str, now: float | None = None) -> int:
        """Whole seconds before the device may emit again."""
        return self.gate.remaining(device_id, self.clock() if now is None else now)
