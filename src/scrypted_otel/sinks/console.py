"""
Console Sinks - Write records to the local log instead of exporting.

Used for --console dry runs so a recorded event stream can be checked
without a collector.
"""

import logging
from typing import Any

from ..models import MetricRecord
from . import LogSink, MetricSink

logger = logging.getLogger(__name__)


class ConsoleMetricSink(MetricSink):
    """Logs each detection and keeps a count per (device, class)."""

    def __init__(self):
        self.counts: dict[tuple[str, str], int] = {}

    def record(self, record: MetricRecord) -> None:
        key = (record.device_id, record.class_name)
        self.counts[key] = self.counts.get(key, 0) + 1
        logger.info(
            f"METRIC {record.device_name or record.device_id}: "
            f"{record.class_name} ({record.score}) session={record.session_id}"
        )

    def shutdown(self) -> None:
        total = sum(self.counts.values())
        logger.info(f"Console metric sink recorded {total} detection(s)")
        for (device_id, class_name), count in sorted(self.counts.items()):
            logger.info(f"  {device_id} {class_name}: {count}")


class ConsoleLogSink(LogSink):
    """Logs each forwarded event body."""

    def __init__(self):
        self.emitted = 0

    def emit(self, body: str, attributes: dict[str, Any]) -> None:
        self.emitted += 1
        logger.info(f"LOG {body}")

    def shutdown(self) -> None:
        logger.info(f"Console log sink emitted {self.emitted} record(s)")
