"""
Event Log Forwarder - every host event as one OTEL log record.

Unlike the detection pipeline there is no deduplication here; the only
policy is an optional allowlist matched against the event interface and
property name.
"""

import json
import logging
import time
from collections.abc import Iterable
from typing import Any

from ..models import DeviceIdentity, EventDetails
from ..sinks import LogSink
from ..utils.attributes import (
    ATTR_DEVICE_ID,
    ATTR_DEVICE_NAME,
    ATTR_DEVICE_TYPE,
    ATTR_EVENT_DATA,
    ATTR_EVENT_INTERFACE,
    ATTR_EVENT_PROPERTY,
    ATTR_EVENT_TIMESTAMP,
)
from ..utils.constants import UNKNOWN

logger = logging.getLogger(__name__)


def should_forward_event(
    filters: Iterable[str],
    event_interface: str | None,
    event_property: str | None,
) -> bool:
    """
    Check an event against the allowlist.

    Matching is case-sensitive substring containment, so "Motion" matches
    the MotionSensor interface. An empty allowlist forwards everything.
    """
    filters = list(filters)
    if not filters:
        return True
    for entry in filters:
        if event_interface and entry in event_interface:
            return True
        if event_property and entry in event_property:
            return True
    return False


def serialize_event_data(data: Any) -> str:
    """JSON-encode event data; values JSON cannot express fall back to str()."""
    try:
        return json.dumps(data, default=str)
    except (TypeError, ValueError):
        return json.dumps(str(data))


def build_log_record(
    device: DeviceIdentity,
    details: EventDetails,
    data: Any,
) -> tuple[str, dict[str, Any]]:
    """
    Build the body and attributes for one host event.

    Returns:
        (body, attributes) tuple
    """
    event_property = details.property or UNKNOWN
    event_interface = details.event_interface or details.property or UNKNOWN
    timestamp = details.event_time or int(time.time() * 1000)

    body = f"Scrypted event: {event_property}"
    attributes = {
        ATTR_EVENT_PROPERTY: event_property,
        ATTR_EVENT_INTERFACE: event_interface,
        ATTR_DEVICE_ID: device.id or UNKNOWN,
        ATTR_DEVICE_NAME: device.name or UNKNOWN,
        ATTR_DEVICE_TYPE: device.type or UNKNOWN,
        ATTR_EVENT_TIMESTAMP: timestamp,
        ATTR_EVENT_DATA: serialize_event_data(data),
    }
    return body, attributes


class EventLogForwarder:
    """
    Forwards host events to a log sink.

    Args:
        sink: Where log records are sent
        filters: Interface/property allowlist (empty = forward all)
    """

    def __init__(self, sink: LogSink, filters: Iterable[str] = ()):
        self.sink = sink
        self.filters = tuple(filters)
        self.forwarded = 0

    def forward(self, device: DeviceIdentity, details: EventDetails, data: Any) -> bool:
        """
        Forward one event if it passes the allowlist.

        Returns:
            True if a record was handed to the sink
        """
        if not should_forward_event(self.filters, details.event_interface, details.property):
            return False

        body, attributes = build_log_record(device, details, data)
        try:
            self.sink.emit(body, attributes)
        except Exception as e:
            logger.error(f"Failed to emit event log: {e}", exc_info=True)
            return False
        self.forwarded += 1
        return True
