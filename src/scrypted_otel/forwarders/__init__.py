"""
Forwarders for the raw event log variant.
"""

from .event_log import (
    EventLogForwarder,
    build_log_record,
    serialize_event_data,
    should_forward_event,
)

__all__ = [
    "EventLogForwarder",
    "build_log_record",
    "serialize_event_data",
    "should_forward_event",
]
