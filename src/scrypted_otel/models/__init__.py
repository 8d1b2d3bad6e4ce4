"""
Data models shared by the pipeline, forwarders, and sinks.
"""

from .events import (
    Detection,
    DetectionSession,
    DeviceIdentity,
    EventDetails,
    extract_session_id,
)
from .metrics import MetricRecord, format_score

__all__ = [
    # Host event models
    "Detection",
    "DetectionSession",
    "DeviceIdentity",
    "EventDetails",
    # Metric output
    "MetricRecord",
    "extract_session_id",
    "format_score",
]
