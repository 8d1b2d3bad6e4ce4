"""
Metric record - one externally visible detection.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from ..utils.attributes import (
    ATTR_DETECTION_CLASS,
    ATTR_DETECTION_ID,
    ATTR_DETECTION_SCORE,
    ATTR_DEVICE_ID,
    ATTR_DEVICE_NAME,
    ATTR_DEVICE_TYPE,
)
from ..utils.constants import UNKNOWN


def format_score(score: float) -> str:
    """
    Format a confidence score the way it is exported (2 decimals).

    Exact ties round up (0.125 -> "0.13") to match the host's toFixed(2).
    The float's exact binary value is rounded, so 1.005 stays "1.00".
    """
    return str(Decimal(score).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class MetricRecord:
    """
    A deduplicated detection ready for the metric sink.

    Attributes:
        device_id: Originating device
        device_name: Device name (or "unknown")
        device_type: Device type (or "unknown")
        class_name: Detected object class
        score: Confidence formatted to 2 decimal places
        session_id: Detection session the record came from
        timestamp: Capture time from the session (not exported as an attribute)
    """

    device_id: str
    device_name: str
    device_type: str
    class_name: str
    score: str
    session_id: str
    timestamp: Any = None

    def to_attributes(self) -> dict[str, str]:
        """Return the fixed attribute set attached to the counter increment."""
        return {
            ATTR_DEVICE_ID: self.device_id,
            ATTR_DEVICE_NAME: self.device_name or UNKNOWN,
            ATTR_DEVICE_TYPE: self.device_type or UNKNOWN,
            ATTR_DETECTION_CLASS: self.class_name,
            ATTR_DETECTION_SCORE: self.score,
            ATTR_DETECTION_ID: self.session_id,
        }
