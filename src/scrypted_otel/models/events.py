"""
Host event models - device identity, event details, and detection sessions.

Host payloads arrive as loosely-shaped dicts. These models normalize them
once at the edge so the pipeline never has to guess at missing keys.
"""

import math
from dataclasses import dataclass, field
from typing import Any

from ..utils.constants import DEFAULT_SCORE, UNKNOWN

# Keys the host (and recorded fixtures) use for the detection session id
SESSION_ID_KEYS = ("detectionId", "sessionId", "session_id")


@dataclass(frozen=True)
class DeviceIdentity:
    """
    The device that emitted an event.

    Attributes:
        id: Host device identifier (None if the host could not resolve it)
        name: Human-readable device name
        type: Host device type (Camera, Light, ...)
    """

    id: str | None = None
    name: str | None = None
    type: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "DeviceIdentity":
        if not data:
            return cls()
        device_id = data.get("id")
        return cls(
            id=str(device_id) if device_id not in (None, "") else None,
            name=data.get("name"),
            type=data.get("type"),
        )


@dataclass(frozen=True)
class EventDetails:
    """Metadata the host attaches to every event callback."""

    property: str | None = None
    event_interface: str | None = None
    event_time: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "EventDetails":
        if not data:
            return cls()
        return cls(
            property=data.get("property"),
            event_interface=data.get("eventInterface") or data.get("event_interface"),
            event_time=data.get("eventTime") or data.get("event_time"),
        )


@dataclass(frozen=True)
class Detection:
    """One detected object within a session."""

    class_name: str = UNKNOWN
    score: float = DEFAULT_SCORE

    @classmethod
    def from_dict(cls, data: Any) -> "Detection":
        """Build a detection, falling back to defaults for missing fields."""
        if not isinstance(data, dict):
            return cls()

        class_name = data.get("className", data.get("class_name"))
        if class_name in (None, ""):
            class_name = UNKNOWN

        score = data.get("score")
        try:
            score = float(score) if score is not None else DEFAULT_SCORE
        except (TypeError, ValueError):
            score = DEFAULT_SCORE
        if not math.isfinite(score):
            score = DEFAULT_SCORE

        return cls(class_name=str(class_name), score=score)


def extract_session_id(payload: Any) -> str | None:
    """
    Return the non-empty session identifier carried by a payload, if any.

    Only strings and integers count; containers, floats, and booleans are
    treated as absent.
    """
    if not isinstance(payload, dict):
        return None
    for key in SESSION_ID_KEYS:
        value = payload.get(key)
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            continue
        if value != "":
            return str(value)
    return None


@dataclass
class DetectionSession:
    """
    A batch of detections reported by one device at one moment.

    Attributes:
        session_id: Retention identifier from the detector (None = frame noise)
        device_id: Originating device (None = unresolvable)
        timestamp: Capture time reported by the detector, informational only
        detections: Detections in the order the detector reported them
    """

    session_id: str | None
    device_id: str | None
    timestamp: Any = None
    detections: list[Detection] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any, device_id: str | None) -> "DetectionSession":
        """
        Build a session from a raw host payload.

        A payload without a usable ``detections`` list is a session with zero
        detections, not an error.
        """
        if not isinstance(payload, dict):
            return cls(session_id=None, device_id=device_id)

        raw_detections = payload.get("detections")
        if not isinstance(raw_detections, list):
            raw_detections = []

        return cls(
            session_id=extract_session_id(payload),
            device_id=device_id,
            timestamp=payload.get("timestamp"),
            detections=[Detection.from_dict(d) for d in raw_detections],
        )
