"""
Utility modules for constants and attribute names.
"""

from .attributes import (
    ATTR_DETECTION_CLASS,
    ATTR_DETECTION_ID,
    ATTR_DETECTION_SCORE,
    ATTR_DEVICE_ID,
    ATTR_DEVICE_NAME,
    ATTR_DEVICE_TYPE,
    ATTR_EVENT_DATA,
    ATTR_EVENT_INTERFACE,
    ATTR_EVENT_PROPERTY,
    ATTR_EVENT_TIMESTAMP,
    METRIC_ATTRIBUTE_KEYS,
)
from .constants import (
    DEFAULT_DEVICE_COOLDOWN,
    DEFAULT_EXPORT_INTERVAL,
    DEFAULT_SETTINGS_FILE,
    ENV_ENDPOINT,
    SERVICE_NAME,
    SERVICE_VERSION,
    UNKNOWN,
)

__all__ = [
    "ATTR_DETECTION_CLASS",
    "ATTR_DETECTION_ID",
    "ATTR_DETECTION_SCORE",
    "ATTR_DEVICE_ID",
    "ATTR_DEVICE_NAME",
    "ATTR_DEVICE_TYPE",
    "ATTR_EVENT_DATA",
    "ATTR_EVENT_INTERFACE",
    "ATTR_EVENT_PROPERTY",
    "ATTR_EVENT_TIMESTAMP",
    "DEFAULT_DEVICE_COOLDOWN",
    "DEFAULT_EXPORT_INTERVAL",
    "DEFAULT_SETTINGS_FILE",
    "ENV_ENDPOINT",
    "METRIC_ATTRIBUTE_KEYS",
    "SERVICE_NAME",
    "SERVICE_VERSION",
    "UNKNOWN",
]
