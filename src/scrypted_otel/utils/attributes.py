"""
Attribute keys shared by the log and metric exports.

Collector-side dashboards key on these names, so they are fixed.
"""

# Device attributes (both variants)
ATTR_DEVICE_ID = "scrypted.device.id"
ATTR_DEVICE_NAME = "scrypted.device.name"
ATTR_DEVICE_TYPE = "scrypted.device.type"

# Event log attributes
ATTR_EVENT_PROPERTY = "scrypted.event.property"
ATTR_EVENT_INTERFACE = "scrypted.event.interface"
ATTR_EVENT_TIMESTAMP = "scrypted.event.timestamp"
ATTR_EVENT_DATA = "scrypted.event.data"

# Detection metric attributes
ATTR_DETECTION_CLASS = "scrypted.detection.class"
ATTR_DETECTION_SCORE = "scrypted.detection.score"
ATTR_DETECTION_ID = "scrypted.detection.id"

METRIC_ATTRIBUTE_KEYS = (
    ATTR_DEVICE_ID,
    ATTR_DEVICE_NAME,
    ATTR_DEVICE_TYPE,
    ATTR_DETECTION_CLASS,
    ATTR_DETECTION_SCORE,
    ATTR_DETECTION_ID,
)
