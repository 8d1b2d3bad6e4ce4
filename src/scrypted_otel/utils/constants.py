"""
Constants used throughout the OTEL collector plugin
"""

# Service identity reported on the OTEL resource
SERVICE_NAME = "scrypted-otel-collector"
SERVICE_VERSION = "0.1.0"

# Instrumentation scope names
LOGGER_SCOPE = "scrypted-events"
METER_SCOPE = "scrypted-detections"

# Detection counter
DETECTION_COUNTER_NAME = "scrypted.detections"
DETECTION_COUNTER_UNIT = "{detection}"
DETECTION_COUNTER_DESCRIPTION = "Deduplicated object detections per device"

# Payload defaults
UNKNOWN = "unknown"
DEFAULT_SCORE = 0.0

# Settings defaults and ranges
DEFAULT_DEVICE_COOLDOWN = 10  # seconds
DEVICE_COOLDOWN_RANGE = (1, 300)
DEFAULT_EXPORT_INTERVAL = 5000  # ms
EXPORT_INTERVAL_RANGE = (1000, 60000)
DEFAULT_BATCH_SIZE = 100
BATCH_SIZE_RANGE = (1, 1000)
DEFAULT_BATCH_TIMEOUT = 5000  # ms
BATCH_TIMEOUT_RANGE = (100, 30000)

# Host interface that carries object detections
OBJECT_DETECTOR_INTERFACE = "ObjectDetector"

# Environment variables
ENV_ENDPOINT = "OTEL_COLLECTOR_ENDPOINT"

# Default settings file
DEFAULT_SETTINGS_FILE = "settings.yaml"
