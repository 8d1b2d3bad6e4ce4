"""
Scrypted OTEL Collector

Forwards device events from a Scrypted host to an OpenTelemetry collector,
either as raw event logs or as deduplicated object-detection metrics.

Package structure:
  pipeline/   - Detection classifier, cooldown gate, class filter, dedup
  forwarders/ - Raw event log forwarding
  sinks/      - OTLP and console export backends
  config/     - Settings loading and validation
  models/     - Host event and metric record models
  utils/      - Constants and attribute names
"""

__version__ = "0.1.0"

# Configuration
from .config import (
    CollectorSettings,
    FilterConfiguration,
    SettingsError,
    load_settings,
)
from .models import Detection, DetectionSession, DeviceIdentity, EventDetails, MetricRecord

# Pipeline
from .pipeline import CooldownState, DetectionPipeline
from .plugin import CollectorPlugin

__all__ = [
    # Host adapter
    "CollectorPlugin",
    # Config
    "CollectorSettings",
    "CooldownState",
    # Models
    "Detection",
    "DetectionPipeline",
    "DetectionSession",
    "DeviceIdentity",
    "EventDetails",
    "FilterConfiguration",
    "MetricRecord",
    "SettingsError",
    "load_settings",
]
