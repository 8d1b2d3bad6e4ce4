"""
Collector Plugin - host adapter.

Owns the settings snapshot, the active sink, and either the detection
pipeline (metrics mode) or the event log forwarder (logs mode). The host
calls handle_event() for every device event; everything else is lifecycle:
initialize on enable, rebuild on settings change, clean up on disable.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .config import (
    CollectorSettings,
    build_filter_configuration,
    load_settings,
    parse_event_filter,
    save_settings,
    validate_endpoint,
    validate_settings,
)
from .forwarders import EventLogForwarder
from .models import DeviceIdentity, EventDetails
from .pipeline import DetectionPipeline
from .sinks import LogSink, MetricSink, create_log_sink, create_metric_sink
from .utils.constants import (
    BATCH_SIZE_RANGE,
    BATCH_TIMEOUT_RANGE,
    DEFAULT_SETTINGS_FILE,
    DEVICE_COOLDOWN_RANGE,
    EXPORT_INTERVAL_RANGE,
    OBJECT_DETECTOR_INTERFACE,
)

logger = logging.getLogger(__name__)

# Changing any of these while enabled rebuilds sinks and pipeline
REINIT_KEYS = {
    "mode",
    "event_filter",
    "export_interval",
    "device_cooldown",
    "batch_size",
    "batch_timeout",
}


def resolve_setting_key(key: str) -> str:
    """
    Map a host setting key (camelCase) or field name to the field name.

    Raises:
        ValueError: If the key is not a known setting
    """
    for name, field in CollectorSettings.model_fields.items():
        if key in (name, field.alias):
            return name
    raise ValueError(f"Unknown setting: {key}")


class CollectorPlugin:
    """
    Forwards host device events to an OpenTelemetry collector.

    Args:
        settings_path: YAML file the settings are loaded from and saved to
        settings: Use these settings instead of loading the file
        console: Log records locally instead of exporting over OTLP
        metric_sink_factory: Builds the metric sink (tests inject fakes)
        log_sink_factory: Builds the log sink (tests inject fakes)
    """

    def __init__(
        self,
        settings_path: str | Path = DEFAULT_SETTINGS_FILE,
        settings: CollectorSettings | None = None,
        console: bool = False,
        metric_sink_factory: Callable[..., MetricSink] = create_metric_sink,
        log_sink_factory: Callable[..., LogSink] = create_log_sink,
    ):
        self.settings_path = Path(settings_path)
        self.console = console
        self._metric_sink_factory = metric_sink_factory
        self._log_sink_factory = log_sink_factory

        self._sink: MetricSink | LogSink | None = None
        self.pipeline: DetectionPipeline | None = None
        self.forwarder: EventLogForwarder | None = None

        self.settings = settings if settings is not None else load_settings(self.settings_path)

        if self.settings.enabled and (self.settings.endpoint or self.console):
            self.initialize()

    @property
    def active(self) -> bool:
        return self.pipeline is not None or self.forwarder is not None

    def _disable(self) -> None:
        self.settings = self.settings.model_copy(update={"enabled": False})
        # Console dry runs never write back to the user's config
        if not self.console:
            self.save_settings()

    def save_settings(self) -> None:
        try:
            save_settings(self.settings_path, self.settings)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")

    def initialize(self) -> bool:
        """
        Build sinks and the mode's handler from the current settings.

        Any previous sinks are shut down first. On failure the plugin is
        disabled, and that is persisted unless running in console mode.

        Returns:
            True if the plugin is ready to handle events
        """
        settings = self.settings
        if not self.console:
            if not settings.endpoint:
                logger.error("Cannot initialize: endpoint not configured")
                return False
            try:
                validate_endpoint(settings.endpoint)
            except ValueError as e:
                logger.error(f"Cannot initialize: invalid endpoint ({e})")
                self._disable()
                return False

        try:
            self.cleanup()

            if settings.mode == "logs":
                sink = self._log_sink_factory(settings, console=self.console)
                self._sink = sink
                self.forwarder = EventLogForwarder(
                    sink, parse_event_filter(settings.event_filter)
                )
            else:
                sink = self._metric_sink_factory(settings, console=self.console)
                self._sink = sink
                self.pipeline = DetectionPipeline(build_filter_configuration(settings), sink)

            target = "console" if self.console else settings.endpoint
            logger.info(
                f"OTEL Collector plugin initialized successfully ({settings.mode}). "
                f"Endpoint: {target}"
            )
            return True

        except Exception as e:
            logger.error(f"Failed to initialize OTEL Collector plugin: {e}", exc_info=True)
            self.cleanup()
            self._disable()
            return False

    def cleanup(self) -> None:
        """Drop the active handler and shut down the sink."""
        self.pipeline = None
        self.forwarder = None

        sink, self._sink = self._sink, None
        if sink is not None:
            try:
                sink.shutdown()
            except Exception as e:
                logger.error(f"Failed to shutdown sink: {e}")

    def handle_event(
        self,
        device: DeviceIdentity | dict | None,
        details: EventDetails | dict | None,
        data: Any,
        now: float | None = None,
    ) -> None:
        """
        Host event callback. Never raises.

        Args:
            device: Event source (model or raw host dict)
            details: Event metadata (model or raw host dict)
            data: Raw event payload
            now: Receipt time in seconds (replays pass the recorded time)
        """
        if not self.settings.enabled:
            return

        # Read each handler once so a concurrent reinit can't tear this event
        pipeline = self.pipeline
        forwarder = self.forwarder
        if pipeline is None and forwarder is None:
            return

        try:
            if not isinstance(device, DeviceIdentity):
                device = DeviceIdentity.from_dict(device)
            if not isinstance(details, EventDetails):
                details = EventDetails.from_dict(details)

            if forwarder is not None:
                forwarder.forward(device, details, data)
            elif pipeline is not None and self._is_detection_event(details):
                pipeline.process(device, data, now=now)
        except Exception as e:
            logger.error(f"Failed to handle event: {e}", exc_info=True)

    @staticmethod
    def _is_detection_event(details: EventDetails) -> bool:
        # Replayed payloads may carry no metadata at all
        names = {details.event_interface, details.property} - {None}
        return not names or OBJECT_DETECTOR_INTERFACE in names

    def get_settings(self) -> list[dict[str, Any]]:
        """Describe the settings for the host settings UI."""
        s = self.settings
        return [
            {
                "key": "enabled",
                "title": "Enable OTEL Collector",
                "description": "Enable forwarding Scrypted events to OpenTelemetry Collector",
                "type": "boolean",
                "value": s.enabled,
            },
            {
                "key": "endpoint",
                "title": "OTEL Collector Endpoint",
                "description": "HTTP/HTTPS endpoint for the OpenTelemetry Collector (e.g., http://localhost:4318)",
                "type": "string",
                "placeholder": "http://localhost:4318",
                "value": s.endpoint,
            },
            {
                "key": "mode",
                "title": "Export Mode",
                "description": "logs: every event as a log record; metrics: deduplicated detection counts",
                "type": "string",
                "choices": ["logs", "metrics"],
                "value": s.mode,
            },
            {
                "key": "eventFilter",
                "title": "Event Filter",
                "description": (
                    "Comma-separated list. Metrics mode: detection classes to ignore "
                    "(substring, case-insensitive). Logs mode: event interfaces/properties "
                    "to forward. Empty = no filtering"
                ),
                "type": "string",
                "placeholder": "motion,animal",
                "value": s.event_filter,
            },
            {
                "key": "exportInterval",
                "title": "Export Interval (ms)",
                "description": "How often metrics are exported",
                "type": "number",
                "value": s.export_interval,
                "range": list(EXPORT_INTERVAL_RANGE),
            },
            {
                "key": "deviceCooldown",
                "title": "Device Cooldown (s)",
                "description": "Minimum time between detection metrics from the same device",
                "type": "number",
                "value": s.device_cooldown,
                "range": list(DEVICE_COOLDOWN_RANGE),
            },
            {
                "key": "batchSize",
                "title": "Batch Size",
                "description": "Maximum number of events to batch before sending",
                "type": "number",
                "value": s.batch_size,
                "range": list(BATCH_SIZE_RANGE),
            },
            {
                "key": "batchTimeout",
                "title": "Batch Timeout (ms)",
                "description": "Maximum time to wait before sending a batch",
                "type": "number",
                "value": s.batch_timeout,
                "range": list(BATCH_TIMEOUT_RANGE),
            },
        ]

    def put_setting(self, key: str, value: Any) -> None:
        """
        Change one setting, persist, and reinitialize if needed.

        The new settings are validated as a whole before anything changes.

        Raises:
            ValueError: If the key is unknown
            pydantic.ValidationError: If the value is rejected
        """
        logger.info(f"Setting {key} to {value}")
        name = resolve_setting_key(key)
        old = self.settings

        # An empty endpoint keeps the current one
        if name == "endpoint" and not value:
            return

        data = old.model_dump()
        data[name] = value
        new = validate_settings(data)

        self.settings = new
        self.save_settings()

        needs_reinit = new.enabled and (
            not old.enabled or new.endpoint != old.endpoint or name in REINIT_KEYS
        )
        if needs_reinit:
            self.initialize()
        elif old.enabled and not new.enabled:
            self.cleanup()
            logger.info("OTEL Collector plugin disabled")
