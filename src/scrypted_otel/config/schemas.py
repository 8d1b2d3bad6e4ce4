"""
Pydantic schemas for plugin settings.

Keys use the host's camelCase setting names as aliases so the same model
validates both the YAML settings file and individual put_setting() calls.
"""

from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.constants import (
    BATCH_SIZE_RANGE,
    BATCH_TIMEOUT_RANGE,
    DEFAULT_BATCH_SIZE,
    DEFAULT_BATCH_TIMEOUT,
    DEFAULT_DEVICE_COOLDOWN,
    DEFAULT_EXPORT_INTERVAL,
    DEVICE_COOLDOWN_RANGE,
    EXPORT_INTERVAL_RANGE,
)

ALLOWED_SCHEMES = ("http", "https")


def validate_endpoint(endpoint: str) -> str:
    """
    Check that an endpoint is an absolute http(s) URL.

    Only http and https are accepted so a setting cannot point the exporter
    at file:// or other local schemes.

    Raises:
        ValueError: If the URL is malformed or uses another scheme
    """
    parsed = urlparse(endpoint)
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(
            f"Invalid protocol: {parsed.scheme or '(none)'}. Only http and https are allowed."
        )
    if not parsed.netloc:
        raise ValueError(f"Invalid endpoint URL: {endpoint}")
    return endpoint


class CollectorSettings(BaseModel):
    """Complete settings schema. Instances are immutable snapshots."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    enabled: bool = False
    endpoint: str | None = Field(
        default=None, description="OTLP/HTTP endpoint, e.g. http://localhost:4318"
    )
    mode: Literal["logs", "metrics"] = "metrics"
    event_filter: str = Field(default="", alias="eventFilter")
    export_interval: int = Field(
        default=DEFAULT_EXPORT_INTERVAL,
        ge=EXPORT_INTERVAL_RANGE[0],
        le=EXPORT_INTERVAL_RANGE[1],
        alias="exportInterval",
        description="Metric export interval (ms)",
    )
    device_cooldown: int = Field(
        default=DEFAULT_DEVICE_COOLDOWN,
        ge=DEVICE_COOLDOWN_RANGE[0],
        le=DEVICE_COOLDOWN_RANGE[1],
        alias="deviceCooldown",
        description="Minimum seconds between metrics from one device",
    )
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE,
        ge=BATCH_SIZE_RANGE[0],
        le=BATCH_SIZE_RANGE[1],
        alias="batchSize",
    )
    batch_timeout: int = Field(
        default=DEFAULT_BATCH_TIMEOUT,
        ge=BATCH_TIMEOUT_RANGE[0],
        le=BATCH_TIMEOUT_RANGE[1],
        alias="batchTimeout",
        description="Maximum time to wait before sending a log batch (ms)",
    )

    @field_validator("endpoint")
    @classmethod
    def check_endpoint(cls, v: str | None) -> str | None:
        if v in (None, ""):
            return None
        return validate_endpoint(v)

    @field_validator("event_filter", mode="before")
    @classmethod
    def coerce_event_filter(cls, v):
        # Hosts that store settings as lists hand them back as lists
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return ",".join(str(item) for item in v if isinstance(item, str))
        return v


class FilterConfiguration(BaseModel):
    """
    Snapshot of everything the detection pipeline reads per session.

    Built once per initialization and replaced wholesale on settings change.
    """

    model_config = ConfigDict(frozen=True)

    denylist: tuple[str, ...] = ()
    cooldown_seconds: float = Field(default=DEFAULT_DEVICE_COOLDOWN, ge=0)
    export_interval_ms: int = DEFAULT_EXPORT_INTERVAL


def validate_settings(data: dict) -> CollectorSettings:
    """
    Validate raw settings using Pydantic.

    Args:
        data: Raw settings dictionary (camelCase or snake_case keys)

    Returns:
        Validated CollectorSettings object

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return CollectorSettings.model_validate(data)
