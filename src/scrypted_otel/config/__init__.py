"""
Settings loading, validation, and persistence.

Pydantic schemas provide type-safe validation:
- CollectorSettings: Complete settings schema (immutable snapshot)
- FilterConfiguration: What the detection pipeline reads per session
"""

from .loader import (
    SettingsError,
    apply_env_overrides,
    build_filter_configuration,
    load_settings,
    parse_event_filter,
    save_settings,
)
from .schemas import (
    CollectorSettings,
    FilterConfiguration,
    validate_endpoint,
    validate_settings,
)

__all__ = [
    "CollectorSettings",
    "FilterConfiguration",
    "SettingsError",
    "apply_env_overrides",
    "build_filter_configuration",
    "load_settings",
    "parse_event_filter",
    "save_settings",
    "validate_endpoint",
    "validate_settings",
]
