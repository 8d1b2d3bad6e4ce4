"""
Settings loading, saving, and derivation of the pipeline filter snapshot.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..utils.constants import ENV_ENDPOINT
from .schemas import CollectorSettings, FilterConfiguration, validate_settings

logger = logging.getLogger(__name__)


class SettingsError(Exception):
    """Raised when a settings file cannot be read or is invalid."""


def parse_event_filter(value: Any, lowercase: bool = False) -> tuple[str, ...]:
    """
    Split a comma-separated filter setting into entries.

    Entries are trimmed and empty entries dropped. Lists are accepted too;
    anything that is not a string is dropped rather than failing.

    Args:
        value: Raw setting value
        lowercase: Lower-case entries (used for the class denylist)

    Returns:
        Tuple of filter entries (empty = no filtering)
    """
    if value is None:
        return ()
    if isinstance(value, str):
        raw_entries = value.split(",")
    elif isinstance(value, (list, tuple)):
        raw_entries = value
    else:
        logger.warning(f"Ignoring unparseable event filter: {value!r}")
        return ()

    entries = []
    for entry in raw_entries:
        if not isinstance(entry, str):
            logger.warning(f"Dropping unparseable filter entry: {entry!r}")
            continue
        entry = entry.strip()
        if not entry:
            continue
        entries.append(entry.lower() if lowercase else entry)
    return tuple(entries)


def build_filter_configuration(settings: CollectorSettings) -> FilterConfiguration:
    """Derive the immutable pipeline snapshot from settings."""
    return FilterConfiguration(
        denylist=parse_event_filter(settings.event_filter, lowercase=True),
        cooldown_seconds=settings.device_cooldown,
        export_interval_ms=settings.export_interval,
    )


def apply_env_overrides(data: dict) -> dict:
    """
    Apply environment variable overrides to raw settings.

    Args:
        data: Raw settings dictionary

    Returns:
        Settings dictionary with environment variables applied
    """
    if ENV_ENDPOINT in os.environ:
        logger.info(f"Using endpoint from environment: {ENV_ENDPOINT}")
        data["endpoint"] = os.environ[ENV_ENDPOINT]
    return data


def load_settings(path: str | Path, use_env: bool = True) -> CollectorSettings:
    """
    Load settings from a YAML file.

    A missing file yields default (disabled) settings.

    Raises:
        SettingsError: If the file is not valid YAML or fails validation
    """
    path = Path(path)
    data: dict = {}
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsError(f"Settings file {path} must contain a mapping")
        logger.info(f"Settings loaded from {path}")
    else:
        logger.info(f"No settings file at {path}, using defaults")

    if use_env:
        data = apply_env_overrides(data)

    try:
        return validate_settings(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {path}: {e}") from e


def save_settings(path: str | Path, settings: CollectorSettings) -> None:
    """Persist settings as YAML using the host's camelCase keys."""
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump(by_alias=True, exclude_none=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    logger.debug(f"Settings saved to {path}")
