"""
OTEL Collector CLI
Validates settings and replays recorded host events through the plugin.

Event files are JSON (a list) or JSON Lines, one event per entry:
    {"device": {"id": "12", "name": "Driveway", "type": "Camera"},
     "details": {"eventInterface": "ObjectDetector", "property": "ObjectDetector"},
     "data": {"detectionId": "abc", "timestamp": 1700000000000,
              "detections": [{"className": "person", "score": 0.92}]},
     "time": 1700000000.0}

"time" (seconds) is optional; without it events are stamped on arrival.
"""

import argparse
import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TextIO

from .config import CollectorSettings, SettingsError, load_settings
from .plugin import CollectorPlugin
from .utils.constants import DEFAULT_SETTINGS_FILE, ENV_ENDPOINT

logger = logging.getLogger(__name__)


def setup_logging(quiet: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        quiet: If True, only show warnings and errors
    """
    level = logging.WARNING if quiet else logging.INFO

    # Custom formatter with shorter module names
    class ShortNameFormatter(logging.Formatter):
        def format(self, record):
            record.name = record.name.replace("scrypted_otel.", "so.")
            return super().format(record)

    handler = logging.StreamHandler()
    handler.setFormatter(
        ShortNameFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(level)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Scrypted OTEL Collector - forward device events to OpenTelemetry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  python -m scrypted_otel --validate               # Check settings
  python -m scrypted_otel events.jsonl             # Replay events to the collector
  python -m scrypted_otel --console events.jsonl   # Replay without exporting
  cat events.jsonl | python -m scrypted_otel -     # Replay from stdin

Environment Variables:
  {ENV_ENDPOINT} - Override endpoint from settings
        """,
    )

    parser.add_argument(
        "events",
        nargs="?",
        help="JSON/JSONL file of recorded host events ('-' for stdin)",
    )

    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_SETTINGS_FILE,
        help=f"Path to settings file (default: {DEFAULT_SETTINGS_FILE})",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Quiet mode - only show warnings and errors",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate settings and show the derived configuration",
    )

    parser.add_argument(
        "--console",
        action="store_true",
        help="Log records locally instead of exporting (implies enabled)",
    )

    return parser.parse_args(argv)


def iter_events(stream: TextIO) -> Iterator[dict[str, Any]]:
    """
    Yield recorded events from a JSON array or JSON Lines stream.

    Malformed lines are logged and skipped.
    """
    text = stream.read()
    stripped = text.lstrip()
    if stripped.startswith("["):
        try:
            events = json.loads(stripped)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON event file: {e}")
            return
        for event in events:
            if isinstance(event, dict):
                yield event
            else:
                logger.warning(f"Skipping non-object event: {event!r}")
        return

    for line_no, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line:
            continue
        try:
            event = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping malformed event on line {line_no}: {e}")
            continue
        if not isinstance(event, dict):
            logger.warning(f"Skipping non-object event on line {line_no}")
            continue
        yield event


def replay_events(plugin: CollectorPlugin, stream: TextIO) -> int:
    """
    Feed recorded events to the plugin.

    Returns:
        Number of events replayed
    """
    count = 0
    for event in iter_events(stream):
        now = event.get("time")
        plugin.handle_event(
            event.get("device"),
            event.get("details"),
            event.get("data"),
            now=float(now) if isinstance(now, (int, float)) else None,
        )
        count += 1
    return count


def print_settings(settings: CollectorSettings) -> None:
    """Print validated settings."""
    print("Settings valid")
    for key, value in settings.model_dump(by_alias=True).items():
        print(f"  {key}: {value}")


def _log_summary(plugin: CollectorPlugin, count: int) -> None:
    logger.info(f"Replayed {count} event(s)")
    if plugin.pipeline is not None:
        for name, value in plugin.pipeline.stats.as_dict().items():
            logger.info(f"  {name}: {value}")
    elif plugin.forwarder is not None:
        logger.info(f"  forwarded: {plugin.forwarder.forwarded}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.quiet)

    try:
        settings = load_settings(args.config)
    except SettingsError as e:
        logger.error(str(e))
        return 1

    if args.validate:
        print_settings(settings)
        return 0

    if args.console:
        settings = settings.model_copy(update={"enabled": True})
    elif not settings.enabled:
        logger.error("Plugin is disabled - set 'enabled: true' or use --console")
        return 1

    plugin = CollectorPlugin(args.config, settings=settings, console=args.console)
    if not plugin.active:
        logger.error("Plugin failed to initialize")
        return 1

    if not args.events:
        logger.info("No events to replay")
        plugin.cleanup()
        return 0

    count = 0
    try:
        if args.events == "-":
            count = replay_events(plugin, sys.stdin)
        else:
            path = Path(args.events)
            if not path.exists():
                logger.error(f"Event file not found: {path}")
                return 1
            with open(path, encoding="utf-8") as f:
                count = replay_events(plugin, f)
        _log_summary(plugin, count)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        plugin.cleanup()

    return 0
