"""
Entry point for running the collector as a module.

Usage:
    python -m scrypted_otel [events.jsonl]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
