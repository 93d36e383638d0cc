"""Timestamped console logging.

Info and debug lines go to stdout, warnings and errors to stderr. ``fatal``
logs an error and ends the process, for failures that must stop a render run.
"""

import sys
from datetime import datetime
from typing import NoReturn

from .env import get_config


def _ts() -> str:
    """Get current timestamp string."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def info(msg: str) -> None:
    """Print info message to stdout."""
    print(f"[{_ts()}] {msg}")


def debug(msg: str) -> None:
    """Print debug message if HOP_DEBUG is enabled."""
    if get_config().hop_debug:
        print(f"[{_ts()}] DEBUG: {msg}")


def warn(msg: str) -> None:
    """Print warning message to stderr."""
    print(f"[{_ts()}] WARN: {msg}", file=sys.stderr)


def error(msg: str) -> None:
    """Print error message to stderr."""
    print(f"[{_ts()}] ERROR: {msg}", file=sys.stderr)


def fatal(msg: str, code: int = 1) -> NoReturn:
    """Print error message to stderr and exit with a non-zero status."""
    error(msg)
    sys.exit(code)
