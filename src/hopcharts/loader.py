"""Log file loading.

Each page reads ``<logs_dir>/<name>.log`` once. Failures are not retried:
a missing or unreadable file raises ``LogReadError`` and a body that is not
JSON of the expected shape raises ``LogParseError``.
"""

import json
from pathlib import Path
from typing import Any, Optional

from .env import get_config
from .errors import LogParseError, LogReadError
from .models import Matrix, Measurement, battery_measurements_from_json
from . import log


def log_path(name: str, logs_dir: Optional[Path] = None) -> Path:
    """Path of the log file for a page name."""
    if logs_dir is None:
        logs_dir = get_config().logs_dir
    return Path(logs_dir) / f"{name}.log"


def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are accepted by Python's json but are not JSON
    raise LogParseError(f"invalid JSON: unexpected literal {name}")


def read_log(name: str, logs_dir: Optional[Path] = None) -> Any:
    """Read and JSON-decode a log file.

    Args:
        name: Page/log name without extension (e.g. "zero_host_downloader")
        logs_dir: Directory holding the logs, defaults to LOGS_DIR

    Returns:
        Decoded JSON value

    Raises:
        LogReadError: File missing, unreadable or not UTF-8
        LogParseError: File content is not valid JSON
    """
    path = log_path(name, logs_dir)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise LogReadError(path, f"not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise LogReadError(path, e.strerror or str(e)) from e

    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise LogParseError(f"invalid JSON: {e}", path=path) from e
    except LogParseError as e:
        raise _attach_path(e, path)

    log.debug(f"Read {len(text)} bytes from {path}")
    return data


def _attach_path(e: LogParseError, path: Path) -> LogParseError:
    if e.path is None:
        e.path = path
    return e


def load_matrix(name: str, logs_dir: Optional[Path] = None) -> Matrix:
    """Load a connectivity/transfer matrix log."""
    data = read_log(name, logs_dir)
    try:
        matrix = Matrix.from_json(data)
    except LogParseError as e:
        raise _attach_path(e, log_path(name, logs_dir))

    log.debug(
        f"Loaded matrix {name}: {len(matrix.node_matrix)} nodes, "
        f"{len(matrix.content_matrix)} content items"
    )
    return matrix


def load_battery_measurements(
    name: str, logs_dir: Optional[Path] = None
) -> list[Measurement]:
    """Load a battery measurement log."""
    data = read_log(name, logs_dir)
    try:
        measurements = battery_measurements_from_json(data)
    except LogParseError as e:
        raise _attach_path(e, log_path(name, logs_dir))

    log.debug(f"Loaded {len(measurements)} battery measurements from {name}")
    return measurements
