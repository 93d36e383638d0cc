"""Record types for Datahop measurement logs.

Log files are written by the Go measurement harness, so keys use its
PascalCase field names (``ContentMatrix``, ``BLEDiscoveredAt``, ...). Decoding
follows the same rules the harness relies on:

- unknown keys are ignored
- missing keys and ``null`` values take the zero value for the field
- keys match case-insensitively
- a known key holding the wrong JSON type is an error (``LogParseError``)
- numbers outside the range of the field type (int64, float32) are errors
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar

from .errors import LogParseError

T = TypeVar("T")

_MISSING = object()

# Ranges of the harness field types
INT64_MIN = -2**63
INT64_MAX = 2**63 - 1
FLOAT32_MAX = 3.4028234663852886e38


def _lookup(obj: dict[str, Any], key: str) -> Any:
    """Find a key exactly, falling back to a case-insensitive match."""
    if key in obj:
        return obj[key]
    lowered = key.lower()
    for k, v in obj.items():
        if k.lower() == lowered:
            return v
    return _MISSING


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _mismatch(value: Any, expected: str, path: str) -> LogParseError:
    return LogParseError(
        f"cannot decode {_type_name(value)} into {expected}", field=path
    )


def decode_int(value: Any, path: str) -> int:
    if value is None:
        return 0
    # bool is an int subclass and floats carry a fraction or exponent
    if isinstance(value, bool) or not isinstance(value, int):
        raise _mismatch(value, "integer", path)
    if not INT64_MIN <= value <= INT64_MAX:
        raise LogParseError(f"number {value} overflows int64", field=path)
    return value


def decode_float(value: Any, path: str) -> float:
    """Decode a float32 field; the value is kept at full precision."""
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _mismatch(value, "float", path)
    if abs(value) > FLOAT32_MAX or not math.isfinite(value):
        raise LogParseError(f"number {value} overflows float32", field=path)
    return float(value)


def decode_str(value: Any, path: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _mismatch(value, "string", path)
    return value


def decode_bool(value: Any, path: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise _mismatch(value, "bool", path)
    return value


def decode_list(value: Any, path: str, item: Callable[[Any, str], T]) -> list[T]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _mismatch(value, "array", path)
    return [item(v, f"{path}[{i}]") for i, v in enumerate(value)]


def decode_map(value: Any, path: str, item: Callable[[Any, str], T]) -> dict[str, T]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _mismatch(value, "object", path)
    return {k: item(v, f"{path}.{k}") for k, v in value.items()}


def _object(value: Any, path: str) -> Optional[dict[str, Any]]:
    """Return value as a JSON object, or None for null."""
    if value is None:
        return None
    if not isinstance(value, dict):
        raise _mismatch(value, "object", path)
    return value


def _get(obj: dict[str, Any], key: str) -> Any:
    value = _lookup(obj, key)
    return None if value is _MISSING else value


@dataclass(frozen=True)
class ContentMatrix:
    """Transfer record for one content tag."""

    tag: str = ""
    size: int = 0
    avg_speed: float = 0.0  # MB/s
    download_started_at: int = 0
    download_finished_at: int = 0
    provided_by: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, value: Any, path: str = "ContentMatrix") -> "ContentMatrix":
        obj = _object(value, path)
        if obj is None:
            return cls()
        return cls(
            tag=decode_str(_get(obj, "Tag"), f"{path}.Tag"),
            size=decode_int(_get(obj, "Size"), f"{path}.Size"),
            avg_speed=decode_float(_get(obj, "AvgSpeed"), f"{path}.AvgSpeed"),
            download_started_at=decode_int(
                _get(obj, "DownloadStartedAt"), f"{path}.DownloadStartedAt"
            ),
            download_finished_at=decode_int(
                _get(obj, "DownloadFinishedAt"), f"{path}.DownloadFinishedAt"
            ),
            provided_by=decode_list(
                _get(obj, "ProvidedBy"), f"{path}.ProvidedBy", decode_str
            ),
        )


@dataclass(frozen=True)
class ConnectionInfo:
    """One historical connection attempt to a discovered node.

    Timestamps are unix seconds; 0 means the stage was never reached.
    """

    ble_discovered_at: int = 0
    wifi_connected_at: int = 0
    rssi: int = 0
    speed: int = 0
    frequency: int = 0
    ipfs_connected_at: int = 0
    disconnected_at: int = 0

    @classmethod
    def from_json(cls, value: Any, path: str = "ConnectionInfo") -> "ConnectionInfo":
        obj = _object(value, path)
        if obj is None:
            return cls()
        return cls(
            ble_discovered_at=decode_int(
                _get(obj, "BLEDiscoveredAt"), f"{path}.BLEDiscoveredAt"
            ),
            wifi_connected_at=decode_int(
                _get(obj, "WifiConnectedAt"), f"{path}.WifiConnectedAt"
            ),
            rssi=decode_int(_get(obj, "RSSI"), f"{path}.RSSI"),
            speed=decode_int(_get(obj, "Speed"), f"{path}.Speed"),
            frequency=decode_int(_get(obj, "Frequency"), f"{path}.Frequency"),
            ipfs_connected_at=decode_int(
                _get(obj, "IPFSConnectedAt"), f"{path}.IPFSConnectedAt"
            ),
            disconnected_at=decode_int(
                _get(obj, "DisconnectedAt"), f"{path}.DisconnectedAt"
            ),
        )


@dataclass(frozen=True)
class DiscoveredNodeMatrix:
    """Connection statistics for one discovered peer node."""

    connection_alive: bool = False
    connection_success_count: int = 0
    connection_failure_count: int = 0
    last_successful_connection_duration: int = 0
    ble_discovered_at: int = 0
    wifi_connected_at: int = 0
    rssi: int = 0
    speed: int = 0
    frequency: int = 0
    ipfs_connected_at: int = 0
    # Seconds from BLE discovery to IPFS connection, successful discoveries only
    discovery_delays: list[int] = field(default_factory=list)
    connection_history: list[ConnectionInfo] = field(default_factory=list)

    @classmethod
    def from_json(
        cls, value: Any, path: str = "DiscoveredNodeMatrix"
    ) -> "DiscoveredNodeMatrix":
        obj = _object(value, path)
        if obj is None:
            return cls()
        return cls(
            connection_alive=decode_bool(
                _get(obj, "ConnectionAlive"), f"{path}.ConnectionAlive"
            ),
            connection_success_count=decode_int(
                _get(obj, "ConnectionSuccessCount"), f"{path}.ConnectionSuccessCount"
            ),
            connection_failure_count=decode_int(
                _get(obj, "ConnectionFailureCount"), f"{path}.ConnectionFailureCount"
            ),
            last_successful_connection_duration=decode_int(
                _get(obj, "LastSuccessfulConnectionDuration"),
                f"{path}.LastSuccessfulConnectionDuration",
            ),
            ble_discovered_at=decode_int(
                _get(obj, "BLEDiscoveredAt"), f"{path}.BLEDiscoveredAt"
            ),
            wifi_connected_at=decode_int(
                _get(obj, "WifiConnectedAt"), f"{path}.WifiConnectedAt"
            ),
            rssi=decode_int(_get(obj, "RSSI"), f"{path}.RSSI"),
            speed=decode_int(_get(obj, "Speed"), f"{path}.Speed"),
            frequency=decode_int(_get(obj, "Frequency"), f"{path}.Frequency"),
            ipfs_connected_at=decode_int(
                _get(obj, "IPFSConnectedAt"), f"{path}.IPFSConnectedAt"
            ),
            discovery_delays=decode_list(
                _get(obj, "DiscoveryDelays"), f"{path}.DiscoveryDelays", decode_int
            ),
            connection_history=decode_list(
                _get(obj, "ConnectionHistory"),
                f"{path}.ConnectionHistory",
                ConnectionInfo.from_json,
            ),
        )


@dataclass(frozen=True)
class Matrix:
    """Top-level record of a connectivity/transfer log."""

    content_matrix: dict[str, ContentMatrix] = field(default_factory=dict)
    node_matrix: dict[str, DiscoveredNodeMatrix] = field(default_factory=dict)
    total_uptime: int = 0

    @classmethod
    def from_json(cls, value: Any) -> "Matrix":
        if value is None:
            return cls()
        if not isinstance(value, dict):
            raise _mismatch(value, "matrix object", "$")
        return cls(
            content_matrix=decode_map(
                _get(value, "ContentMatrix"), "ContentMatrix", ContentMatrix.from_json
            ),
            node_matrix=decode_map(
                _get(value, "NodeMatrix"), "NodeMatrix", DiscoveredNodeMatrix.from_json
            ),
            total_uptime=decode_int(_get(value, "TotalUptime"), "TotalUptime"),
        )


@dataclass(frozen=True)
class Measurement:
    """One battery measurement.

    All fields are text in the log: ``data_transfer`` is megabytes ("10" or
    "100"), ``transfer_interval`` is seconds and ``battery_consumption`` is a
    percentage written as a decimal.
    """

    data_transfer: str = ""
    transfer_interval: str = ""
    battery_consumption: str = ""

    @classmethod
    def from_json(cls, value: Any, path: str = "Measurement") -> "Measurement":
        obj = _object(value, path)
        if obj is None:
            return cls()
        return cls(
            data_transfer=decode_str(_get(obj, "DataTransfer"), f"{path}.DataTransfer"),
            transfer_interval=decode_str(
                _get(obj, "TransferInterval"), f"{path}.TransferInterval"
            ),
            battery_consumption=decode_str(
                _get(obj, "BatteryConsumption"), f"{path}.BatteryConsumption"
            ),
        )


def battery_measurements_from_json(value: Any) -> list[Measurement]:
    """Decode a battery log body (a JSON array of measurements)."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise _mismatch(value, "measurement array", "$")
    return decode_list(value, "$", Measurement.from_json)
