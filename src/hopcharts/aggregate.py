"""Metric aggregation from loaded logs into chart series.

Every function here is pure and never raises on log content: entries that
cannot contribute to a series are skipped. Nodes and content records are
visited in the order they appear in the log file, so running x indices are
stable for a given file.
"""

from dataclasses import dataclass, field
from typing import Union

import numpy as np

from .models import Matrix, Measurement
from . import log


@dataclass
class LineSeries:
    """Single-series line chart over a running 0-based index."""

    title: str
    series_name: str
    x_name: str
    y_name: str
    x: list[int] = field(default_factory=list)
    y: list[float] = field(default_factory=list)
    smooth: bool = False
    area_opacity: float = 0.2

    @property
    def is_empty(self) -> bool:
        return len(self.y) == 0


@dataclass(frozen=True)
class ParallelAxis:
    """One dimension of a parallel-coordinates chart."""

    dim: int
    name: str


# Dimensions of the RSSI/Speed chart
RSSI_SPEED_AXES: tuple[ParallelAxis, ...] = (
    ParallelAxis(dim=0, name="RSSI"),
    ParallelAxis(dim=1, name="Speed"),
)


@dataclass
class ParallelSeries:
    """Unordered multi-dimensional points, one value per axis."""

    title: str
    series_name: str
    axes: tuple[ParallelAxis, ...]
    points: list[tuple[int, ...]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0


@dataclass
class BarSeries:
    """Grouped bar chart with fixed categories and named series."""

    title: str
    categories: tuple[str, ...]
    series: dict[str, list[float]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not any(self.series.values())


ChartSeries = Union[LineSeries, ParallelSeries, BarSeries]

# Battery buckets: DataTransfer value -> series name
BATTERY_BUCKETS = {
    "10": "10Mb",
    "100": "100Mb",
}

# Battery chart x categories. These are fixed labels and are not derived from
# the TransferInterval of the measurements.
BATTERY_CATEGORIES = ("40s", "120s")


def ble_to_wifi(matrix: Matrix) -> LineSeries:
    """Seconds from BLE discovery to a successful Wi-Fi connection.

    History entries that never reached Wi-Fi (``wifi_connected_at == 0``)
    are skipped. The x index runs across all nodes. Deltas are not validated
    and may be negative when device clocks disagree.
    """
    series = LineSeries(
        title="Seconds from BLE discovery to Successful Wifi connection",
        series_name="BLE to Wifi",
        x_name="Count",
        y_name="Seconds",
        smooth=True,
    )
    for node in matrix.node_matrix.values():
        for conn in node.connection_history:
            if conn.wifi_connected_at != 0:
                series.x.append(len(series.x))
                series.y.append(conn.wifi_connected_at - conn.ble_discovered_at)
    return series


def ble_to_ipfs(matrix: Matrix) -> LineSeries:
    """Seconds from BLE discovery to a successful IPFS connection."""
    series = LineSeries(
        title="Seconds from BLE discovery to Successful IPFS connection",
        series_name="BLE to IPFS",
        x_name="Count",
        y_name="Seconds",
        smooth=True,
    )
    for node in matrix.node_matrix.values():
        for delay in node.discovery_delays:
            series.x.append(len(series.x))
            series.y.append(delay)
    return series


def rssi_speed(matrix: Matrix) -> ParallelSeries:
    """One (RSSI, Speed) point per connection attempt, unfiltered."""
    series = ParallelSeries(
        title="RSSI Speed",
        series_name="RSSI Speed",
        axes=RSSI_SPEED_AXES,
    )
    for node in matrix.node_matrix.values():
        for conn in node.connection_history:
            series.points.append((conn.rssi, conn.speed))
    return series


def round_one_decimal(value: float) -> float:
    """Round for display by formatting to one decimal and parsing back.

    The value is narrowed to float32 first, the width AvgSpeed has in the
    log, so halfway cases round the way the harness prints them (0.15 is
    stored as 0.150000006 and becomes 0.2).

    A failed parse yields 0.0. Formatting a float cannot produce unparseable
    text, so the fallback is kept only to match the long-standing behaviour.
    """
    text = "%.1f" % np.float32(value)
    try:
        return float(text)
    except ValueError:
        return 0.0


def download_speed(matrix: Matrix) -> LineSeries:
    """Average download speed (MB/s) per content tag."""
    series = LineSeries(
        title="Download Speed",
        series_name="Download Speed",
        x_name="Count",
        y_name="MBps",
    )
    for content in matrix.content_matrix.values():
        series.x.append(len(series.x))
        series.y.append(round_one_decimal(content.avg_speed))
    return series


def _consumption_value(m: Measurement) -> float:
    try:
        return float(m.battery_consumption)
    except ValueError:
        log.debug(f"Unparseable battery consumption {m.battery_consumption!r}, using 0")
        return 0.0


def battery_consumption(measurements: list[Measurement]) -> BarSeries:
    """Battery consumption bucketed by transfer size.

    Measurements whose DataTransfer is neither "10" nor "100" are dropped.
    Input order is kept within each bucket.
    """
    series = BarSeries(
        title="Battery Consumption",
        categories=BATTERY_CATEGORIES,
        series={name: [] for name in BATTERY_BUCKETS.values()},
    )
    for m in measurements:
        name = BATTERY_BUCKETS.get(m.data_transfer)
        if name is None:
            continue
        series.series[name].append(_consumption_value(m))
    return series


def matrix_charts(matrix: Matrix) -> list[ChartSeries]:
    """All matrix page series in display order."""
    return [
        ble_to_wifi(matrix),
        ble_to_ipfs(matrix),
        rssi_speed(matrix),
        download_speed(matrix),
    ]
