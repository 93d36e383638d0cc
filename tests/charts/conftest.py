"""Fixtures for chart tests."""

import json
import re

import pytest

from hopcharts.aggregate import (
    RSSI_SPEED_AXES,
    BarSeries,
    LineSeries,
    ParallelSeries,
)
from hopcharts.charts import CHART_THEMES


@pytest.fixture
def light_theme():
    """Light chart theme."""
    return CHART_THEMES["light"]


@pytest.fixture
def dark_theme():
    """Dark chart theme."""
    return CHART_THEMES["dark"]


@pytest.fixture
def sample_line():
    """Smoothed line series with a dozen points."""
    values = [5, 3, 8, 2, 7, 4, 6, 9, 1, 5, 3, 4]
    return LineSeries(
        title="Seconds from BLE discovery to Successful Wifi connection",
        series_name="BLE to Wifi",
        x_name="Count",
        y_name="Seconds",
        x=list(range(len(values))),
        y=values,
        smooth=True,
    )


@pytest.fixture
def empty_line():
    """Line series with no points."""
    return LineSeries(
        title="Download Speed",
        series_name="Download Speed",
        x_name="Count",
        y_name="MBps",
    )


@pytest.fixture
def sample_parallel():
    """RSSI/Speed points."""
    return ParallelSeries(
        title="RSSI Speed",
        series_name="RSSI Speed",
        axes=RSSI_SPEED_AXES,
        points=[(-55, 65), (-80, 0), (-67, 144), (-67, 72)],
    )


@pytest.fixture
def sample_bar():
    """Battery bar series."""
    return BarSeries(
        title="Battery Consumption",
        categories=("40s", "120s"),
        series={"10Mb": [1.5, 2.5], "100Mb": [4.0, 7.25]},
    )


def _extract_svg_data_attributes(svg: str) -> dict:
    """Extract data-* attributes from SVG for validation.

    Args:
        svg: SVG string

    Returns:
        Dict with extracted data attributes
    """
    data = {}

    points_match = re.search(r'data-points="([^"]*)"', svg)
    if points_match:
        points_str = points_match.group(1).replace('&quot;', '"')
        try:
            data["points"] = json.loads(points_str)
        except json.JSONDecodeError:
            data["points_raw"] = points_str

    for attr in ("axes", "xlim", "ylim"):
        match = re.search(rf'data-{attr}="([^"]*)"', svg)
        if match:
            data[attr] = json.loads(match.group(1).replace('&quot;', '"').replace('&amp;', '&'))

    for attr in ["data-chart", "data-kind", "data-theme", "data-plot-x0", "data-plot-x1",
                 "data-plot-y0", "data-plot-y1"]:
        match = re.search(rf'{attr}="([^"]+)"', svg)
        if match:
            key = attr.replace("data-", "").replace("-", "_")
            data[key] = match.group(1)

    return data


@pytest.fixture
def svg_data():
    """Parser for the data-* attributes of a rendered chart."""
    return _extract_svg_data_attributes
