"""Root fixtures for all tests."""

import json
import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Clear hopcharts env vars and reset singletons before each test."""
    env_keys = (
        "HOP_DEBUG",
        "LOGS_DIR",
        "HTML_DIR",
        "SERVE_HOST",
        "SERVE_PORT",
        "CHART_THEME",
    )

    for key in list(os.environ.keys()):
        if key in env_keys:
            monkeypatch.delenv(key, raising=False)

    # Reset config singleton
    import hopcharts.env

    hopcharts.env._config = None

    yield

    # Reset again after test
    hopcharts.env._config = None


@pytest.fixture
def tmp_logs_dir(tmp_path):
    """Create temp directory for input log files."""
    logs_dir = tmp_path / "logs"
    logs_dir.mkdir()
    return logs_dir


@pytest.fixture
def tmp_html_dir(tmp_path):
    """Temp directory path for rendered pages (not created)."""
    return tmp_path / "html"


@pytest.fixture
def configured_env(tmp_logs_dir, tmp_html_dir, monkeypatch):
    """Set up test environment with temp directories."""
    monkeypatch.setenv("LOGS_DIR", str(tmp_logs_dir))
    monkeypatch.setenv("HTML_DIR", str(tmp_html_dir))
    # Reset config to pick up new values
    import hopcharts.env

    hopcharts.env._config = None
    return {"logs_dir": tmp_logs_dir, "html_dir": tmp_html_dir}


@pytest.fixture
def write_log(tmp_logs_dir):
    """Write a log file into the temp logs directory.

    Accepts either a JSON-serializable object or raw text.
    """

    def _write(name, body):
        path = tmp_logs_dir / f"{name}.log"
        if isinstance(body, (str, bytes)):
            mode = "wb" if isinstance(body, bytes) else "w"
            with open(path, mode) as f:
                f.write(body)
        else:
            path.write_text(json.dumps(body))
        return path

    return _write


@pytest.fixture
def sample_matrix_log():
    """Matrix log body as written by the measurement harness."""
    return {
        "ContentMatrix": {
            "tag-a": {
                "Tag": "tag-a",
                "Size": 10485760,
                "AvgSpeed": 3.14,
                "DownloadStartedAt": 1650000000,
                "DownloadFinishedAt": 1650000004,
                "ProvidedBy": ["node-1", "node-2"],
            },
            "tag-b": {
                "Tag": "tag-b",
                "Size": 104857600,
                "AvgSpeed": 1.25,
                "DownloadStartedAt": 1650000100,
                "DownloadFinishedAt": 1650000180,
                "ProvidedBy": ["node-2"],
            },
        },
        "NodeMatrix": {
            "node-1": {
                "ConnectionAlive": True,
                "ConnectionSuccessCount": 2,
                "ConnectionFailureCount": 1,
                "LastSuccessfulConnectionDuration": 120,
                "BLEDiscoveredAt": 1650000200,
                "WifiConnectedAt": 1650000203,
                "RSSI": -61,
                "Speed": 72,
                "Frequency": 2437,
                "IPFSConnectedAt": 1650000206,
                "DiscoveryDelays": [6, 9],
                "ConnectionHistory": [
                    {
                        "BLEDiscoveredAt": 100,
                        "WifiConnectedAt": 105,
                        "RSSI": -55,
                        "Speed": 65,
                        "Frequency": 2412,
                        "IPFSConnectedAt": 108,
                        "DisconnectedAt": 200,
                    },
                    {
                        "BLEDiscoveredAt": 200,
                        "WifiConnectedAt": 0,
                        "RSSI": -80,
                        "Speed": 0,
                        "Frequency": 2412,
                        "IPFSConnectedAt": 0,
                        "DisconnectedAt": 0,
                    },
                ],
            },
            "node-2": {
                "ConnectionAlive": False,
                "ConnectionSuccessCount": 1,
                "ConnectionFailureCount": 0,
                "DiscoveryDelays": [4],
                "ConnectionHistory": [
                    {
                        "BLEDiscoveredAt": 300,
                        "WifiConnectedAt": 302,
                        "RSSI": -67,
                        "Speed": 144,
                        "Frequency": 5180,
                        "IPFSConnectedAt": 304,
                        "DisconnectedAt": 400,
                    },
                ],
            },
        },
        "TotalUptime": 3725,
    }


@pytest.fixture
def sample_battery_log():
    """Battery measurement log body."""
    return [
        {"DataTransfer": "10", "TransferInterval": "40", "BatteryConsumption": "1.5"},
        {"DataTransfer": "100", "TransferInterval": "40", "BatteryConsumption": "4.0"},
        {"DataTransfer": "10", "TransferInterval": "120", "BatteryConsumption": "2.5"},
        {"DataTransfer": "50", "TransferInterval": "40", "BatteryConsumption": "3.0"},
        {"DataTransfer": "100", "TransferInterval": "120", "BatteryConsumption": "7.25"},
    ]


@pytest.fixture
def sample_matrix(sample_matrix_log):
    """Decoded Matrix built from the sample log body."""
    from hopcharts.models import Matrix

    return Matrix.from_json(sample_matrix_log)


@pytest.fixture
def sample_measurements(sample_battery_log):
    """Decoded battery measurements."""
    from hopcharts.models import battery_measurements_from_json

    return battery_measurements_from_json(sample_battery_log)


@pytest.fixture
def populated_logs(write_log, sample_matrix_log, sample_battery_log):
    """Every log the site renders, written to the temp logs directory."""
    from hopcharts.html import BATTERY_PAGE, MATRIX_PAGES

    for name in MATRIX_PAGES:
        write_log(name, sample_matrix_log)
    write_log(BATTERY_PAGE, sample_battery_log)
    return MATRIX_PAGES + (BATTERY_PAGE,)


@pytest.fixture
def project_root():
    """Path to the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def src_root(project_root):
    """Path to the src/hopcharts directory."""
    return project_root / "src" / "hopcharts"
