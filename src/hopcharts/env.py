"""Environment variable parsing and configuration."""

import os
from pathlib import Path
from typing import Optional


def get_str(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get string env var."""
    return os.environ.get(key, default)


def get_int(key: str, default: int) -> int:
    """Get integer env var."""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def get_bool(key: str, default: bool = False) -> bool:
    """Get boolean env var (0/1, true/false, yes/no)."""
    val = os.environ.get(key, "").lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


def get_path(key: str, default: str) -> Path:
    """Get path env var, expanding user and making absolute."""
    val = os.environ.get(key, default)
    return Path(val).expanduser().resolve()


class Config:
    """Configuration loaded from environment variables."""

    def __init__(self):
        self.hop_debug = get_bool("HOP_DEBUG", False)

        # Paths
        self.logs_dir = get_path("LOGS_DIR", "./logs")
        self.html_dir = get_path("HTML_DIR", "./html")

        # Static server
        self.serve_host = get_str("SERVE_HOST", "localhost")
        self.serve_port = get_int("SERVE_PORT", 8089)

        # Chart appearance
        self.chart_theme = get_str("CHART_THEME", "light")


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
