"""Shared formatting functions for display values."""

from typing import Optional


def format_number(value: Optional[int]) -> str:
    """Format an integer with thousands separators."""
    if value is None:
        return "N/A"
    return f"{value:,}"


def format_bytes(size: Optional[int]) -> str:
    """Format a byte count using binary units (B, KiB, MiB, GiB)."""
    if size is None:
        return "N/A"
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KiB", "MiB", "GiB"):
        value /= 1024
        if value < 1024 or unit == "GiB":
            return f"{value:.1f} {unit}"
    return f"{value:.1f} GiB"


def format_duration(seconds: Optional[int]) -> str:
    """Format duration in seconds to human readable string (days, hours, minutes, seconds).

    Negative durations keep their sign: -5 is "-5s".
    """
    if seconds is None:
        return "N/A"
    if seconds < 0:
        return "-" + format_duration(-seconds)

    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    mins = (seconds % 3600) // 60
    secs = seconds % 60

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0 or days > 0:
        parts.append(f"{hours}h")
    if mins > 0 or hours > 0 or days > 0:
        parts.append(f"{mins}m")
    parts.append(f"{secs}s")

    return " ".join(parts)
