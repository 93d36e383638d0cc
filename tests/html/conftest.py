"""Fixtures for HTML tests."""

from pathlib import Path

import pytest


@pytest.fixture
def templates_dir():
    """Path to templates directory."""
    return Path(__file__).parent.parent.parent / "src" / "hopcharts" / "templates"


@pytest.fixture
def reset_jinja_env():
    """Reset the Jinja2 environment singleton around a test."""
    import hopcharts.html

    hopcharts.html._jinja_env = None
    yield
    hopcharts.html._jinja_env = None
