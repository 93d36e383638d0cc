"""Datahop measurement log charts."""

__version__ = "0.1.0"
