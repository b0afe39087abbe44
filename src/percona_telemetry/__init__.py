"""Percona telemetry reporter."""

__version__ = "0.1.0"
