"""Error taxonomy for the telemetry reporter.

Every error raised by the reporter derives from ``TelemetryError`` so the
runner can map any failure to an exit code without catching unrelated
exceptions.
"""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for reporter failures."""


class ConfigurationError(TelemetryError):
    """A required setting is missing or blank."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(", ".join(f"{name} is not provided" for name in missing))


class StorageError(TelemetryError):
    """The state file or its directory cannot be read, created or written."""


class TransportError(TelemetryError):
    """The report could not be delivered to the collection endpoint."""
