"""Decide whether a product family still needs reporting."""

from __future__ import annotations

from percona_telemetry.state import TelemetryState

REPORTED_MARKER = "1"


def should_report(state: TelemetryState, product_family: str) -> bool:
    """Return False if ``product_family`` already has a non-empty marker.

    Must be called on the state returned by identity resolution, so that a
    replaced identifier always forces a new report.
    """
    return not state.get(product_family)


def mark_reported(state: TelemetryState, product_family: str) -> TelemetryState:
    """Return a copy of ``state`` with ``product_family`` marked as reported."""
    return {**state, product_family: REPORTED_MARKER}
