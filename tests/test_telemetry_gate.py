"""Tests for the already-reported gate."""

from __future__ import annotations

from percona_telemetry.gate import REPORTED_MARKER, mark_reported, should_report
from percona_telemetry.identity import resolve_instance_id
from percona_telemetry.state import INSTANCE_ID_KEY

VALID_ID = "13f5fc62-35b4-4716-b3e6-96c761fc204d"


class TestShouldReport:
    """Tests for should_report."""

    def test_unreported_family_must_be_reported(self) -> None:
        state = {INSTANCE_ID_KEY: VALID_ID, "PRODUCT_FAMILY_PS": "1"}
        assert should_report(state, "PRODUCT_FAMILY_PXC") is True

    def test_reported_family_is_skipped(self) -> None:
        state = {INSTANCE_ID_KEY: VALID_ID, "PRODUCT_FAMILY_PS": "1"}
        assert should_report(state, "PRODUCT_FAMILY_PS") is False

    def test_any_non_empty_value_counts_as_reported(self) -> None:
        state = {INSTANCE_ID_KEY: VALID_ID, "PRODUCT_FAMILY_PS": "yes"}
        assert should_report(state, "PRODUCT_FAMILY_PS") is False

    def test_empty_marker_does_not_count(self) -> None:
        state = {INSTANCE_ID_KEY: VALID_ID, "PRODUCT_FAMILY_PS": ""}
        assert should_report(state, "PRODUCT_FAMILY_PS") is True

    def test_reset_state_always_reports(self) -> None:
        state = {INSTANCE_ID_KEY: "spoiled", "PRODUCT_FAMILY_PS": "1"}
        resolved = resolve_instance_id(state, None)
        assert should_report(resolved.state, "PRODUCT_FAMILY_PS") is True


class TestMarkReported:
    """Tests for mark_reported."""

    def test_sets_marker(self) -> None:
        state = mark_reported({INSTANCE_ID_KEY: VALID_ID}, "PRODUCT_FAMILY_PS")
        assert state == {INSTANCE_ID_KEY: VALID_ID, "PRODUCT_FAMILY_PS": REPORTED_MARKER}

    def test_returns_copy(self) -> None:
        original = {INSTANCE_ID_KEY: VALID_ID}
        mark_reported(original, "PRODUCT_FAMILY_PS")
        assert original == {INSTANCE_ID_KEY: VALID_ID}
