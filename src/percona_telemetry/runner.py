"""Run one reporting cycle.

Lifecycle:
1. Load the state file
2. Reconcile the instance identifier (a replaced id clears all markers)
3. Stop if the product family is already marked as reported
4. Build the report; missing settings abort before any write
5. Probe that the state file is writable
6. Send the report once
7. On failure, save the state as-is (identity changes kept, product not
   marked); on success, mark the product family and save

The "already reported" exit persists nothing, not even a replaced
identifier. State is only written after a send attempt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import httpx

from percona_telemetry.config import Settings
from percona_telemetry.exceptions import ConfigurationError, StorageError
from percona_telemetry.gate import mark_reported, should_report
from percona_telemetry.identity import resolve_instance_id
from percona_telemetry.logging import get_logger
from percona_telemetry.models import SendOutcome
from percona_telemetry.reporter import build_report, build_request, send_report
from percona_telemetry.state import load_state, probe_writable, save_state

log = get_logger("percona_telemetry.runner")

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class RunStatus(Enum):
    """Terminal state of a run."""

    DISABLED = "disabled"
    ALREADY_REPORTED = "already_reported"
    REPORTED = "reported"
    CONFIGURATION_ERROR = "configuration_error"
    STORAGE_ERROR = "storage_error"
    SEND_FAILED = "send_failed"


_SUCCESSFUL = frozenset({RunStatus.DISABLED, RunStatus.ALREADY_REPORTED, RunStatus.REPORTED})


@dataclass
class RunResult:
    """How a run ended."""

    status: RunStatus
    instance_id: str | None = None
    error: str | None = None
    missing: list[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return EXIT_SUCCESS if self.status in _SUCCESSFUL else EXIT_FAILURE


def run_once(settings: Settings, client: httpx.Client | None = None) -> RunResult:
    """Execute the reporting cycle and return how it ended.

    Never raises for reporter errors; each one maps to a ``RunResult``.
    """
    if settings.disabled:
        log.info("telemetry_disabled")
        return RunResult(RunStatus.DISABLED)

    path = settings.telemetry_config_file_path
    try:
        state = load_state(path)
    except StorageError as exc:
        log.error("telemetry_state_unreadable", error=str(exc))
        return RunResult(RunStatus.STORAGE_ERROR, error=str(exc))
    log.debug("telemetry_state_loaded", path=str(path), entries=len(state))

    identity = resolve_instance_id(state, settings.instance_id)
    state = identity.state
    log.debug(
        "telemetry_identity_resolved",
        instance=identity.instance_id,
        changed=identity.changed,
    )

    if not should_report(state, settings.product_family):
        log.info("telemetry_already_reported", product_family=settings.product_family)
        return RunResult(RunStatus.ALREADY_REPORTED, instance_id=identity.instance_id)

    try:
        request = build_request(settings, identity.instance_id)
    except ConfigurationError as exc:
        log.error("telemetry_configuration_invalid", missing=exc.missing)
        return RunResult(
            RunStatus.CONFIGURATION_ERROR,
            instance_id=identity.instance_id,
            error=str(exc),
            missing=exc.missing,
        )
    report = build_report(request)
    log.debug("telemetry_report_built", report_id=report.id)

    try:
        probe_writable(path)
    except StorageError as exc:
        log.error("telemetry_state_not_writable", error=str(exc))
        return RunResult(
            RunStatus.STORAGE_ERROR, instance_id=identity.instance_id, error=str(exc)
        )

    outcome = send_report(report, request.endpoint, request.timeout, client=client)

    if outcome is SendOutcome.SUCCESS:
        state = mark_reported(state, request.product_family)
        result = RunResult(RunStatus.REPORTED, instance_id=identity.instance_id)
    else:
        result = RunResult(
            RunStatus.SEND_FAILED,
            instance_id=identity.instance_id,
            error=f"could not deliver report to {request.endpoint}",
        )

    try:
        save_state(path, state)
    except StorageError as exc:
        log.error("telemetry_state_save_failed", error=str(exc))
        return RunResult(
            RunStatus.STORAGE_ERROR, instance_id=identity.instance_id, error=str(exc)
        )

    return result


def run(settings: Settings, client: httpx.Client | None = None) -> int:
    """Execute the reporting cycle and return the process exit code."""
    return run_once(settings, client=client).exit_code
