"""Persisted telemetry state.

The state file is plain UTF-8 text holding one ``key:value`` pair per line.
The reserved ``instanceId`` key carries the host instance identifier; every
other key is a product family that has already been reported under that
identifier. Values are written without quoting or escaping, so a value that
contains a newline cannot round-trip.

No file locking is applied. Two concurrent runs can each load the file,
modify their copy and save it, in which case the last writer wins and a
marker written by the other run is lost.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from percona_telemetry.exceptions import StorageError
from percona_telemetry.logging import get_logger

log = get_logger("percona_telemetry.state")

TelemetryState = dict[str, str]

INSTANCE_ID_KEY = "instanceId"
WRITE_CHECK_KEY = "config_write_check"

DEFAULT_FILE_MODE = 0o644


def parse_state(text: str) -> TelemetryState:
    """Parse ``key:value`` lines into a state mapping.

    Key and value are split on the first colon and stripped. Lines whose key
    is empty are skipped; anything else is kept as-is, and a later duplicate
    key overrides an earlier one.
    """
    state: TelemetryState = {}
    for line in text.splitlines():
        key, _, value = line.partition(":")
        key = key.strip()
        if not key:
            continue
        state[key] = value.strip()
    return state


def format_state(state: TelemetryState) -> str:
    """Render a state mapping as ``key:value`` lines."""
    return "".join(f"{key}:{value}\n" for key, value in state.items())


def load_state(path: Path) -> TelemetryState:
    """Read the state file. A missing file yields an empty state."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        log.debug("telemetry_state_missing", path=str(path))
        return {}
    except OSError as exc:
        raise StorageError(f"cannot read {path}: {exc}") from exc
    return parse_state(text)


def save_state(path: Path, state: TelemetryState) -> None:
    """Overwrite the state file with the given mapping.

    The content is written to a sibling temporary file which then replaces
    ``path``, so a reader never observes a partially written file. When the
    directory does not allow creating that temporary file but the state file
    itself is writable, the file is truncated and rewritten in place.
    """
    for key, value in state.items():
        if "\n" in value or "\r" in value:
            log.warning("telemetry_state_value_not_representable", key=key)

    content = format_state(state)
    try:
        _replace_file(path, content)
    except PermissionError as exc:
        log.debug("telemetry_state_dir_not_writable", path=str(path), error=str(exc))
        try:
            with path.open("w", encoding="utf-8") as fh:
                fh.write(content)
        except OSError as inner:
            raise StorageError(f"cannot write {path}: {inner}") from inner
    except OSError as exc:
        raise StorageError(f"cannot write {path}: {exc}") from exc

    log.debug("telemetry_state_saved", path=str(path), entries=len(state))


def _replace_file(path: Path, content: str) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        # mkstemp creates 0600; keep the mode of the file being replaced
        if path.exists():
            shutil.copymode(path, tmp_name)
        else:
            os.chmod(tmp_name, DEFAULT_FILE_MODE)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def probe_writable(path: Path) -> None:
    """Make sure the state file can be written before any network I/O.

    Creates the parent directory if needed and appends a throwaway marker
    line to the file.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(f"{WRITE_CHECK_KEY}:1\n")
    except OSError as exc:
        raise StorageError(f"{path} is not writable: {exc}") from exc
