"""Host introspection: operating system descriptor and hardware architecture."""

from __future__ import annotations

import platform
from collections.abc import Callable, Sequence
from pathlib import Path

from percona_telemetry.logging import get_logger

log = get_logger("percona_telemetry.host")

UNKNOWN_OS = "unknown"
UNKNOWN_ARCH = "unknown"


def _pretty_name(text: str) -> str:
    for line in text.splitlines():
        if line.startswith("PRETTY_NAME="):
            return line[len("PRETTY_NAME=") :]
    return ""


def _first_line(text: str) -> str:
    lines = text.splitlines()
    return lines[0] if lines else ""


def _single_line(text: str) -> str:
    return text.replace("\r", "").replace("\n", "")


# Release files in probing order, each with the extractor for its format
OS_RELEASE_SOURCES: Sequence[tuple[Path, Callable[[str], str]]] = (
    (Path("/etc/os-release"), _pretty_name),
    (Path("/etc/system-release"), _first_line),
    (Path("/etc/redhat-release"), _first_line),
    (Path("/etc/issue"), _single_line),
)


def detect_operating_system(
    sources: Sequence[tuple[Path, Callable[[str], str]]] = OS_RELEASE_SOURCES,
) -> str:
    """Describe the running OS from the first release file that yields a value.

    Quote characters are removed from the result. Falls back to
    ``"unknown"`` when no source is present or readable.
    """
    for path, extract in sources:
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            log.debug("os_release_unreadable", path=str(path), error=str(exc))
            continue
        descriptor = extract(text).replace('"', "").strip()
        if descriptor:
            return descriptor
    return UNKNOWN_OS


def hardware_arch() -> str:
    """Machine and processor type, as printed by ``uname -mp``."""
    machine = platform.machine() or UNKNOWN_ARCH
    processor = platform.processor() or UNKNOWN_ARCH
    return f"{machine} {processor}"
