"""Tests for host introspection."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from percona_telemetry.host import (
    OS_RELEASE_SOURCES,
    UNKNOWN_OS,
    detect_operating_system,
    hardware_arch,
)

OS_RELEASE = """\
NAME="Ubuntu"
VERSION_ID="22.04"
PRETTY_NAME="Ubuntu 22.04.3 LTS"
ID=ubuntu
"""


def _sources(tmp_path: Path) -> list:
    """Point every release source at a file under tmp_path, keeping its parser."""
    return [(tmp_path / path.name, extract) for path, extract in OS_RELEASE_SOURCES]


class TestDetectOperatingSystem:
    """Tests for detect_operating_system."""

    def test_os_release_pretty_name(self, tmp_path: Path) -> None:
        (tmp_path / "os-release").write_text(OS_RELEASE)
        assert detect_operating_system(_sources(tmp_path)) == "Ubuntu 22.04.3 LTS"

    def test_os_release_takes_precedence(self, tmp_path: Path) -> None:
        (tmp_path / "os-release").write_text(OS_RELEASE)
        (tmp_path / "redhat-release").write_text("CentOS Linux release 7.9.2009 (Core)\n")
        assert detect_operating_system(_sources(tmp_path)) == "Ubuntu 22.04.3 LTS"

    def test_system_release_first_line(self, tmp_path: Path) -> None:
        (tmp_path / "system-release").write_text('Amazon Linux release 2 "Karoo"\nextra\n')
        assert detect_operating_system(_sources(tmp_path)) == "Amazon Linux release 2 Karoo"

    def test_redhat_release(self, tmp_path: Path) -> None:
        (tmp_path / "redhat-release").write_text("CentOS Linux release 7.9.2009 (Core)\n")
        assert (
            detect_operating_system(_sources(tmp_path)) == "CentOS Linux release 7.9.2009 (Core)"
        )

    def test_issue_newlines_removed(self, tmp_path: Path) -> None:
        (tmp_path / "issue").write_text("Debian GNU/Linux 12 \\n \\l\r\n\n")
        assert detect_operating_system(_sources(tmp_path)) == "Debian GNU/Linux 12 \\n \\l"

    def test_os_release_without_pretty_name_falls_through(self, tmp_path: Path) -> None:
        (tmp_path / "os-release").write_text('NAME="Minimal"\n')
        (tmp_path / "issue").write_text("Minimal Linux\n")
        assert detect_operating_system(_sources(tmp_path)) == "Minimal Linux"

    def test_unreadable_source_is_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "os-release").mkdir()
        (tmp_path / "issue").write_text("Fallback OS\n")
        assert detect_operating_system(_sources(tmp_path)) == "Fallback OS"

    def test_no_sources_yields_unknown(self, tmp_path: Path) -> None:
        assert detect_operating_system(_sources(tmp_path)) == UNKNOWN_OS

    def test_blank_sources_yield_unknown(self, tmp_path: Path) -> None:
        (tmp_path / "os-release").write_text('PRETTY_NAME=""\n')
        (tmp_path / "issue").write_text("\n\n")
        assert detect_operating_system(_sources(tmp_path)) == UNKNOWN_OS


class TestHardwareArch:
    """Tests for hardware_arch."""

    def test_machine_and_processor(self) -> None:
        with (
            patch("percona_telemetry.host.platform.machine", return_value="x86_64"),
            patch("percona_telemetry.host.platform.processor", return_value="x86_64"),
        ):
            assert hardware_arch() == "x86_64 x86_64"

    def test_empty_processor_reported_as_unknown(self) -> None:
        with (
            patch("percona_telemetry.host.platform.machine", return_value="aarch64"),
            patch("percona_telemetry.host.platform.processor", return_value=""),
        ):
            assert hardware_arch() == "aarch64 unknown"
