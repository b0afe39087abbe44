"""Shared fixtures for the telemetry reporter tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest
import structlog

from percona_telemetry.config import Settings

ENDPOINT = "https://telemetry.example.com/v1/telemetry/GenericReport"


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove any PERCONA_* variables so tests never see the host configuration."""
    for name in list(os.environ):
        if name.upper().startswith("PERCONA_"):
            monkeypatch.delenv(name, raising=False)
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level
    yield
    logging.root.handlers.clear()
    logging.root.handlers.extend(original_handlers)
    logging.root.setLevel(original_level)
    structlog.reset_defaults()


@pytest.fixture()
def state_path(tmp_path: Path) -> Path:
    """Location of the state file inside a not-yet-existing directory."""
    return tmp_path / "percona" / "telemetry_uuid"


@pytest.fixture()
def make_settings(state_path: Path) -> Callable[..., Settings]:
    """Factory for Settings with every required field filled in."""

    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {
            "product_family": "PRODUCT_FAMILY_PS",
            "product_version": "8.0.33",
            "operating_system": "Ubuntu 22.04",
            "deployment_method": "PACKAGE",
            "telemetry_config_file_path": state_path,
            "telemetry_url": ENDPOINT,
            "send_timeout": 1,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, status_code: int = 200) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={})


@pytest.fixture()
def accepting_transport() -> RecordingTransport:
    return RecordingTransport(200)


@pytest.fixture()
def rejecting_transport() -> RecordingTransport:
    return RecordingTransport(500)


@pytest.fixture()
def transport_factory() -> type[RecordingTransport]:
    return RecordingTransport
