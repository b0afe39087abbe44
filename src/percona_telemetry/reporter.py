"""Build a telemetry report and deliver it to the collection endpoint.

Delivery is a single best-effort POST: no retries, no queueing. A failed
send is reported to the caller, which decides what to persist.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx

from percona_telemetry import __version__
from percona_telemetry.config import Settings, env_var_name
from percona_telemetry.exceptions import ConfigurationError, TransportError
from percona_telemetry.host import detect_operating_system, hardware_arch
from percona_telemetry.logging import get_logger
from percona_telemetry.models import (
    METRIC_DEPLOYMENT,
    METRIC_HARDWARE_ARCH,
    METRIC_OS,
    METRIC_PILLAR_VERSION,
    Metric,
    OutboundReport,
    ReportRequest,
    SendOutcome,
)

log = get_logger("percona_telemetry.reporter")

# Settings fields that must be non-empty before a report can be built; their
# values are otherwise sent as given
REQUIRED_FIELDS = ("product_family", "product_version", "deployment_method")

USER_AGENT = f"percona-telemetry/{__version__}"


# ------------------------------------------------------------------
# Report generation
# ------------------------------------------------------------------


def build_request(
    settings: Settings,
    instance_id: str,
    operating_system: str | None = None,
) -> ReportRequest:
    """Validate settings and collect the inputs of a report.

    Raises:
        ConfigurationError: a required field or the instance id is empty.
    """
    missing = [
        env_var_name(name) for name in REQUIRED_FIELDS if not getattr(settings, name)
    ]
    if not instance_id:
        missing.append(env_var_name("instance_id"))
    if missing:
        raise ConfigurationError(missing)

    if operating_system is None:
        operating_system = settings.operating_system or detect_operating_system()

    return ReportRequest(
        product_family=settings.product_family,
        product_version=settings.product_version,
        operating_system=operating_system,
        deployment_method=settings.deployment_method,
        instance_id=instance_id,
        endpoint=settings.telemetry_url,
        timeout=settings.send_timeout,
    )


def build_report(
    request: ReportRequest,
    arch: str | None = None,
    now: datetime | None = None,
    report_id: str | None = None,
) -> OutboundReport:
    """Assemble the outbound report for ``request``."""
    metrics = (
        Metric(METRIC_PILLAR_VERSION, request.product_version),
        Metric(METRIC_OS, request.operating_system),
        Metric(METRIC_HARDWARE_ARCH, arch if arch is not None else hardware_arch()),
        Metric(METRIC_DEPLOYMENT, request.deployment_method),
    )
    extra: dict[str, Any] = {}
    if now is not None:
        extra["create_time"] = now.astimezone(UTC).replace(microsecond=0)
    if report_id is not None:
        extra["id"] = report_id
    return OutboundReport(
        instance_id=request.instance_id,
        product_family=request.product_family,
        metrics=metrics,
        **extra,
    )


# ------------------------------------------------------------------
# Transport
# ------------------------------------------------------------------


def _post(client: httpx.Client, report: OutboundReport, endpoint: str) -> None:
    try:
        resp = client.post(
            endpoint,
            content=report.to_json(),
            headers={
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            },
        )
    except httpx.HTTPError as exc:
        raise TransportError(f"{type(exc).__name__}: {exc}") from exc

    if resp.status_code >= 400:
        log.warning(
            "telemetry_report_rejected",
            status=resp.status_code,
            body=resp.text[:200],
        )
        raise TransportError(f"endpoint answered with status {resp.status_code}")


def send_report(
    report: OutboundReport,
    endpoint: str,
    timeout: float,
    client: httpx.Client | None = None,
) -> SendOutcome:
    """POST a report to the collection endpoint.

    Returns ``SendOutcome.SUCCESS`` when a response with status below 400 is
    received, ``SendOutcome.FAILURE`` on any status of 400 or above and on
    transport errors. Redirects are followed.
    """
    try:
        if client is not None:
            _post(client, report, endpoint)
        else:
            with httpx.Client(timeout=timeout, follow_redirects=True) as own_client:
                _post(own_client, report, endpoint)
    except TransportError as exc:
        log.warning("telemetry_send_failed", endpoint=endpoint, error=str(exc))
        return SendOutcome.FAILURE

    log.info(
        "telemetry_report_sent",
        report_id=report.id,
        instance=report.instance_id,
        product_family=report.product_family,
    )
    return SendOutcome.SUCCESS
