"""Value objects for a single telemetry report.

All models are frozen dataclasses. ``OutboundReport.to_dict`` produces the
envelope expected by the collection service; field names there are part of
the wire format and must not change. No user data is ever included, only the
product, its version and coarse host attributes.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

CREATE_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Metric keys carried by every report
METRIC_PILLAR_VERSION = "pillar_version"
METRIC_OS = "OS"
METRIC_HARDWARE_ARCH = "hardware_arch"
METRIC_DEPLOYMENT = "deployment"


class SendOutcome(Enum):
    """Result of a single delivery attempt."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ReportRequest:
    """Everything needed to build and deliver one report."""

    product_family: str
    product_version: str
    operating_system: str
    deployment_method: str
    instance_id: str
    endpoint: str
    timeout: float


@dataclass(frozen=True)
class Metric:
    key: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class OutboundReport:
    """A report about one product installation on this host."""

    instance_id: str
    product_family: str
    metrics: tuple[Metric, ...]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    create_time: datetime = field(
        default_factory=lambda: datetime.now(UTC).replace(microsecond=0)
    )

    @property
    def create_time_text(self) -> str:
        return self.create_time.astimezone(UTC).strftime(CREATE_TIME_FORMAT)

    def to_dict(self) -> dict[str, Any]:
        return {
            "reports": [
                {
                    "id": self.id,
                    "createTime": self.create_time_text,
                    "instanceId": self.instance_id,
                    "product_family": self.product_family,
                    "metrics": [metric.to_dict() for metric in self.metrics],
                }
            ]
        }

    def to_json(self) -> str:
        """Serialise the envelope; all string values are fully JSON-escaped."""
        return json.dumps(self.to_dict())
