"""Instance identifier reconciliation.

A valid stored identifier always wins. When the stored one is missing or
malformed, the caller-supplied candidate is used if it is well formed, and a
fresh UUID4 is generated otherwise. Replacing the identifier discards every
"already reported" marker, since those were recorded under the old one.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass

from percona_telemetry.state import INSTANCE_ID_KEY, TelemetryState

# 8-4-4-4-12 hex groups, either case; the version nibble is not checked
_INSTANCE_ID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


@dataclass(frozen=True)
class IdentityResolution:
    """Outcome of reconciling the stored and supplied instance identifiers."""

    instance_id: str
    state: TelemetryState
    changed: bool


def is_valid_instance_id(value: str | None) -> bool:
    """Check whether ``value`` has the textual UUID layout."""
    if not value:
        return False
    return _INSTANCE_ID_RE.fullmatch(value) is not None


def generate_instance_id() -> str:
    """Generate an opaque instance identifier (UUID4)."""
    return str(uuid.uuid4())


def resolve_instance_id(
    state: TelemetryState, candidate: str | None = None
) -> IdentityResolution:
    """Pick the effective instance identifier for this run.

    The input mapping is never modified. When the identifier changes, the
    returned state is a new mapping holding only ``instanceId``.
    """
    stored = state.get(INSTANCE_ID_KEY, "")
    if is_valid_instance_id(stored):
        return IdentityResolution(instance_id=stored, state=state, changed=False)

    if candidate and is_valid_instance_id(candidate):
        instance_id = candidate
    else:
        instance_id = generate_instance_id()
    return IdentityResolution(
        instance_id=instance_id,
        state={INSTANCE_ID_KEY: instance_id},
        changed=True,
    )
