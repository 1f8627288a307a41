"""Report computation: status table, regional latency, incidents and projection.

Only the numbers are computed here; rendering them into a document is up to
the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

from regionpulse.incidents import (
    Incident,
    Projection,
    compute_projection,
    extract_incidents,
)
from regionpulse.monitor_state import EndpointSnapshot, round_half_up
from regionpulse.registry import Registry
from regionpulse.status import Status, aggregate


@dataclass(frozen=True)
class StatusRow:
    """Current status of one endpoint."""

    group: str
    address: str
    status: Status
    latency_ms: int | None

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "group": self.group,
            "address": self.address,
            "status": str(self.status),
            "latency_ms": self.latency_ms,
        }


@dataclass(frozen=True)
class GroupRow:
    """Rolled-up status and average smoothed latency of one group."""

    group: str
    status: Status
    average_latency_ms: int | None
    reporting: int
    total: int

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "group": self.group,
            "status": str(self.status),
            "average_latency_ms": self.average_latency_ms,
            "reporting": self.reporting,
            "total": self.total,
        }


@dataclass(frozen=True)
class Report:
    """Everything a status report needs, computed at ``generated_at``."""

    generated_at: datetime
    status_rows: tuple[StatusRow, ...] = field(default_factory=tuple)
    group_rows: tuple[GroupRow, ...] = field(default_factory=tuple)
    incident_rows: tuple[Incident, ...] = field(default_factory=tuple)
    projection: Projection | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "generated_at": self.generated_at.isoformat(),
            "status": [row.to_dict() for row in self.status_rows],
            "groups": [row.to_dict() for row in self.group_rows],
            "incidents": [incident.to_dict() for incident in self.incident_rows],
            "projection": self.projection.to_dict() if self.projection is not None else None,
        }


def build_report(
    registry: Registry,
    snapshots: Mapping[str, EndpointSnapshot],
    now: datetime,
) -> Report:
    """Compute report rows from the registry and endpoint snapshots.

    Endpoints without a snapshot are reported as unknown with no latency and
    contribute no history.
    """
    status_rows: list[StatusRow] = []
    group_rows: list[GroupRow] = []
    incident_rows: list[Incident] = []
    histories = []

    for group in registry.groups:
        latencies: list[int] = []
        statuses: list[Status] = []
        for ep in group.endpoints:
            snap = snapshots.get(ep.address)
            status = snap.status if snap is not None else Status.UNKNOWN
            latency = snap.latency_ms if snap is not None else None
            statuses.append(status)
            status_rows.append(
                StatusRow(group=group.name, address=ep.address, status=status, latency_ms=latency)
            )
            if latency is not None:
                latencies.append(latency)
            if snap is not None and snap.history:
                histories.append(snap.history)
                incident_rows.extend(extract_incidents(snap.history, ep.address, group.name))

        average = round_half_up(sum(latencies) / len(latencies)) if latencies else None
        group_rows.append(
            GroupRow(
                group=group.name,
                status=aggregate(statuses),
                average_latency_ms=average,
                reporting=len(latencies),
                total=len(group.endpoints),
            )
        )

    return Report(
        generated_at=now,
        status_rows=tuple(status_rows),
        group_rows=tuple(group_rows),
        incident_rows=tuple(incident_rows),
        projection=compute_projection(histories, now),
    )


__all__ = [
    "GroupRow",
    "Report",
    "StatusRow",
    "build_report",
]
