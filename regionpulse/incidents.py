"""Incident extraction from endpoint history and the 24h incident projection."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from regionpulse.monitor_state import HistoryPoint, round_half_up
from regionpulse.status import Status, is_down

MINUTES_PER_DAY: int = 1440
ONGOING: str = "ongoing"


@dataclass(frozen=True)
class Incident:
    """A maximal run of same-status down points of one endpoint.

    ``end`` is None while the incident is still ongoing (no closing up point).
    """

    address: str
    group: str
    status: Status
    start: datetime
    end: datetime | None

    @property
    def ongoing(self) -> bool:
        """True when the history ends inside this incident."""
        return self.end is None

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "address": self.address,
            "group": self.group,
            "status": str(self.status),
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end is not None else ONGOING,
        }


def extract_incidents(
    history: Iterable[HistoryPoint],
    address: str = "",
    group: str = "",
) -> list[Incident]:
    """Reconstruct discrete incidents from a chronological history.

    Caution and unreachable points are "down", everything else is "up". A run
    of down points becomes one incident per status: a caution -> unreachable
    flip inside a run closes the caution incident and opens an unreachable one.
    A run still open at the end of the history is emitted with ``end=None``.
    """
    incidents: list[Incident] = []
    open_status: Status | None = None
    open_start: datetime | None = None
    open_end: datetime | None = None

    for point in history:
        if is_down(point.status):
            if open_status is None:
                open_status, open_start, open_end = point.status, point.timestamp, point.timestamp
            elif open_status == point.status:
                open_end = point.timestamp
            else:
                incidents.append(Incident(address, group, open_status, open_start, open_end))
                open_status, open_start, open_end = point.status, point.timestamp, point.timestamp
        elif open_status is not None:
            incidents.append(Incident(address, group, open_status, open_start, open_end))
            open_status = open_start = open_end = None

    if open_status is not None:
        incidents.append(Incident(address, group, open_status, open_start, None))
    return incidents


@dataclass(frozen=True)
class Projection:
    """Observed incident rate and its linear 24h extrapolation.

    ``projected_24h_incidents`` multiplies the observed per-minute rate by
    1440. It is a straight-line extrapolation of a short window, not a
    statistical forecast: treat it as an order-of-magnitude indicator.
    """

    total_incidents: int
    monitoring_window_minutes: float
    incident_rate_per_minute: float
    projected_24h_incidents: int

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "total_incidents": self.total_incidents,
            "monitoring_window_minutes": self.monitoring_window_minutes,
            "incident_rate_per_minute": self.incident_rate_per_minute,
            "projected_24h_incidents": self.projected_24h_incidents,
            "method": "linear_extrapolation",
        }


def project(total_incidents: int, monitoring_window_minutes: float) -> Projection:
    """Extrapolate an incident count over a window to 24 hours."""
    if total_incidents < 0:
        msg = f"total_incidents must not be negative, got {total_incidents}"
        raise ValueError(msg)
    window = max(1.0, monitoring_window_minutes)
    rate = total_incidents / window
    return Projection(
        total_incidents=total_incidents,
        monitoring_window_minutes=window,
        incident_rate_per_minute=rate,
        projected_24h_incidents=round_half_up(rate * MINUTES_PER_DAY),
    )


def monitoring_window_minutes(histories: Iterable[Sequence[HistoryPoint]], now: datetime) -> float:
    """Minutes since the earliest history point across all histories (at least 1)."""
    earliest: datetime | None = None
    for history in histories:
        for point in history:
            if earliest is None or point.timestamp < earliest:
                earliest = point.timestamp
    if earliest is None:
        return 1.0
    return max(1.0, (now - earliest).total_seconds() / 60.0)


def compute_projection(histories: Sequence[Sequence[HistoryPoint]], now: datetime) -> Projection:
    """Count incidents across all histories and project their rate to 24h.

    With no history at all the window is one minute and the count is zero.
    """
    total = sum(len(extract_incidents(history)) for history in histories)
    return project(total, monitoring_window_minutes(histories, now))


__all__ = [
    "MINUTES_PER_DAY",
    "ONGOING",
    "Incident",
    "Projection",
    "compute_projection",
    "extract_incidents",
    "monitoring_window_minutes",
    "project",
]
