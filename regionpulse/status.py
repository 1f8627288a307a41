"""Status model and the group status rollup."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum


class Status(StrEnum):
    """Sanitized status of an endpoint or group."""

    UNKNOWN = "unknown"
    CHECKING = "checking"
    OPERATIONAL = "operational"
    UNREACHABLE = "unreachable"
    CAUTION = "caution"


class LogSeverity(StrEnum):
    """Severity of an event log entry."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


# Most severe first.
SEVERITY_ORDER: tuple[Status, ...] = (
    Status.UNREACHABLE,
    Status.CAUTION,
    Status.CHECKING,
    Status.OPERATIONAL,
    Status.UNKNOWN,
)

DOWN_STATUSES: frozenset[Status] = frozenset({Status.CAUTION, Status.UNREACHABLE})


def is_down(status: Status) -> bool:
    """Return True for statuses counted as an outage (caution or unreachable)."""
    return status in DOWN_STATUSES


def severity_rank(status: Status) -> int:
    """Return the position of status in SEVERITY_ORDER (0 = most severe)."""
    return SEVERITY_ORDER.index(status)


def aggregate(statuses: Iterable[Status]) -> Status:
    """Roll up endpoint statuses into one group status.

    Precedence:
    1. empty group or any endpoint still checking → checking
    2. any unreachable → unreachable
    3. any caution → caution
    4. all operational → operational
    5. anything else (e.g. unknown members) → unknown

    A group is never reported healthier than its worst probed member.
    """
    values = list(statuses)
    if not values:
        return Status.CHECKING
    if Status.CHECKING in values:
        return Status.CHECKING
    if Status.UNREACHABLE in values:
        return Status.UNREACHABLE
    if Status.CAUTION in values:
        return Status.CAUTION
    if all(s == Status.OPERATIONAL for s in values):
        return Status.OPERATIONAL
    return Status.UNKNOWN


__all__ = [
    "DOWN_STATUSES",
    "SEVERITY_ORDER",
    "LogSeverity",
    "Status",
    "aggregate",
    "is_down",
    "severity_rank",
]
