"""Per-endpoint monitor state: hysteresis, latency smoothing and history.

Status transitions for one endpoint, driven by the raw probe verdict and the
consecutive failure counter (threshold N, default 2)::

    failure, counter < N   -> caution       (warning notice)
    failure, counter == N  -> unreachable   (error notice)
    failure, counter > N   -> unreachable   (no notice)
    success                -> operational   (success notice if counter was >= N)

``checking`` and ``unknown`` are entry states only: once a probe has
completed they are never re-entered.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from regionpulse.registry import DEFAULT_HISTORY_CAPACITY, DEFAULT_OUTAGE_THRESHOLD
from regionpulse.status import LogSeverity, Status

# Weights of the latency moving average.
LATENCY_HISTORY_WEIGHT: float = 0.6
LATENCY_SAMPLE_WEIGHT: float = 0.4


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3)."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class Transition:
    """Outcome of applying one raw verdict to the state machine."""

    status: Status
    consecutive_failures: int
    notice: LogSeverity | None = None


def apply_verdict(
    consecutive_failures: int,
    reachable: bool,
    outage_threshold: int = DEFAULT_OUTAGE_THRESHOLD,
) -> Transition:
    """Compute the sanitized status for a raw verdict.

    A single failure only raises caution; the outage is confirmed when the
    failure counter reaches ``outage_threshold``.
    """
    if reachable:
        notice = LogSeverity.SUCCESS if consecutive_failures >= outage_threshold else None
        return Transition(status=Status.OPERATIONAL, consecutive_failures=0, notice=notice)

    count = consecutive_failures + 1
    if count < outage_threshold:
        return Transition(
            status=Status.CAUTION, consecutive_failures=count, notice=LogSeverity.WARNING
        )
    if count == outage_threshold:
        return Transition(
            status=Status.UNREACHABLE, consecutive_failures=count, notice=LogSeverity.ERROR
        )
    return Transition(status=Status.UNREACHABLE, consecutive_failures=count)


def smooth_latency(previous: int | None, sample: float) -> int:
    """Exponential moving average of latency samples (60% history, 40% new sample)."""
    if previous is None:
        return round_half_up(sample)
    return round_half_up(previous * LATENCY_HISTORY_WEIGHT + sample * LATENCY_SAMPLE_WEIGHT)


@dataclass(frozen=True)
class HistoryPoint:
    """Sanitized status recorded at the end of one probe."""

    timestamp: datetime
    status: Status

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {"timestamp": self.timestamp.isoformat(), "status": str(self.status)}


@dataclass
class EndpointMonitorState:
    """Mutable monitoring state of a single endpoint, owned by the engine."""

    address: str
    group: str
    is_range: bool = False
    status: Status = Status.CHECKING
    consecutive_failures: int = 0
    latency_ewma: int | None = None
    last_checked_at: datetime | None = None
    probes_total: int = 0
    failures_total: int = 0
    outage_threshold: int = DEFAULT_OUTAGE_THRESHOLD
    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    history: deque[HistoryPoint] = field(init=False)

    def __post_init__(self) -> None:
        self.history = deque(maxlen=self.history_capacity)

    def record(self, reachable: bool, latency_ms: float | None, timestamp: datetime) -> Transition:
        """Apply one raw probe verdict: hysteresis, smoothing, then history append."""
        transition = apply_verdict(self.consecutive_failures, reachable, self.outage_threshold)
        self.status = transition.status
        self.consecutive_failures = transition.consecutive_failures

        self.probes_total += 1
        if reachable:
            if latency_ms is not None:
                self.latency_ewma = smooth_latency(self.latency_ewma, latency_ms)
        else:
            self.failures_total += 1

        # deque(maxlen) evicts the oldest point on overflow.
        self.history.append(HistoryPoint(timestamp=timestamp, status=transition.status))
        self.last_checked_at = timestamp
        return transition

    def snapshot(
        self, stale_after: float | None = None, now: datetime | None = None
    ) -> EndpointSnapshot:
        """Return an immutable view of the current state.

        ``stale_after`` (seconds) marks the snapshot stale when the last
        completed probe is older than that; a never-probed endpoint is always
        stale.
        """
        if self.last_checked_at is None:
            stale = True
        elif stale_after is not None and now is not None:
            stale = (now - self.last_checked_at).total_seconds() > stale_after
        else:
            stale = False
        return EndpointSnapshot(
            address=self.address,
            group=self.group,
            is_range=self.is_range,
            status=self.status,
            latency_ms=self.latency_ewma,
            consecutive_failures=self.consecutive_failures,
            history=tuple(self.history),
            last_checked_at=self.last_checked_at,
            stale=stale,
            probes_total=self.probes_total,
            failures_total=self.failures_total,
        )


@dataclass(frozen=True)
class EndpointSnapshot:
    """Read-only view of one endpoint, returned by the engine."""

    address: str
    group: str
    is_range: bool
    status: Status
    latency_ms: int | None
    consecutive_failures: int
    history: tuple[HistoryPoint, ...]
    last_checked_at: datetime | None
    stale: bool
    probes_total: int = 0
    failures_total: int = 0

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "address": self.address,
            "group": self.group,
            "is_range": self.is_range,
            "status": str(self.status),
            "latency_ms": self.latency_ms,
            "consecutive_failures": self.consecutive_failures,
            "history": [p.to_dict() for p in self.history],
            "last_checked_at": (self.last_checked_at.isoformat() if self.last_checked_at else None),
            "stale": self.stale,
            "probes_total": self.probes_total,
            "failures_total": self.failures_total,
        }


__all__ = [
    "EndpointMonitorState",
    "EndpointSnapshot",
    "HistoryPoint",
    "Transition",
    "apply_verdict",
    "round_half_up",
    "smooth_latency",
]
