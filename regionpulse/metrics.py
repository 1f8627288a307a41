"""Prometheus exporter for endpoint and group monitoring metrics.

Exports:
- regionpulse_endpoint_up (Gauge, 0/1)
- regionpulse_endpoint_status (Gauge, enum pattern: one series per status)
- regionpulse_endpoint_latency_ms (Gauge, smoothed latency)
- regionpulse_endpoint_consecutive_failures (Gauge)
- regionpulse_probe_duration_seconds (Histogram)
- regionpulse_group_status (Gauge, enum pattern per group)
- regionpulse_cycle_in_progress (Gauge, 0/1)
- regionpulse_cycles_total (Counter, by outcome)
"""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from regionpulse.monitor_state import EndpointSnapshot
from regionpulse.status import Status

_DEFAULT_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
_ENDPOINT_LABEL_NAMES = ("group", "address")

CYCLE_COMPLETED = "completed"
CYCLE_SKIPPED = "skipped"


class MetricsExporter:
    """Export monitoring state to Prometheus."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        reg = registry if registry is not None else REGISTRY

        self._up = Gauge(
            "regionpulse_endpoint_up",
            "Whether the endpoint is operational (1) or not (0)",
            labelnames=_ENDPOINT_LABEL_NAMES,
            registry=reg,
        )

        self._status = Gauge(
            "regionpulse_endpoint_status",
            "Sanitized status of the endpoint",
            labelnames=_ENDPOINT_LABEL_NAMES + ("status",),
            registry=reg,
        )

        self._latency = Gauge(
            "regionpulse_endpoint_latency_ms",
            "Smoothed probe latency of the endpoint in milliseconds",
            labelnames=_ENDPOINT_LABEL_NAMES,
            registry=reg,
        )

        self._failures = Gauge(
            "regionpulse_endpoint_consecutive_failures",
            "Consecutive failed probes since the last success",
            labelnames=_ENDPOINT_LABEL_NAMES,
            registry=reg,
        )

        self._duration = Histogram(
            "regionpulse_probe_duration_seconds",
            "Wall time of a single probe in seconds, including timeouts",
            labelnames=_ENDPOINT_LABEL_NAMES,
            buckets=_DEFAULT_BUCKETS,
            registry=reg,
        )

        self._group_status = Gauge(
            "regionpulse_group_status",
            "Rolled-up status of the group",
            labelnames=("group", "status"),
            registry=reg,
        )

        self._in_progress = Gauge(
            "regionpulse_cycle_in_progress",
            "Whether a poll cycle is running (1) or not (0)",
            registry=reg,
        )

        self._cycles = Counter(
            "regionpulse_cycles",
            "Poll cycles by outcome",
            labelnames=("outcome",),
            registry=reg,
        )

    def observe_endpoint(self, snapshot: EndpointSnapshot) -> None:
        """Publish the state of one endpoint."""
        labels = {"group": snapshot.group, "address": snapshot.address}
        self._up.labels(**labels).set(1.0 if snapshot.status == Status.OPERATIONAL else 0.0)
        for status in Status:
            self._status.labels(**labels, status=str(status)).set(
                1.0 if status == snapshot.status else 0.0
            )
        if snapshot.latency_ms is not None:
            self._latency.labels(**labels).set(snapshot.latency_ms)
        self._failures.labels(**labels).set(snapshot.consecutive_failures)

    def observe_duration(self, group: str, address: str, duration: float) -> None:
        """Record the wall time of one probe."""
        self._duration.labels(group=group, address=address).observe(duration)

    def set_group_status(self, group: str, status: Status) -> None:
        """Set the group status enum gauge (exactly one value = 1)."""
        for value in Status:
            self._group_status.labels(group=group, status=str(value)).set(
                1.0 if value == status else 0.0
            )

    def set_in_progress(self, in_progress: bool) -> None:
        """Set the cycle in-progress gauge."""
        self._in_progress.set(1.0 if in_progress else 0.0)

    def count_cycle(self, outcome: str) -> None:
        """Count a completed or skipped poll cycle."""
        self._cycles.labels(outcome=outcome).inc()


__all__ = [
    "CYCLE_COMPLETED",
    "CYCLE_SKIPPED",
    "MetricsExporter",
]
