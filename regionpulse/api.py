"""Public API: RegionPulse facade and prober factory."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import os
from collections.abc import Callable
from datetime import datetime, timedelta

from prometheus_client import CollectorRegistry

from regionpulse.engine import MonitoringEngine
from regionpulse.event_log import LogEntry
from regionpulse.metrics import MetricsExporter
from regionpulse.monitor_state import EndpointSnapshot
from regionpulse.prober import Prober
from regionpulse.probes.http import HTTPProber
from regionpulse.probes.simulated import SimulatedProber
from regionpulse.probes.tcp import TCPProber
from regionpulse.regions import DEFAULT_REGISTRY
from regionpulse.registry import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PROBE_TIMEOUT,
    EngineConfig,
    Registry,
)
from regionpulse.report import Report
from regionpulse.status import Status

logger = logging.getLogger("regionpulse")

ENV_POLL_INTERVAL = "REGIONPULSE_POLL_INTERVAL"
ENV_PROBE_TIMEOUT = "REGIONPULSE_PROBE_TIMEOUT"
ENV_PROBER = "REGIONPULSE_PROBER"

PROBER_KINDS: tuple[str, ...] = ("tcp", "http", "simulated")


def build_prober(kind: str = "tcp", timeout: float = DEFAULT_PROBE_TIMEOUT) -> Prober:
    """Create a prober by kind: tcp, http or simulated."""
    kind = kind.lower()
    if kind == "tcp":
        return TCPProber(timeout=timeout)
    if kind == "http":
        return HTTPProber(timeout=timeout)
    if kind == "simulated":
        return SimulatedProber()
    msg = f"unknown prober kind {kind!r}, expected one of {', '.join(PROBER_KINDS)}"
    raise ValueError(msg)


def _env_seconds(name: str) -> float | None:
    """Read a positive number of seconds from the environment."""
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except ValueError as e:
        msg = f"invalid value for {name}: {raw!r}, expected a number of seconds"
        raise ValueError(msg) from e
    if value <= 0:
        msg = f"invalid value for {name}: {raw!r}, must be positive"
        raise ValueError(msg)
    return value


class RegionPulse:
    """Main object: regional endpoint monitoring.

    Example:

        rp = RegionPulse(
            registry_from_dict(config),
            TCPProber(port=443),
            poll_interval=timedelta(seconds=60),
        )
        await rp.start()
        # ...
        print(rp.group_statuses())
        await rp.stop()

    Environment overrides: REGIONPULSE_POLL_INTERVAL and
    REGIONPULSE_PROBE_TIMEOUT (seconds) take precedence over the arguments;
    REGIONPULSE_PROBER selects the prober when none is passed.
    """

    def __init__(
        self,
        registry: Registry | None = None,
        prober: Prober | None = None,
        *,
        poll_interval: timedelta | None = None,
        probe_timeout: timedelta | None = None,
        metrics_registry: CollectorRegistry | None = None,
        log: logging.Logger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._log = log or logger
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._registry.validate()

        interval = _env_seconds(ENV_POLL_INTERVAL)
        if interval is None:
            interval = poll_interval.total_seconds() if poll_interval else DEFAULT_POLL_INTERVAL
        timeout = _env_seconds(ENV_PROBE_TIMEOUT)
        if timeout is None:
            timeout = probe_timeout.total_seconds() if probe_timeout else DEFAULT_PROBE_TIMEOUT

        config = EngineConfig(poll_interval=interval, probe_timeout=timeout)
        config.validate()

        if prober is None:
            prober = build_prober(os.environ.get(ENV_PROBER, "tcp"), timeout=timeout)

        self._metrics = MetricsExporter(registry=metrics_registry)
        self._engine = MonitoringEngine(
            self._registry,
            prober,
            config=config,
            metrics=self._metrics,
            log=self._log,
            clock=clock,
        )
        self._log.debug(
            "RegionPulse configured: %d groups, %d endpoints, %s prober, interval %.1fs",
            len(self._registry.groups),
            len(self._registry),
            prober.prober_type(),
            config.poll_interval,
        )

    @property
    def engine(self) -> MonitoringEngine:
        """The underlying monitoring engine."""
        return self._engine

    @property
    def registry(self) -> Registry:
        """The endpoint registry being monitored."""
        return self._registry

    @property
    def in_progress(self) -> bool:
        """True while a poll cycle is running."""
        return self._engine.in_progress

    async def start(self) -> None:
        """Start monitoring (asyncio)."""
        await self._engine.start()

    async def stop(self) -> None:
        """Stop monitoring (asyncio)."""
        await self._engine.stop()

    def start_sync(self) -> None:
        """Start monitoring (threading fallback)."""
        self._engine.start_sync()

    def stop_sync(self) -> None:
        """Stop monitoring (threading fallback)."""
        self._engine.stop_sync()

    async def run_cycle(self) -> bool:
        """Run one poll cycle now and wait for it."""
        return await self._engine.run_cycle()

    def trigger_cycle(self) -> asyncio.Task[bool] | concurrent.futures.Future[bool] | None:
        """Schedule an immediate poll cycle; None if one is already running.

        Works in both modes: in sync mode the cycle is submitted to the
        monitoring thread and a concurrent future is returned.
        """
        return self._engine.trigger_cycle()

    def snapshots(self) -> dict[str, EndpointSnapshot]:
        """Current state of every endpoint."""
        return self._engine.snapshots()

    def group_statuses(self) -> dict[str, Status]:
        """Rolled-up status of every group."""
        return self._engine.group_statuses()

    def logs(self) -> tuple[LogEntry, ...]:
        """Event log, newest first."""
        return self._engine.logs()

    def report(self) -> Report:
        """Report rows, incidents and 24h projection."""
        return self._engine.report()

    def publish_metrics(self) -> None:
        """Refresh group gauges before a scrape."""
        self._engine.publish_group_metrics()


__all__ = [
    "ENV_POLL_INTERVAL",
    "ENV_PROBER",
    "ENV_PROBE_TIMEOUT",
    "PROBER_KINDS",
    "RegionPulse",
    "build_prober",
]
