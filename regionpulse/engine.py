"""Monitoring engine: periodic poll cycles over all registered endpoints."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import math
import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime

from regionpulse.event_log import EventLog, LogEntry, notice_message
from regionpulse.metrics import CYCLE_COMPLETED, CYCLE_SKIPPED, MetricsExporter
from regionpulse.monitor_state import EndpointMonitorState, EndpointSnapshot
from regionpulse.prober import Prober, ProbeTimeoutError
from regionpulse.registry import Endpoint, EngineConfig, Group, Registry
from regionpulse.report import Report, build_report
from regionpulse.status import Status, aggregate

logger = logging.getLogger("regionpulse.engine")

# Snapshots older than this many poll intervals are flagged stale.
STALE_INTERVALS: float = 2.0


class EndpointNotFoundError(Exception):
    """Raised when a lookup targets an address that is not registered."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Endpoint not found: {address}")


class GroupNotFoundError(Exception):
    """Raised when a lookup targets a group that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Group not found: {name}")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class MonitoringEngine:
    """Owns the per-endpoint state and drives poll cycles.

    A poll cycle probes every endpoint concurrently and completes when all
    probes have completed. Only one cycle runs at a time: a cycle requested
    while another is running is skipped.

    Supports two modes:
    - asyncio (primary): a background task started by ``start()``
    - threading (fallback): a daemon thread with its own event loop
    """

    def __init__(
        self,
        registry: Registry,
        prober: Prober,
        config: EngineConfig | None = None,
        metrics: MetricsExporter | None = None,
        log: logging.Logger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._registry = registry
        self._registry.validate()
        self._prober = prober
        self._config = config or EngineConfig()
        self._config.validate()
        self._metrics = metrics
        self._log = log or logger
        self._clock = clock or _utc_now

        self._endpoints: list[tuple[Group, Endpoint]] = list(registry.endpoints())
        self._states: dict[str, EndpointMonitorState] = {}
        for group, ep in self._endpoints:
            self._states[ep.address] = EndpointMonitorState(
                address=ep.address,
                group=group.name,
                is_range=ep.is_range,
                outage_threshold=self._config.outage_threshold,
                history_capacity=self._config.history_capacity,
            )
        self._event_log = EventLog(capacity=self._config.log_capacity)

        # Guards per-endpoint state against readers on other threads.
        self._lock = threading.Lock()
        # Single-slot cycle guard; acquired without blocking.
        self._cycle_guard = threading.Lock()
        self._in_progress = False

        self._task: asyncio.Task[None] | None = None
        self._triggered: set[asyncio.Task[bool]] = set()
        # Loop the periodic cycles run on, in either mode.
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._stopped = False

        if not self._endpoints:
            self._log.warning("No endpoints registered; every group will report checking")

    @property
    def registry(self) -> Registry:
        """The static endpoint registry."""
        return self._registry

    @property
    def config(self) -> EngineConfig:
        """The engine configuration."""
        return self._config

    @property
    def in_progress(self) -> bool:
        """True from the start of a poll cycle until all of its probes complete."""
        return self._in_progress

    # --- Lifecycle ---

    async def start(self) -> None:
        """Start periodic poll cycles (asyncio). The first cycle runs immediately."""
        if self._task is not None or self._thread is not None:
            msg = "Engine already started"
            raise RuntimeError(msg)
        self._stopped = False
        self._loop = asyncio.get_running_loop()
        self._task = self._loop.create_task(self._run_loop())
        self._log.info("Monitoring engine started (%d endpoints)", len(self._endpoints))

    async def stop(self) -> None:
        """Stop periodic poll cycles and abandon in-flight probes (asyncio)."""
        self._stopped = True
        tasks: list[asyncio.Task[object]] = list(self._triggered)
        if self._task is not None:
            tasks.append(self._task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._loop = None
        self._triggered.clear()
        self._log.info("Monitoring engine stopped")

    def start_sync(self) -> None:
        """Start periodic poll cycles in a background thread (fallback).

        The thread owns a private event loop that stays running between
        cycles, so ``trigger_cycle()`` from any other thread is served on it.
        """
        if self._task is not None or self._thread is not None:
            msg = "Engine already started"
            raise RuntimeError(msg)
        self._stopped = False
        self._stop_event.clear()
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_thread, args=(self._loop,), daemon=True)
        self._thread.start()
        self._log.info(
            "Monitoring engine started in sync mode (%d endpoints)", len(self._endpoints)
        )

    def stop_sync(self) -> None:
        """Stop the background thread; the running cycle is allowed to drain."""
        self._stopped = True
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self._config.probe_timeout + 5.0)
            self._thread = None
        self._loop = None
        self._log.info("Monitoring engine stopped (sync mode)")

    # --- Commands ---

    async def run_cycle(self) -> bool:
        """Run one poll cycle. Returns False if another cycle was already running."""
        if not self._cycle_guard.acquire(blocking=False):
            self._log.debug("Poll cycle already in progress, skipping")
            if self._metrics is not None:
                self._metrics.count_cycle(CYCLE_SKIPPED)
            return False
        try:
            self._set_in_progress(True)
            results = await asyncio.gather(
                *(self._probe_once(group, ep) for group, ep in self._endpoints),
                return_exceptions=True,
            )
        finally:
            self._set_in_progress(False)
            self._cycle_guard.release()

        for (group, ep), result in zip(self._endpoints, results, strict=True):
            if isinstance(result, Exception):
                self._log.error(
                    "Recording probe of %s (%s) failed: %s",
                    ep.address,
                    group.name,
                    result,
                    exc_info=result,
                )

        if self._metrics is not None:
            self.publish_group_metrics()
            self._metrics.count_cycle(CYCLE_COMPLETED)
        return True

    def run_cycle_sync(self) -> bool:
        """Run one poll cycle from synchronous code (no running event loop)."""
        return asyncio.run(self.run_cycle())

    def trigger_cycle(self) -> asyncio.Task[bool] | concurrent.futures.Future[bool] | None:
        """Schedule an immediate poll cycle outside the periodic schedule.

        On the engine's loop (or any running loop when the engine is not
        started) the cycle becomes an asyncio task. From any other thread,
        e.g. while the engine runs in sync mode, it is submitted to the
        engine's loop and a concurrent future is returned.

        Returns None when a cycle is already in progress (the request is
        dropped) or when no event loop is available to run it.
        """
        if self._cycle_guard.locked():
            self._log.debug("Poll cycle already in progress, trigger ignored")
            if self._metrics is not None:
                self._metrics.count_cycle(CYCLE_SKIPPED)
            return None

        try:
            running: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None and (self._loop is None or running is self._loop):
            task = running.create_task(self.run_cycle())
            self._triggered.add(task)
            task.add_done_callback(self._triggered.discard)
            return task

        loop = self._loop
        if loop is None or loop.is_closed():
            self._log.debug("No event loop to run a poll cycle on, trigger ignored")
            return None
        return asyncio.run_coroutine_threadsafe(self.run_cycle(), loop)

    # --- Read interface ---

    def snapshot(self, address: str) -> EndpointSnapshot:
        """Return the current state of one endpoint."""
        now = self._clock()
        with self._lock:
            state = self._states.get(address)
            if state is None:
                raise EndpointNotFoundError(address)
            return state.snapshot(stale_after=self._stale_after(), now=now)

    def snapshots(self) -> dict[str, EndpointSnapshot]:
        """Return the current state of all endpoints, keyed by address, in registry order."""
        now = self._clock()
        stale_after = self._stale_after()
        with self._lock:
            return {
                address: state.snapshot(stale_after=stale_after, now=now)
                for address, state in self._states.items()
            }

    def group_status(self, name: str) -> Status:
        """Return the rolled-up status of one group."""
        group = self._registry.group(name)
        if group is None:
            raise GroupNotFoundError(name)
        with self._lock:
            return aggregate(self._states[ep.address].status for ep in group.endpoints)

    def group_statuses(self) -> dict[str, Status]:
        """Return the rolled-up status of every group, in registry order."""
        with self._lock:
            return {
                group.name: aggregate(self._states[ep.address].status for ep in group.endpoints)
                for group in self._registry.groups
            }

    def logs(self) -> tuple[LogEntry, ...]:
        """Return the event log, newest first."""
        return self._event_log.entries()

    def report(self, now: datetime | None = None) -> Report:
        """Compute report rows, incidents and the 24h projection."""
        return build_report(self._registry, self.snapshots(), now or self._clock())

    def publish_group_metrics(self) -> None:
        """Push the current group statuses to the metrics exporter."""
        if self._metrics is None:
            return
        for name, status in self.group_statuses().items():
            self._metrics.set_group_status(name, status)

    # --- Internals ---

    def _stale_after(self) -> float:
        return self._config.poll_interval * STALE_INTERVALS

    def _set_in_progress(self, value: bool) -> None:
        self._in_progress = value
        if self._metrics is not None:
            self._metrics.set_in_progress(value)

    async def _run_loop(self) -> None:
        """Periodic cycle loop (asyncio)."""
        if self._config.initial_delay > 0:
            await asyncio.sleep(self._config.initial_delay)

        loop = asyncio.get_running_loop()
        while not self._stopped:
            started = loop.time()
            await self._guarded_cycle()
            await asyncio.sleep(max(0.0, self._config.poll_interval - (loop.time() - started)))

    def _run_thread(self, loop: asyncio.AbstractEventLoop) -> None:
        """Periodic cycle loop (threading)."""
        try:
            loop.run_until_complete(self._run_sync_loop())
            # Let cycles submitted by trigger_cycle() drain.
            pending = asyncio.all_tasks(loop)
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_default_executor())
        finally:
            loop.close()

    async def _run_sync_loop(self) -> None:
        """Cycle loop of the background thread; waits on the stop event off-loop."""
        loop = asyncio.get_running_loop()
        if self._config.initial_delay > 0:
            await loop.run_in_executor(None, self._stop_event.wait, self._config.initial_delay)

        while not self._stopped and not self._stop_event.is_set():
            started = loop.time()
            await self._guarded_cycle()
            delay = max(0.0, self._config.poll_interval - (loop.time() - started))
            await loop.run_in_executor(None, self._stop_event.wait, delay)

    async def _guarded_cycle(self) -> None:
        """Run one periodic cycle; a failed cycle is logged and the schedule goes on."""
        try:
            await self.run_cycle()
        except Exception:
            self._log.exception("Poll cycle failed")

    async def _probe_once(self, group: Group, ep: Endpoint) -> None:
        """Probe one endpoint; any timeout or error counts as a raw failure."""
        start = time.monotonic()
        reachable = False
        latency_ms: float | None = None
        try:
            result = await asyncio.wait_for(
                self._prober.probe(ep),
                timeout=self._config.probe_timeout,
            )
            reachable = result.reachable
            latency_ms = result.latency_ms
        except (ProbeTimeoutError, TimeoutError):
            self._log.debug("Probe of %s (%s) timed out", ep.address, group.name)
        except Exception as e:
            self._log.debug("Probe of %s (%s) failed: %s", ep.address, group.name, e)

        duration = time.monotonic() - start
        if reachable and (latency_ms is None or not math.isfinite(latency_ms)):
            latency_ms = duration * 1000.0
        self._apply(group, ep, reachable, latency_ms, duration)

    def _apply(
        self,
        group: Group,
        ep: Endpoint,
        reachable: bool,
        latency_ms: float | None,
        duration: float,
    ) -> None:
        """Commit one probe result to the endpoint state, event log and metrics."""
        now = self._clock()
        with self._lock:
            state = self._states[ep.address]
            transition = state.record(reachable, latency_ms, now)
            snap = state.snapshot()

        if transition.notice is not None:
            self._event_log.append(
                notice_message(transition.notice, ep.address, group.name),
                transition.notice,
                now,
            )

        if self._metrics is not None:
            self._metrics.observe_duration(group.name, ep.address, duration)
            self._metrics.observe_endpoint(snap)


__all__ = [
    "EndpointNotFoundError",
    "GroupNotFoundError",
    "MonitoringEngine",
]
