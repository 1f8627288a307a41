"""Simulated prober for demos and environments without network access."""

from __future__ import annotations

import asyncio
import random

from regionpulse.prober import ProbeResult
from regionpulse.registry import Endpoint


class SimulatedProber:
    """Random latency and a fixed success rate.

    Each probe draws a latency in ``[min_latency_ms, max_latency_ms)``, waits
    that long (unless ``sleep`` is False) and reports the endpoint reachable
    with probability ``success_rate``. Pass ``seed`` for reproducible runs.
    """

    def __init__(
        self,
        success_rate: float = 0.95,
        min_latency_ms: int = 20,
        max_latency_ms: int = 150,
        seed: int | None = None,
        sleep: bool = True,
    ) -> None:
        if not 0.0 <= success_rate <= 1.0:
            msg = f"success_rate must be between 0 and 1, got {success_rate}"
            raise ValueError(msg)
        if not 0 <= min_latency_ms < max_latency_ms:
            msg = "latency bounds must satisfy 0 <= min_latency_ms < max_latency_ms"
            raise ValueError(msg)
        self._success_rate = success_rate
        self._min_latency_ms = min_latency_ms
        self._max_latency_ms = max_latency_ms
        self._sleep = sleep
        self._random = random.Random(seed)

    async def probe(self, endpoint: Endpoint) -> ProbeResult:
        """Simulate a check of the endpoint target."""
        latency_ms = self._random.randrange(self._min_latency_ms, self._max_latency_ms)
        if self._sleep:
            await asyncio.sleep(latency_ms / 1000.0)
        reachable = self._random.random() < self._success_rate
        return ProbeResult(reachable=reachable, latency_ms=float(latency_ms))

    def prober_type(self) -> str:
        """Return the prober type."""
        return "simulated"
