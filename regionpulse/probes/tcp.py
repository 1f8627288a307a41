"""TCP connect prober."""

from __future__ import annotations

import asyncio
import logging
import time

from regionpulse.prober import ProbeResult, ProbeTimeoutError
from regionpulse.registry import Endpoint

logger = logging.getLogger("regionpulse.probes.tcp")


class TCPProber:
    """Reachability via a TCP handshake: connected = up, refused/unreachable = down."""

    def __init__(self, port: int = 443, timeout: float = 5.0) -> None:
        self._port = port
        self._timeout = timeout

    async def probe(self, endpoint: Endpoint) -> ProbeResult:
        """Open a TCP connection to the endpoint target and close it immediately."""
        start = time.monotonic()
        try:
            _reader, writer = await asyncio.wait_for(
                asyncio.open_connection(endpoint.target, self._port),
                timeout=self._timeout,
            )
        except TimeoutError as exc:
            msg = f"TCP connection to {endpoint.target}:{self._port} timed out"
            raise ProbeTimeoutError(msg) from exc
        except OSError as e:
            logger.debug("TCP connection to %s:%d failed: %s", endpoint.target, self._port, e)
            return ProbeResult(reachable=False, latency_ms=None)

        latency_ms = (time.monotonic() - start) * 1000.0
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            # Peer reset during close; the handshake already succeeded.
            logger.debug("TCP close to %s:%d failed: %s", endpoint.target, self._port, e)
        return ProbeResult(reachable=True, latency_ms=latency_ms)

    def prober_type(self) -> str:
        """Return the prober type."""
        return "tcp"
