"""HTTP HEAD prober."""

from __future__ import annotations

import logging
import time
from typing import Any

import aiohttp

from regionpulse.prober import ProbeInfrastructureError, ProbeResult, ProbeTimeoutError
from regionpulse.registry import Endpoint

logger = logging.getLogger("regionpulse.probes.http")


class HTTPProber:
    """Reachability via an HTTP HEAD request.

    Any HTTP response, whatever its status code, proves the host is reachable:
    infrastructure endpoints rarely serve a meaningful page at ``/``.
    """

    def __init__(
        self,
        port: int = 80,
        path: str = "/",
        tls: bool = False,
        tls_skip_verify: bool = False,
        timeout: float = 5.0,
    ) -> None:
        if not path.startswith("/"):
            msg = f"path must start with '/': {path!r}"
            raise ValueError(msg)
        self._port = port
        self._path = path
        self._tls = tls
        self._tls_skip_verify = tls_skip_verify
        self._timeout = timeout

    async def probe(self, endpoint: Endpoint) -> ProbeResult:
        """Send a HEAD request and report whether any response came back."""
        scheme = "https" if self._tls else "http"
        url = f"{scheme}://{endpoint.target}:{self._port}{self._path}"

        connector_kwargs: dict[str, Any] = {}
        if self._tls_skip_verify:
            import ssl

            ctx = ssl.create_default_context()
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
            connector_kwargs["ssl"] = ctx

        timeout = aiohttp.ClientTimeout(total=self._timeout)
        start = time.monotonic()
        try:
            async with (
                aiohttp.ClientSession(
                    timeout=timeout,
                    connector=aiohttp.TCPConnector(**connector_kwargs),
                ) as session,
                session.head(
                    url,
                    headers={"User-Agent": "regionpulse/0.1.0"},
                    allow_redirects=False,
                ) as resp,
            ):
                logger.debug("HEAD %s -> %d", url, resp.status)
        except TimeoutError as exc:
            msg = f"HTTP request to {url} timed out"
            raise ProbeTimeoutError(msg) from exc
        except aiohttp.InvalidURL as e:
            msg = f"cannot build HTTP request for {url}: {e}"
            raise ProbeInfrastructureError(msg) from e
        except aiohttp.ClientError as e:
            logger.debug("HEAD %s failed: %s", url, e)
            return ProbeResult(reachable=False, latency_ms=None)

        return ProbeResult(reachable=True, latency_ms=(time.monotonic() - start) * 1000.0)

    def prober_type(self) -> str:
        """Return the prober type."""
        return "http"
