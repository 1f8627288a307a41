"""Tests for probes: TCP, HTTP and simulated probers."""

import asyncio
import socket

import pytest
from aiohttp import web

from regionpulse.prober import ProbeTimeoutError
from regionpulse.probes import HTTPProber, SimulatedProber, TCPProber
from regionpulse.registry import Endpoint


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestTCPProber:
    async def test_reachable(self) -> None:
        async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            result = await TCPProber(port=port, timeout=2.0).probe(Endpoint("127.0.0.1"))
        finally:
            server.close()
            await server.wait_closed()

        assert result.reachable is True
        assert result.latency_ms is not None
        assert result.latency_ms >= 0

    async def test_refused(self) -> None:
        port = _free_port()
        result = await TCPProber(port=port, timeout=2.0).probe(Endpoint("127.0.0.1"))
        assert result.reachable is False
        assert result.latency_ms is None

    async def test_range_probes_base_address(self) -> None:
        async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            result = await TCPProber(port=port, timeout=2.0).probe(
                Endpoint("127.0.0.1/32", is_range=True)
            )
        finally:
            server.close()
            await server.wait_closed()

        assert result.reachable is True

    async def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def hang(*args: object, **kwargs: object) -> None:
            await asyncio.sleep(10)

        monkeypatch.setattr(asyncio, "open_connection", hang)
        with pytest.raises(ProbeTimeoutError, match="timed out"):
            await TCPProber(port=443, timeout=0.05).probe(Endpoint("192.0.2.1"))

    def test_type(self) -> None:
        assert TCPProber().prober_type() == "tcp"


class TestHTTPProber:
    async def _serve(self, status: int) -> tuple[web.AppRunner, int]:
        async def handler(request: web.Request) -> web.Response:
            return web.Response(status=status)

        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", handler)
        runner = web.AppRunner(app)
        await runner.setup()
        port = _free_port()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        return runner, port

    async def test_reachable(self) -> None:
        runner, port = await self._serve(200)
        try:
            result = await HTTPProber(port=port, timeout=2.0).probe(Endpoint("127.0.0.1"))
        finally:
            await runner.cleanup()

        assert result.reachable is True
        assert result.latency_ms is not None

    async def test_error_status_is_still_reachable(self) -> None:
        runner, port = await self._serve(503)
        try:
            result = await HTTPProber(port=port, path="/health", timeout=2.0).probe(
                Endpoint("127.0.0.1")
            )
        finally:
            await runner.cleanup()

        assert result.reachable is True

    async def test_refused(self) -> None:
        result = await HTTPProber(port=_free_port(), timeout=2.0).probe(Endpoint("127.0.0.1"))
        assert result.reachable is False

    def test_invalid_path(self) -> None:
        with pytest.raises(ValueError, match="path must start with"):
            HTTPProber(path="health")

    def test_type(self) -> None:
        assert HTTPProber().prober_type() == "http"


class TestSimulatedProber:
    async def test_always_up(self) -> None:
        prober = SimulatedProber(success_rate=1.0, seed=1, sleep=False)
        for _ in range(20):
            result = await prober.probe(Endpoint("10.0.0.1"))
            assert result.reachable is True
            assert result.latency_ms is not None
            assert 20 <= result.latency_ms < 150

    async def test_always_down(self) -> None:
        prober = SimulatedProber(success_rate=0.0, seed=1, sleep=False)
        results = [await prober.probe(Endpoint("10.0.0.1")) for _ in range(20)]
        assert not any(r.reachable for r in results)

    async def test_seed_is_reproducible(self) -> None:
        async def run() -> list[tuple[bool, float | None]]:
            prober = SimulatedProber(success_rate=0.5, seed=42, sleep=False)
            out = []
            for _ in range(30):
                r = await prober.probe(Endpoint("10.0.0.1"))
                out.append((r.reachable, r.latency_ms))
            return out

        assert await run() == await run()

    async def test_sleeps_for_latency(self) -> None:
        prober = SimulatedProber(success_rate=1.0, min_latency_ms=20, max_latency_ms=21, seed=1)
        loop = asyncio.get_running_loop()
        start = loop.time()
        await prober.probe(Endpoint("10.0.0.1"))
        assert loop.time() - start >= 0.015

    @pytest.mark.parametrize("rate", [-0.1, 1.5])
    def test_invalid_success_rate(self, rate: float) -> None:
        with pytest.raises(ValueError, match="success_rate"):
            SimulatedProber(success_rate=rate)

    def test_invalid_latency_bounds(self) -> None:
        with pytest.raises(ValueError, match="latency bounds"):
            SimulatedProber(min_latency_ms=100, max_latency_ms=100)

    def test_type(self) -> None:
        assert SimulatedProber().prober_type() == "simulated"
