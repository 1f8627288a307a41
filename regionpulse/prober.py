"""Prober interface, probe result and probe error types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from regionpulse.registry import Endpoint


@dataclass(frozen=True)
class ProbeResult:
    """Raw verdict of a single connectivity probe."""

    reachable: bool
    latency_ms: float | None = None


class ProbeError(Exception):
    """Base probe error. The engine treats any probe error as a raw failure."""

    def __init__(self, *args: object, reason: str = "error") -> None:
        super().__init__(*args)
        self._reason = reason

    @property
    def reason(self) -> str:
        """Return a short machine-readable reason."""
        return self._reason


class ProbeTimeoutError(ProbeError):
    """Probe did not complete within its deadline."""

    def __init__(self, *args: object) -> None:
        super().__init__(*args, reason="timeout")


class ProbeInfrastructureError(ProbeError):
    """The check itself could not be carried out (not an endpoint outage)."""

    def __init__(self, *args: object) -> None:
        super().__init__(*args, reason="infrastructure")


class Prober(Protocol):
    """Protocol for connectivity probing.

    ``probe`` returns ``ProbeResult(reachable=False)`` for an endpoint that is
    down; raising is reserved for timeouts and infrastructure errors.
    """

    async def probe(self, endpoint: Endpoint) -> ProbeResult:
        """Probe the endpoint once."""
        ...

    def prober_type(self) -> str:
        """Return the prober type (tcp, http, simulated, ...)."""
        ...


__all__ = [
    "ProbeError",
    "ProbeInfrastructureError",
    "ProbeResult",
    "ProbeTimeoutError",
    "Prober",
]
