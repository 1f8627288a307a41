"""Connectivity probers."""

from __future__ import annotations

from regionpulse.probes.http import HTTPProber
from regionpulse.probes.simulated import SimulatedProber
from regionpulse.probes.tcp import TCPProber

__all__ = [
    "HTTPProber",
    "SimulatedProber",
    "TCPProber",
]
