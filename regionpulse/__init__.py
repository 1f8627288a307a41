"""regionpulse: regional endpoint reachability monitoring with hysteresis and incident reports."""

from __future__ import annotations

from regionpulse.api import RegionPulse, build_prober
from regionpulse.engine import EndpointNotFoundError, GroupNotFoundError, MonitoringEngine
from regionpulse.event_log import EventLog, LogEntry
from regionpulse.incidents import (
    Incident,
    Projection,
    compute_projection,
    extract_incidents,
    project,
)
from regionpulse.metrics import MetricsExporter
from regionpulse.monitor_state import (
    EndpointMonitorState,
    EndpointSnapshot,
    HistoryPoint,
    Transition,
    apply_verdict,
    smooth_latency,
)
from regionpulse.prober import (
    ProbeError,
    ProbeInfrastructureError,
    Prober,
    ProbeResult,
    ProbeTimeoutError,
)
from regionpulse.probes import HTTPProber, SimulatedProber, TCPProber
from regionpulse.regions import DEFAULT_REGISTRY
from regionpulse.registry import (
    Coordinates,
    Endpoint,
    EngineConfig,
    Group,
    Registry,
    default_engine_config,
    registry_from_dict,
)
from regionpulse.report import GroupRow, Report, StatusRow, build_report
from regionpulse.status import LogSeverity, Status, aggregate, is_down

__all__ = [
    "DEFAULT_REGISTRY",
    "Coordinates",
    "Endpoint",
    "EndpointMonitorState",
    "EndpointNotFoundError",
    "EndpointSnapshot",
    "EngineConfig",
    "EventLog",
    "Group",
    "GroupNotFoundError",
    "GroupRow",
    "HTTPProber",
    "HistoryPoint",
    "Incident",
    "LogEntry",
    "LogSeverity",
    "MetricsExporter",
    "MonitoringEngine",
    "ProbeError",
    "ProbeInfrastructureError",
    "ProbeResult",
    "ProbeTimeoutError",
    "Prober",
    "Projection",
    "RegionPulse",
    "Registry",
    "Report",
    "SimulatedProber",
    "Status",
    "StatusRow",
    "TCPProber",
    "Transition",
    "aggregate",
    "apply_verdict",
    "build_prober",
    "build_report",
    "compute_projection",
    "default_engine_config",
    "extract_incidents",
    "is_down",
    "project",
    "registry_from_dict",
    "smooth_latency",
]
