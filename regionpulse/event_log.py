"""Bounded event log of human-readable status transition notices."""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime

from regionpulse.registry import DEFAULT_LOG_CAPACITY
from regionpulse.status import LogSeverity

logger = logging.getLogger("regionpulse")

_LOG_LEVELS: dict[LogSeverity, int] = {
    LogSeverity.INFO: logging.INFO,
    LogSeverity.SUCCESS: logging.INFO,
    LogSeverity.WARNING: logging.WARNING,
    LogSeverity.ERROR: logging.ERROR,
}


def caution_message(address: str, group: str) -> str:
    """Notice for a first, unconfirmed failure."""
    return f"Potential issue detected on {address} ({group})"


def outage_message(address: str, group: str) -> str:
    """Notice for a confirmed outage."""
    return f"Connection lost to {address} ({group})"


def recovery_message(address: str, group: str) -> str:
    """Notice for a recovery after a confirmed outage."""
    return f"Connection restored to {address} ({group})"


def notice_message(severity: LogSeverity, address: str, group: str) -> str:
    """Return the transition notice text for a state machine notice severity."""
    if severity == LogSeverity.WARNING:
        return caution_message(address, group)
    if severity == LogSeverity.ERROR:
        return outage_message(address, group)
    if severity == LogSeverity.SUCCESS:
        return recovery_message(address, group)
    msg = f"no transition notice for severity {severity!r}"
    raise ValueError(msg)


@dataclass(frozen=True)
class LogEntry:
    """One event log entry."""

    id: str
    timestamp: datetime
    message: str
    severity: LogSeverity

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "severity": str(self.severity),
        }


class EventLog:
    """Newest-first log holding at most ``capacity`` entries."""

    def __init__(
        self,
        capacity: int = DEFAULT_LOG_CAPACITY,
        log: logging.Logger | None = None,
    ) -> None:
        if capacity < 1:
            msg = f"capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._log = log or logger

    @property
    def capacity(self) -> int:
        """Maximum number of retained entries."""
        return self._entries.maxlen or 0

    def append(self, message: str, severity: LogSeverity, timestamp: datetime) -> LogEntry:
        """Add an entry at the head; the oldest entry is dropped when full."""
        with self._lock:
            entry = LogEntry(
                id=str(next(self._ids)),
                timestamp=timestamp,
                message=message,
                severity=severity,
            )
            self._entries.appendleft(entry)
        self._log.log(_LOG_LEVELS[severity], message)
        return entry

    def entries(self) -> tuple[LogEntry, ...]:
        """Snapshot of the log, newest first."""
        with self._lock:
            return tuple(self._entries)

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = [
    "EventLog",
    "LogEntry",
    "caution_message",
    "notice_message",
    "outage_message",
    "recovery_message",
]
