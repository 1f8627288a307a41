"""Core abstractions: Endpoint, Group, Registry, EngineConfig."""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

# Default values.
DEFAULT_POLL_INTERVAL: float = 60.0
DEFAULT_PROBE_TIMEOUT: float = 5.0
DEFAULT_INITIAL_DELAY: float = 0.0
DEFAULT_OUTAGE_THRESHOLD: int = 2
DEFAULT_HISTORY_CAPACITY: int = 60
DEFAULT_LOG_CAPACITY: int = 50

# Validation boundaries.
MIN_POLL_INTERVAL: float = 0.01
MAX_POLL_INTERVAL: float = 3600.0
MIN_PROBE_TIMEOUT: float = 0.01
MAX_PROBE_TIMEOUT: float = 60.0
MIN_INITIAL_DELAY: float = 0.0
MAX_INITIAL_DELAY: float = 3600.0
MIN_THRESHOLD: int = 1
MAX_THRESHOLD: int = 100
MIN_CAPACITY: int = 1
MAX_CAPACITY: int = 10000

_GROUP_NAME_PATTERN = re.compile(r"^\S(?:.{0,126}\S)?$")


@dataclass(frozen=True)
class EngineConfig:
    """Monitoring engine configuration."""

    poll_interval: float = DEFAULT_POLL_INTERVAL
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    initial_delay: float = DEFAULT_INITIAL_DELAY
    outage_threshold: int = DEFAULT_OUTAGE_THRESHOLD
    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    log_capacity: int = DEFAULT_LOG_CAPACITY

    def validate(self) -> None:
        """Validate the configuration values."""
        if not MIN_POLL_INTERVAL <= self.poll_interval <= MAX_POLL_INTERVAL:
            msg = f"poll_interval must be between {MIN_POLL_INTERVAL} and {MAX_POLL_INTERVAL}"
            raise ValueError(msg)
        if not MIN_PROBE_TIMEOUT <= self.probe_timeout <= MAX_PROBE_TIMEOUT:
            msg = f"probe_timeout must be between {MIN_PROBE_TIMEOUT} and {MAX_PROBE_TIMEOUT}"
            raise ValueError(msg)
        if not MIN_INITIAL_DELAY <= self.initial_delay <= MAX_INITIAL_DELAY:
            msg = f"initial_delay must be between {MIN_INITIAL_DELAY} and {MAX_INITIAL_DELAY}"
            raise ValueError(msg)
        if not MIN_THRESHOLD <= self.outage_threshold <= MAX_THRESHOLD:
            msg = f"outage_threshold must be between {MIN_THRESHOLD} and {MAX_THRESHOLD}"
            raise ValueError(msg)
        if not MIN_CAPACITY <= self.history_capacity <= MAX_CAPACITY:
            msg = f"history_capacity must be between {MIN_CAPACITY} and {MAX_CAPACITY}"
            raise ValueError(msg)
        if not MIN_CAPACITY <= self.log_capacity <= MAX_CAPACITY:
            msg = f"log_capacity must be between {MIN_CAPACITY} and {MAX_CAPACITY}"
            raise ValueError(msg)


def default_engine_config() -> EngineConfig:
    """Return a configuration with default values."""
    return EngineConfig()


@dataclass(frozen=True)
class Endpoint:
    """A monitored address: a single host or an address range (CIDR)."""

    address: str
    is_range: bool = False
    label: str = ""

    @property
    def target(self) -> str:
        """Address actually probed; the base address for a range."""
        if self.is_range:
            return self.address.split("/", 1)[0]
        return self.address

    def validate(self) -> None:
        """Validate the endpoint address."""
        if not self.address or self.address != self.address.strip():
            msg = f"invalid endpoint address {self.address!r}"
            raise ValueError(msg)
        if self.is_range:
            try:
                ipaddress.ip_network(self.address, strict=False)
            except ValueError as e:
                msg = f"invalid address range {self.address!r}: {e}"
                raise ValueError(msg) from e
        elif "/" in self.address:
            msg = f"address {self.address!r} looks like a range but is_range is not set"
            raise ValueError(msg)


@dataclass(frozen=True)
class Coordinates:
    """Geographic location of a group."""

    lat: float
    lng: float

    def validate(self) -> None:
        """Validate latitude/longitude ranges."""
        if not -90.0 <= self.lat <= 90.0:
            msg = f"latitude {self.lat} out of range [-90, 90]"
            raise ValueError(msg)
        if not -180.0 <= self.lng <= 180.0:
            msg = f"longitude {self.lng} out of range [-180, 180]"
            raise ValueError(msg)


@dataclass(frozen=True)
class Group:
    """Named set of endpoints sharing a region."""

    name: str
    endpoints: tuple[Endpoint, ...] = ()
    coordinates: Coordinates | None = None

    def validate(self) -> None:
        """Validate the group and all of its endpoints."""
        validate_group_name(self.name)
        for ep in self.endpoints:
            ep.validate()
        if self.coordinates is not None:
            self.coordinates.validate()


def validate_group_name(name: str) -> None:
    """Validate a group name."""
    if not _GROUP_NAME_PATTERN.match(name):
        msg = f"invalid group name {name!r}: must be 1-128 chars without surrounding whitespace"
        raise ValueError(msg)


@dataclass(frozen=True)
class Registry:
    """Static endpoint configuration, partitioned into groups."""

    groups: tuple[Group, ...] = field(default_factory=tuple)

    def validate(self) -> None:
        """Validate groups and check that every address belongs to exactly one group."""
        names: set[str] = set()
        owners: dict[str, str] = {}
        for group in self.groups:
            group.validate()
            if group.name in names:
                msg = f"duplicate group name {group.name!r}"
                raise ValueError(msg)
            names.add(group.name)
            for ep in group.endpoints:
                owner = owners.get(ep.address)
                if owner is not None:
                    msg = f"address {ep.address!r} is listed in both {owner!r} and {group.name!r}"
                    raise ValueError(msg)
                owners[ep.address] = group.name

    def endpoints(self) -> Iterator[tuple[Group, Endpoint]]:
        """Yield (group, endpoint) pairs in declaration order."""
        for group in self.groups:
            for ep in group.endpoints:
                yield group, ep

    def group(self, name: str) -> Group | None:
        """Return the group with the given name, or None."""
        for group in self.groups:
            if group.name == name:
                return group
        return None

    def group_of(self, address: str) -> Group | None:
        """Return the group owning the given address, or None."""
        for group, ep in self.endpoints():
            if ep.address == address:
                return group
        return None

    def __len__(self) -> int:
        return sum(len(g.endpoints) for g in self.groups)


def registry_from_dict(data: Mapping[str, Any]) -> Registry:
    """Build a Registry from a JSON-compatible mapping.

    Expected format::

        {
            "groups": [
                {
                    "name": "EU (Prague)",
                    "coordinates": {"lat": 50.07, "lng": 14.43},
                    "endpoints": [
                        {"address": "88.86.101.192/27", "is_range": true},
                        {"address": "178.249.213.195"}
                    ]
                }
            ]
        }
    """
    groups: list[Group] = []
    for raw_group in data.get("groups", []):
        coords = raw_group.get("coordinates")
        endpoints = tuple(
            Endpoint(
                address=str(raw_ep["address"]),
                is_range=bool(raw_ep.get("is_range", False)),
                label=str(raw_ep.get("label", "")),
            )
            for raw_ep in raw_group.get("endpoints", [])
        )
        groups.append(
            Group(
                name=str(raw_group["name"]),
                endpoints=endpoints,
                coordinates=(
                    Coordinates(lat=float(coords["lat"]), lng=float(coords["lng"]))
                    if coords is not None
                    else None
                ),
            )
        )
    registry = Registry(groups=tuple(groups))
    registry.validate()
    return registry


__all__ = [
    "Coordinates",
    "Endpoint",
    "EngineConfig",
    "Group",
    "Registry",
    "default_engine_config",
    "registry_from_dict",
    "validate_group_name",
]
