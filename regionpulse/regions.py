"""Built-in registry: the streaming cloud regions and the Axis dispatchers."""

from __future__ import annotations

from regionpulse.registry import Coordinates, Endpoint, Group, Registry

EU_PRAGUE = Group(
    name="EU (Prague)",
    coordinates=Coordinates(lat=50.0755, lng=14.4378),
    endpoints=(
        Endpoint("88.86.101.192/27", is_range=True),
        Endpoint("46.234.125.128/27", is_range=True),
    ),
)

JAPAN_TOKYO = Group(
    name="Japan (Tokyo)",
    coordinates=Coordinates(lat=35.6762, lng=139.6503),
    endpoints=(
        Endpoint("178.249.213.195"),
        Endpoint("178.249.213.193"),
        Endpoint("178.249.213.210"),
        Endpoint("109.61.83.167"),
        Endpoint("138.199.22.68"),
        Endpoint("138.199.22.69"),
    ),
)

USA_DENVER = Group(
    name="USA (Denver)",
    coordinates=Coordinates(lat=39.7392, lng=-104.9903),
    endpoints=(
        Endpoint("121.127.44.20"),
        Endpoint("121.127.44.79"),
        Endpoint("121.127.44.104/30", is_range=True),
    ),
)

# Lund, Sweden (approximate HQ location).
AXIS_DISPATCHERS = Group(
    name="AXIS Dispatchers",
    coordinates=Coordinates(lat=55.7047, lng=13.1910),
    endpoints=(
        Endpoint("52.51.189.141"),
        Endpoint("18.200.145.9"),
        Endpoint("54.73.167.187"),
        Endpoint("3.24.72.55"),
        Endpoint("18.215.224.182"),
        Endpoint("195.60.68.120"),
        Endpoint("195.60.68.121"),
    ),
)

DEFAULT_REGISTRY = Registry(groups=(EU_PRAGUE, JAPAN_TOKYO, USA_DENVER, AXIS_DISPATCHERS))

__all__ = [
    "AXIS_DISPATCHERS",
    "DEFAULT_REGISTRY",
    "EU_PRAGUE",
    "JAPAN_TOKYO",
    "USA_DENVER",
]
