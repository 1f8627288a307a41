"""Tests for registry.py: Endpoint, Group, Registry, EngineConfig."""

import pytest

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


class TestEndpoint:
    def test_target_single_host(self) -> None:
        assert Endpoint("178.249.213.195").target == "178.249.213.195"

    def test_target_range_uses_base_address(self) -> None:
        assert Endpoint("88.86.101.192/27", is_range=True).target == "88.86.101.192"

    def test_validate_range(self) -> None:
        Endpoint("121.127.44.104/30", is_range=True).validate()

    def test_invalid_range(self) -> None:
        with pytest.raises(ValueError, match="invalid address range"):
            Endpoint("not-a-network/99", is_range=True).validate()

    def test_slash_without_range_flag(self) -> None:
        with pytest.raises(ValueError, match="looks like a range"):
            Endpoint("10.0.0.0/24").validate()

    def test_empty_address(self) -> None:
        with pytest.raises(ValueError, match="invalid endpoint address"):
            Endpoint("").validate()

    def test_hostname_allowed(self) -> None:
        Endpoint("status.example.com").validate()


class TestCoordinates:
    def test_valid(self) -> None:
        Coordinates(lat=50.0755, lng=14.4378).validate()

    def test_latitude_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="latitude"):
            Coordinates(lat=91.0, lng=0.0).validate()

    def test_longitude_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="longitude"):
            Coordinates(lat=0.0, lng=-181.0).validate()


class TestRegistry:
    def test_default_registry_is_valid(self) -> None:
        DEFAULT_REGISTRY.validate()
        assert len(DEFAULT_REGISTRY.groups) == 4
        assert len(DEFAULT_REGISTRY) == 18

    def test_endpoints_in_declaration_order(self) -> None:
        registry = Registry(
            groups=(
                Group("a", (Endpoint("10.0.0.1"), Endpoint("10.0.0.2"))),
                Group("b", (Endpoint("10.0.1.1"),)),
            )
        )
        pairs = [(g.name, ep.address) for g, ep in registry.endpoints()]
        assert pairs == [("a", "10.0.0.1"), ("a", "10.0.0.2"), ("b", "10.0.1.1")]

    def test_duplicate_address_across_groups(self) -> None:
        registry = Registry(
            groups=(
                Group("a", (Endpoint("10.0.0.1"),)),
                Group("b", (Endpoint("10.0.0.1"),)),
            )
        )
        with pytest.raises(ValueError, match="listed in both"):
            registry.validate()

    def test_duplicate_group_name(self) -> None:
        registry = Registry(groups=(Group("a"), Group("a")))
        with pytest.raises(ValueError, match="duplicate group name"):
            registry.validate()

    def test_invalid_group_name(self) -> None:
        with pytest.raises(ValueError, match="invalid group name"):
            Registry(groups=(Group(" padded "),)).validate()

    def test_empty_registry_is_valid(self) -> None:
        registry = Registry()
        registry.validate()
        assert len(registry) == 0
        assert list(registry.endpoints()) == []

    def test_group_of(self) -> None:
        group = DEFAULT_REGISTRY.group_of("195.60.68.121")
        assert group is not None
        assert group.name == "AXIS Dispatchers"
        assert DEFAULT_REGISTRY.group_of("192.0.2.1") is None

    def test_group_lookup(self) -> None:
        assert DEFAULT_REGISTRY.group("USA (Denver)") is not None
        assert DEFAULT_REGISTRY.group("Mars") is None


class TestRegistryFromDict:
    def test_full(self) -> None:
        registry = registry_from_dict(
            {
                "groups": [
                    {
                        "name": "EU (Prague)",
                        "coordinates": {"lat": 50.0755, "lng": 14.4378},
                        "endpoints": [
                            {"address": "88.86.101.192/27", "is_range": True},
                            {"address": "46.234.125.130", "label": "edge"},
                        ],
                    },
                    {"name": "Lab", "endpoints": [{"address": "192.0.2.10"}]},
                ]
            }
        )
        eu, lab = registry.groups
        assert eu.coordinates == Coordinates(lat=50.0755, lng=14.4378)
        assert eu.endpoints[0].is_range is True
        assert eu.endpoints[1].label == "edge"
        assert lab.coordinates is None

    def test_empty(self) -> None:
        assert registry_from_dict({}) == Registry()

    def test_validates(self) -> None:
        with pytest.raises(ValueError, match="listed in both"):
            registry_from_dict(
                {
                    "groups": [
                        {"name": "a", "endpoints": [{"address": "10.0.0.1"}]},
                        {"name": "b", "endpoints": [{"address": "10.0.0.1"}]},
                    ]
                }
            )


class TestEngineConfig:
    def test_defaults(self) -> None:
        config = default_engine_config()
        config.validate()
        assert config.poll_interval == 60.0
        assert config.outage_threshold == 2
        assert config.history_capacity == 60
        assert config.log_capacity == 50

    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"poll_interval": 0.0}, "poll_interval"),
            ({"probe_timeout": 120.0}, "probe_timeout"),
            ({"initial_delay": -1.0}, "initial_delay"),
            ({"outage_threshold": 0}, "outage_threshold"),
            ({"history_capacity": 0}, "history_capacity"),
            ({"log_capacity": 0}, "log_capacity"),
        ],
    )
    def test_out_of_range(self, kwargs: dict, match: str) -> None:
        with pytest.raises(ValueError, match=match):
            EngineConfig(**kwargs).validate()
