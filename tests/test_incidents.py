"""Tests for incidents.py: incident extraction and 24h projection."""

from datetime import UTC, datetime, timedelta

import pytest

from regionpulse.incidents import (
    ONGOING,
    compute_projection,
    extract_incidents,
    monitoring_window_minutes,
    project,
)
from regionpulse.monitor_state import HistoryPoint
from regionpulse.status import Status

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

UP = Status.OPERATIONAL
CAUTION = Status.CAUTION
DOWN = Status.UNREACHABLE


def _history(*statuses: Status, start: datetime = T0) -> list[HistoryPoint]:
    return [
        HistoryPoint(timestamp=start + timedelta(minutes=i), status=s)
        for i, s in enumerate(statuses)
    ]


def _ts(i: int) -> datetime:
    return T0 + timedelta(minutes=i)


class TestExtractIncidents:
    def test_empty_history(self) -> None:
        assert extract_incidents([]) == []

    def test_all_up(self) -> None:
        assert extract_incidents(_history(UP, UP, UP)) == []

    def test_single_caution_run(self) -> None:
        incidents = extract_incidents(_history(UP, CAUTION, CAUTION, UP))
        assert len(incidents) == 1
        assert incidents[0].status == CAUTION
        assert incidents[0].start == _ts(1)
        assert incidents[0].end == _ts(2)
        assert not incidents[0].ongoing

    def test_status_flip_splits_incident(self) -> None:
        incidents = extract_incidents(_history(UP, CAUTION, DOWN, UP))
        assert [(i.status, i.start, i.end) for i in incidents] == [
            (CAUTION, _ts(1), _ts(1)),
            (DOWN, _ts(2), _ts(2)),
        ]

    def test_ongoing_at_end(self) -> None:
        incidents = extract_incidents(_history(UP, CAUTION, DOWN, DOWN))
        assert len(incidents) == 2
        assert incidents[-1].status == DOWN
        assert incidents[-1].start == _ts(2)
        assert incidents[-1].end is None
        assert incidents[-1].ongoing

    def test_single_trailing_down_run_is_ongoing(self) -> None:
        incidents = extract_incidents(_history(UP, DOWN, DOWN))
        assert len(incidents) == 1
        assert incidents[0].ongoing
        assert incidents[0].to_dict()["end"] == ONGOING

    def test_checking_and_unknown_count_as_up(self) -> None:
        history = _history(Status.CHECKING, CAUTION, Status.UNKNOWN, CAUTION)
        incidents = extract_incidents(history)
        assert len(incidents) == 2
        assert incidents[0].end == _ts(1)
        assert incidents[1].ongoing

    def test_separate_runs(self) -> None:
        incidents = extract_incidents(_history(DOWN, UP, DOWN, UP), address="a", group="g")
        assert len(incidents) == 2
        assert all(i.address == "a" and i.group == "g" for i in incidents)

    def test_to_dict(self) -> None:
        incident = extract_incidents(_history(CAUTION, UP), address="10.0.0.1", group="EU")[0]
        assert incident.to_dict() == {
            "address": "10.0.0.1",
            "group": "EU",
            "status": "caution",
            "start": _ts(0).isoformat(),
            "end": _ts(0).isoformat(),
        }


class TestProjection:
    def test_example(self) -> None:
        p = project(3, 30.0)
        assert p.incident_rate_per_minute == pytest.approx(0.1)
        assert p.projected_24h_incidents == 144

    def test_window_at_least_one_minute(self) -> None:
        p = project(2, 0.2)
        assert p.monitoring_window_minutes == 1.0
        assert p.projected_24h_incidents == 2880

    def test_zero_incidents(self) -> None:
        p = project(0, 60.0)
        assert p.incident_rate_per_minute == 0.0
        assert p.projected_24h_incidents == 0

    def test_negative_count(self) -> None:
        with pytest.raises(ValueError, match="must not be negative"):
            project(-1, 10.0)

    def test_to_dict_documents_method(self) -> None:
        assert project(1, 10.0).to_dict()["method"] == "linear_extrapolation"


class TestComputeProjection:
    def test_empty(self) -> None:
        p = compute_projection([], T0)
        assert p.total_incidents == 0
        assert p.monitoring_window_minutes == 1.0
        assert p.projected_24h_incidents == 0

    def test_window_from_earliest_point_across_histories(self) -> None:
        a = _history(UP, CAUTION, UP, start=T0 + timedelta(minutes=10))
        b = _history(DOWN, DOWN, UP, CAUTION, start=T0)
        now = T0 + timedelta(minutes=30)

        assert monitoring_window_minutes([a, b], now) == 30.0
        p = compute_projection([a, b], now)
        assert p.total_incidents == 3
        assert p.projected_24h_incidents == 144

    def test_window_ignores_empty_histories(self) -> None:
        assert monitoring_window_minutes([[], []], T0) == 1.0
