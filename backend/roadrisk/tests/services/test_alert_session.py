from __future__ import annotations

from typing import List, Optional

import httpx

from roadrisk.domain.models import EventBreakdown, IncidentSegment
from roadrisk.presenters.base import RecordingPresenter
from roadrisk.providers.segments.base import SegmentQuery, SegmentsProvider
from roadrisk.services.alert_session import AlertSession


def _segment(road: str, lat: float = -34.0, lon: float = 151.0, total: int = 100) -> IncidentSegment:
    return IncidentSegment(
        start_lat=lat,
        start_lon=lon,
        road_name=road,
        total_events=total,
        event_breakdown=EventBreakdown(killed=1),
        danger_category="Extreme",
    )


class _ScriptedProvider(SegmentsProvider):
    def __init__(self, batches: list) -> None:
        self._batches = list(batches)
        self.queries: list[Optional[SegmentQuery]] = []

    def fetch_segments(self, query: Optional[SegmentQuery] = None) -> List[IncidentSegment]:
        self.queries.append(query)
        batch = self._batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return batch


def test_reload_and_alert_flow() -> None:
    presenter = RecordingPresenter()
    session = AlertSession(_ScriptedProvider([[_segment("Princes Highway")]]), presenter=presenter)

    stats = session.reload()
    assert stats == {"loaded": 1, "ok": True, "error": None}

    events = session.update_position(-34.0, 151.0)
    assert len(events) == 1
    assert presenter.presented[0][1] == "extreme"
    assert [hs.road_name for hs in session.active()] == ["Princes Highway"]


def test_failed_reload_keeps_last_good_snapshot(capsys) -> None:
    provider = _ScriptedProvider(
        [
            [_segment("Princes Highway")],
            httpx.ConnectError("connection refused"),
        ]
    )
    session = AlertSession(provider)
    session.reload()
    assert len(session.update_position(-34.0, 151.0)) == 1

    stats = session.reload()

    assert stats["ok"] is False
    assert stats["loaded"] == 1
    assert "connection refused" in stats["error"]
    assert isinstance(session.last_error, httpx.ConnectError)
    assert "[alert_session] WARNING" in capsys.readouterr().out
    # latch survives because the snapshot was kept
    assert session.update_position(-34.0, 151.0) == []


def test_reload_with_new_query_is_remembered() -> None:
    provider = _ScriptedProvider([[_segment("A")], [_segment("B")], []])
    session = AlertSession(provider, query=SegmentQuery(road_name="A"))
    session.reload()
    session.reload(SegmentQuery(species="kangaroo"))
    session.reload()
    assert provider.queries[0] == SegmentQuery(road_name="A")
    assert provider.queries[1] == SegmentQuery(species="kangaroo")
    assert provider.queries[2] == SegmentQuery(species="kangaroo")
    assert session.zones() == []


def test_successful_reload_resets_latches() -> None:
    provider = _ScriptedProvider([[_segment("A")], [_segment("A")]])
    session = AlertSession(provider)
    session.reload()
    assert len(session.update_position(-34.0, 151.0)) == 1
    session.reload()
    assert session.active() == []
    assert len(session.update_position(-34.0, 151.0)) == 1


def test_failed_reload_keeps_previous_query() -> None:
    provider = _ScriptedProvider([[_segment("A")], ValueError("bad payload"), [_segment("A")]])
    session = AlertSession(provider, query=SegmentQuery(road_name="A"))
    session.reload()

    stats = session.reload(SegmentQuery(species="wombat"))
    assert stats["ok"] is False
    assert session.query == SegmentQuery(road_name="A")
    assert [hs.road_name for hs in session.zones()] == ["A"]

    session.reload()
    assert provider.queries == [
        SegmentQuery(road_name="A"),
        SegmentQuery(species="wombat"),
        SegmentQuery(road_name="A"),
    ]


def test_only_the_latest_reload_error_is_kept() -> None:
    provider = _ScriptedProvider(
        [RuntimeError("first"), RuntimeError("second"), [_segment("A")]]
    )
    session = AlertSession(provider)
    session.reload()
    session.reload()
    assert str(session.last_error) == "second"

    session.reload()
    assert session.last_error is None
