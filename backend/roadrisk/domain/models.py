from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def _coerce_count(value: Any) -> int:
    number = _coerce_coord(value)
    return max(0, int(number))


def _coerce_coord(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    # inf and nan come through json.loads and float("inf")
    if not math.isfinite(number):
        return 0.0
    return number


@dataclass(frozen=True)
class EventBreakdown:
    killed: int = 0
    injured: int = 0


@dataclass(frozen=True)
class IncidentSegment:
    start_lat: float
    start_lon: float
    road_name: str
    total_events: int
    event_breakdown: EventBreakdown = field(default_factory=EventBreakdown)
    danger_category: str = ""
    segment_id: Optional[int] = None

    @property
    def killed(self) -> int:
        return self.event_breakdown.killed

    @property
    def injured(self) -> int:
        return self.event_breakdown.injured

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "IncidentSegment":
        """Build a segment from the wire format.

        Bad or missing numbers fall back to zero so that one broken record
        still yields a usable segment.
        """
        breakdown = payload.get("event_breakdown") or {}
        if not isinstance(breakdown, Mapping):
            breakdown = {}
        segment_id = payload.get("segment_id")
        return cls(
            start_lat=_coerce_coord(payload.get("start_lat")),
            start_lon=_coerce_coord(payload.get("start_lon")),
            road_name=str(payload.get("road_name") or ""),
            total_events=_coerce_count(payload.get("total_events")),
            event_breakdown=EventBreakdown(
                killed=_coerce_count(breakdown.get("killed")),
                injured=_coerce_count(breakdown.get("injured")),
            ),
            danger_category=str(payload.get("danger_category") or ""),
            segment_id=int(segment_id) if isinstance(segment_id, int) else None,
        )

    def to_payload(self) -> dict:
        payload = {
            "start_lat": self.start_lat,
            "start_lon": self.start_lon,
            "road_name": self.road_name,
            "total_events": self.total_events,
            "event_breakdown": {"killed": self.killed, "injured": self.injured},
            "danger_category": self.danger_category,
        }
        if self.segment_id is not None:
            payload["segment_id"] = self.segment_id
        return payload


@dataclass
class Hotspot:
    lat: float
    lon: float
    radius_m: float
    alert_tier: str
    road_name: str
    fill_tier: str
    fill_color: str
    alerted: bool = False
    segment_id: Optional[int] = None


@dataclass(frozen=True)
class HeatPoint:
    lat: float
    lon: float
    weight: float

    def as_list(self) -> list:
        return [self.lat, self.lon, self.weight]


@dataclass(frozen=True)
class AlertEvent:
    message: str
    alert_tier: str
    road_name: str
    distance_m: float
    radius_m: float

    @property
    def level(self) -> str:
        # banner css class
        return self.alert_tier

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "alert_tier": self.alert_tier,
            "level": self.level,
            "road_name": self.road_name,
            "distance_m": round(self.distance_m, 2),
            "radius_m": round(self.radius_m, 2),
        }
