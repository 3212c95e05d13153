from __future__ import annotations

from typing import Iterable, Iterator, List, Tuple

from .models import Hotspot, IncidentSegment
from .scoring import compute_radius
from .severity import classify


def build_hotspots(segments: Iterable[IncidentSegment]) -> List[Hotspot]:
    hotspots: List[Hotspot] = []
    for seg in segments:
        severity = classify(seg.event_breakdown, seg.danger_category)
        hotspots.append(
            Hotspot(
                lat=seg.start_lat,
                lon=seg.start_lon,
                radius_m=compute_radius(seg),
                alert_tier=severity.alert_tier,
                road_name=seg.road_name,
                fill_tier=severity.fill_tier,
                fill_color=severity.fill_color,
                segment_id=seg.segment_id,
            )
        )
    return hotspots


class HotspotRegistry:
    """Current snapshot of danger zones.

    ``reload`` builds the replacement list before swapping it in, so readers
    always see either the old snapshot or the complete new one. Latches are
    never carried across a reload.
    """

    def __init__(self, segments: Iterable[IncidentSegment] = ()) -> None:
        self._hotspots: Tuple[Hotspot, ...] = tuple(build_hotspots(segments))

    def reload(self, segments: Iterable[IncidentSegment]) -> Tuple[Hotspot, ...]:
        built = tuple(build_hotspots(segments))
        self._hotspots = built
        return built

    @property
    def hotspots(self) -> Tuple[Hotspot, ...]:
        return self._hotspots

    def __iter__(self) -> Iterator[Hotspot]:
        return iter(self._hotspots)

    def __len__(self) -> int:
        return len(self._hotspots)
