from __future__ import annotations

from typing import List, Optional

from .models import AlertEvent, Hotspot
from .registry import HotspotRegistry
from .scoring import haversine_m
from .severity import banner_message


class ProximityMonitor:
    """Edge-triggered enter alerts for the zones of one registry.

    A zone fires once when a position falls strictly inside its radius and
    re-arms once a position lands on or beyond the radius.
    """

    def __init__(self, registry: HotspotRegistry, presenter=None) -> None:
        self.registry = registry
        self.presenter = presenter

    def update(self, lat: float, lon: float) -> List[AlertEvent]:
        # the snapshot is read once so a concurrent reload never splits an update
        hotspots = self.registry.hotspots
        events: List[AlertEvent] = []
        for hotspot in hotspots:
            distance = haversine_m(hotspot.lat, hotspot.lon, lat, lon)
            event = self._evaluate(hotspot, distance)
            if event is not None:
                events.append(event)
        if self.presenter is not None:
            for event in events:
                self.presenter.present(event.message, event.alert_tier)
        return events

    def active(self) -> List[Hotspot]:
        return [hs for hs in self.registry.hotspots if hs.alerted]

    @staticmethod
    def _evaluate(hotspot: Hotspot, distance: float) -> Optional[AlertEvent]:
        inside = distance < hotspot.radius_m
        if inside and not hotspot.alerted:
            hotspot.alerted = True
            return AlertEvent(
                message=banner_message(hotspot.alert_tier, hotspot.road_name),
                alert_tier=hotspot.alert_tier,
                road_name=hotspot.road_name,
                distance_m=distance,
                radius_m=hotspot.radius_m,
            )
        if not inside:
            hotspot.alerted = False
        return None
