from __future__ import annotations

from typing import List, Optional

import httpx

from roadrisk.domain.models import AlertEvent, Hotspot
from roadrisk.domain.monitor import ProximityMonitor
from roadrisk.domain.registry import HotspotRegistry
from roadrisk.providers.segments.base import SegmentQuery, SegmentsProvider

RELOAD_ERRORS = (httpx.HTTPError, OSError, ValueError, RuntimeError)


class AlertSession:
    """One tracked entity: a data source, its hotspot snapshot and a monitor.

    A failed reload leaves the previous snapshot, latches included, in place.
    """

    def __init__(
        self,
        provider: SegmentsProvider,
        *,
        presenter=None,
        query: Optional[SegmentQuery] = None,
    ) -> None:
        self.provider = provider
        self.query = query or SegmentQuery()
        self.registry = HotspotRegistry()
        self.monitor = ProximityMonitor(self.registry, presenter=presenter)
        self.last_error: Optional[Exception] = None

    def reload(self, query: Optional[SegmentQuery] = None) -> dict:
        # a new query only sticks once it has produced a snapshot
        target = query if query is not None else self.query
        try:
            segments = self.provider.fetch_segments(target)
        except RELOAD_ERRORS as exc:
            self.last_error = exc
            print(f"[alert_session] WARNING: segment reload failed ({exc}); keeping {len(self.registry)} zones")
            return {"loaded": len(self.registry), "ok": False, "error": str(exc)}
        self.query = target
        self.last_error = None
        self.registry.reload(segments)
        return {"loaded": len(self.registry), "ok": True, "error": None}

    def update_position(self, lat: float, lon: float) -> List[AlertEvent]:
        return self.monitor.update(lat, lon)

    def zones(self) -> List[Hotspot]:
        return list(self.registry.hotspots)

    def active(self) -> List[Hotspot]:
        return self.monitor.active()
