from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from roadrisk.domain.models import IncidentSegment

from .base import SegmentQuery, SegmentsProvider, segments_from_payload


class StaticSegmentsProvider(SegmentsProvider):
    """In-memory segments.

    Only the ``road_name`` filter can be honoured here; the time of day and
    species breakdowns are not part of an aggregated segment.
    """

    def __init__(self, segments: Iterable[IncidentSegment]) -> None:
        self._segments = list(segments)

    def fetch_segments(self, query: Optional[SegmentQuery] = None) -> List[IncidentSegment]:
        return _filter_by_road(self._segments, query)


class JsonFileSegmentsProvider(SegmentsProvider):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def fetch_segments(self, query: Optional[SegmentQuery] = None) -> List[IncidentSegment]:
        if not self.path.exists():
            raise FileNotFoundError(f"Segments file not found: {self.path}")
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        return _filter_by_road(segments_from_payload(payload), query)


def _filter_by_road(segments: List[IncidentSegment], query: Optional[SegmentQuery]) -> List[IncidentSegment]:
    if query is None or not query.road_name:
        return list(segments)
    needle = query.road_name.lower()
    return [seg for seg in segments if needle in seg.road_name.lower()]
