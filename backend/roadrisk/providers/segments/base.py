from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from roadrisk.domain.models import IncidentSegment


@dataclass(frozen=True)
class SegmentQuery:
    road_name: Optional[str] = None
    time_of_day: Optional[str] = None
    species: Optional[str] = None

    def as_params(self) -> Dict[str, str]:
        params = {
            "road_name": self.road_name,
            "time_of_day": self.time_of_day,
            "species": self.species,
        }
        return {key: value for key, value in params.items() if value}


class SegmentsProvider(Protocol):
    """Contract for sources of incident segments."""

    def fetch_segments(self, query: Optional[SegmentQuery] = None) -> List[IncidentSegment]:
        """Return the segments matching ``query``.

        Filtering is the provider's job; callers never filter again.
        """
        raise NotImplementedError


def segments_from_payload(payload: Any) -> List[IncidentSegment]:
    if isinstance(payload, Mapping):
        payload = payload.get("segments")
    if not isinstance(payload, list):
        raise ValueError("segments payload must be a list or an object with a 'segments' list")
    return [IncidentSegment.from_payload(item) for item in _mappings(payload)]


def _mappings(items: Iterable[Any]) -> Iterable[Mapping[str, Any]]:
    for item in items:
        yield item if isinstance(item, Mapping) else {}
