from __future__ import annotations

from typing import List, Optional

from sqlalchemy.engine import Engine

from roadrisk.domain.models import IncidentSegment
from roadrisk.infra.db.segments_repository import SegmentsRepository

from .base import SegmentQuery, SegmentsProvider


class RepositorySegmentsProvider(SegmentsProvider):
    def __init__(self, engine: Engine) -> None:
        self.repo = SegmentsRepository(engine)

    def fetch_segments(self, query: Optional[SegmentQuery] = None) -> List[IncidentSegment]:
        return [IncidentSegment.from_payload(row) for row in self.repo.list_segments(query)]
