from __future__ import annotations

from fastapi import HTTPException, Request
from sqlalchemy.engine import Engine

from roadrisk.providers.segments.base import SegmentQuery


def get_engine(request: Request) -> Engine:
    engine = getattr(request.app.state, "db_engine", None)
    if engine is None:
        raise HTTPException(status_code=500, detail="Database engine not configured")
    return engine


def get_segment_query(
    road_name: str | None = None,
    time_of_day: str | None = None,
    species: str | None = None,
) -> SegmentQuery:
    return SegmentQuery(road_name=road_name, time_of_day=time_of_day, species=species)
