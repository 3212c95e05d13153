from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, insert, select, update
from sqlalchemy.engine import Engine

from roadrisk.providers.segments.base import SegmentQuery

from .tables import incidents_table, segments_table

SEGMENT_COLUMNS = ["external_id", "road_name", "start_lat", "start_lon", "danger_category"]
INCIDENT_COLUMNS = ["external_id", "segment_id", "species", "time_of_day", "outcome", "occurred_at"]
OUTCOMES = ("killed", "injured", "uninjured")


class SegmentsRepository:
    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine

    def upsert_segment(self, segment_data: Dict[str, Any]) -> int:
        resolved = {col: segment_data.get(col) for col in SEGMENT_COLUMNS}
        now = datetime.now(timezone.utc)
        with self.engine.begin() as conn:
            existing = conn.execute(
                select(segments_table.c.id).where(segments_table.c.external_id == resolved["external_id"])
            ).scalar_one_or_none()
            if existing:
                conn.execute(
                    update(segments_table).where(segments_table.c.id == existing).values(**resolved, updated_at=now)
                )
                return existing
            result = conn.execute(insert(segments_table).values(**resolved, created_at=now, updated_at=now))
            return result.inserted_primary_key[0]

    def upsert_incident(self, incident_data: Dict[str, Any]) -> int:
        resolved = {col: incident_data.get(col) for col in INCIDENT_COLUMNS}
        outcome = (resolved.get("outcome") or "").lower()
        if outcome not in OUTCOMES:
            raise ValueError(f"Unknown incident outcome '{resolved.get('outcome')}'")
        resolved["outcome"] = outcome
        now = datetime.now(timezone.utc)
        with self.engine.begin() as conn:
            existing = conn.execute(
                select(incidents_table.c.id).where(incidents_table.c.external_id == resolved["external_id"])
            ).scalar_one_or_none()
            if existing:
                conn.execute(update(incidents_table).where(incidents_table.c.id == existing).values(**resolved))
                return existing
            result = conn.execute(insert(incidents_table).values(**resolved, created_at=now))
            return result.inserted_primary_key[0]

    def get_segment_id_by_external(self, external_id: str) -> Optional[int]:
        with self.engine.begin() as conn:
            return conn.execute(
                select(segments_table.c.id).where(segments_table.c.external_id == external_id)
            ).scalar_one_or_none()

    def list_segments(self, query: Optional[SegmentQuery] = None) -> List[Dict[str, Any]]:
        query = query or SegmentQuery()
        killed = func.sum(case((incidents_table.c.outcome == "killed", 1), else_=0))
        injured = func.sum(case((incidents_table.c.outcome == "injured", 1), else_=0))
        filters = []
        if query.road_name:
            filters.append(segments_table.c.road_name.icontains(query.road_name, autoescape=True))
        if query.time_of_day:
            filters.append(func.lower(incidents_table.c.time_of_day) == query.time_of_day.lower())
        if query.species:
            filters.append(func.lower(incidents_table.c.species) == query.species.lower())
        join_stmt = segments_table.join(incidents_table, incidents_table.c.segment_id == segments_table.c.id)
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(
                    segments_table.c.id,
                    segments_table.c.road_name,
                    segments_table.c.start_lat,
                    segments_table.c.start_lon,
                    segments_table.c.danger_category,
                    func.count(incidents_table.c.id).label("total_events"),
                    killed.label("killed"),
                    injured.label("injured"),
                )
                .select_from(join_stmt)
                .where(*filters)
                .group_by(segments_table.c.id)
                .order_by(segments_table.c.id)
            ).mappings().all()
        return [_row_to_payload(row) for row in rows]

    def list_filter_values(self) -> Dict[str, List[str]]:
        with self.engine.begin() as conn:
            roads = conn.execute(
                select(segments_table.c.road_name).distinct().order_by(segments_table.c.road_name)
            ).scalars().all()
            species = conn.execute(
                select(incidents_table.c.species)
                .where(incidents_table.c.species.is_not(None))
                .distinct()
                .order_by(incidents_table.c.species)
            ).scalars().all()
            periods = conn.execute(
                select(incidents_table.c.time_of_day)
                .where(incidents_table.c.time_of_day.is_not(None))
                .distinct()
                .order_by(incidents_table.c.time_of_day)
            ).scalars().all()
        return {"road_names": list(roads), "species": list(species), "time_of_day": list(periods)}


def _row_to_payload(row) -> Dict[str, Any]:
    return {
        "segment_id": row["id"],
        "start_lat": row["start_lat"],
        "start_lon": row["start_lon"],
        "road_name": row["road_name"],
        "total_events": int(row["total_events"] or 0),
        "event_breakdown": {
            "killed": int(row["killed"] or 0),
            "injured": int(row["injured"] or 0),
        },
        "danger_category": row["danger_category"],
    }
