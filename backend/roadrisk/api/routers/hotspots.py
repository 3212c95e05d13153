from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from roadrisk.api.deps import get_engine, get_segment_query
from roadrisk.domain.models import Hotspot, IncidentSegment
from roadrisk.domain.registry import build_hotspots
from roadrisk.domain.scoring import HEAT_LAYER_OPTIONS, build_heat_points
from roadrisk.domain.severity import RECOMMENDATIONS, RISK_COLORS, RISK_TEXTS
from roadrisk.infra.db.segments_repository import SegmentsRepository
from roadrisk.providers.segments.base import SegmentQuery

router = APIRouter(tags=["hotspots"])


@router.get("/hotspots")
def list_hotspot_segments(
    query: SegmentQuery = Depends(get_segment_query),
    engine: Engine = Depends(get_engine),
):
    repo = SegmentsRepository(engine)
    return {"segments": repo.list_segments(query)}


@router.get("/zones")
def list_zones(
    query: SegmentQuery = Depends(get_segment_query),
    engine: Engine = Depends(get_engine),
):
    segments = _load_segments(engine, query)
    return {"zones": [zone_payload(hs) for hs in build_hotspots(segments)]}


@router.get("/heatmap")
def get_heatmap(
    query: SegmentQuery = Depends(get_segment_query),
    engine: Engine = Depends(get_engine),
):
    segments = _load_segments(engine, query)
    return {
        "points": [point.as_list() for point in build_heat_points(segments)],
        "layer": HEAT_LAYER_OPTIONS,
    }


@router.get("/filters")
def list_filters(engine: Engine = Depends(get_engine)):
    return SegmentsRepository(engine).list_filter_values()


def zone_payload(hotspot: Hotspot) -> dict:
    return {
        "segment_id": hotspot.segment_id,
        "lat": hotspot.lat,
        "lon": hotspot.lon,
        "radius_m": round(hotspot.radius_m, 2),
        "road_name": hotspot.road_name,
        "fill_tier": hotspot.fill_tier,
        "fill_color": hotspot.fill_color,
        "alert_tier": hotspot.alert_tier,
        "risk_color": RISK_COLORS[hotspot.alert_tier],
        "risk_text": RISK_TEXTS[hotspot.alert_tier],
        "recommendation": RECOMMENDATIONS[hotspot.alert_tier],
        "alerted": hotspot.alerted,
    }


def _load_segments(engine: Engine, query: SegmentQuery) -> List[IncidentSegment]:
    rows = SegmentsRepository(engine).list_segments(query)
    return [IncidentSegment.from_payload(row) for row in rows]
