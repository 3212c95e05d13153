from __future__ import annotations

from typing import Iterable, List
import math

from .models import HeatPoint, IncidentSegment

# Pesos para el radio de alerta
INTENSITY_KILLED_WEIGHT = 3
INTENSITY_INJURED_WEIGHT = 1
# El heatmap enfatiza más las muertes que el radio
HEAT_KILLED_WEIGHT = 4
HEAT_INJURED_WEIGHT = 2

MIN_RADIUS_M = 150.0
RADIUS_SCALE_M = 80.0
EARTH_RADIUS_M = 6371000

HEAT_LAYER_OPTIONS = {
    "radius": 45,
    "blur": 30,
    "min_opacity": 0.4,
    "gradient": {
        "0.2": "#ffffb2",
        "0.4": "#fecc5c",
        "0.6": "#fd8d3c",
        "0.8": "#f03b20",
        "1.0": "#7a0000",
    },
}


def intensity(segment: IncidentSegment) -> int:
    return (
        segment.total_events
        + segment.killed * INTENSITY_KILLED_WEIGHT
        + segment.injured * INTENSITY_INJURED_WEIGHT
    )


def compute_radius(segment: IncidentSegment) -> float:
    return max(MIN_RADIUS_M, math.sqrt(intensity(segment)) * RADIUS_SCALE_M)


def heat_weight(segment: IncidentSegment) -> int:
    return (
        segment.total_events
        + segment.killed * HEAT_KILLED_WEIGHT
        + segment.injured * HEAT_INJURED_WEIGHT
    )


def build_heat_points(segments: Iterable[IncidentSegment]) -> List[HeatPoint]:
    return [HeatPoint(lat=seg.start_lat, lon=seg.start_lon, weight=heat_weight(seg)) for seg in segments]


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c
