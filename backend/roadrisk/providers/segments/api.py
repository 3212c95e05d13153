from __future__ import annotations

import os
from typing import List, Optional

import httpx

from roadrisk.domain.models import IncidentSegment

from .base import SegmentQuery, SegmentsProvider, segments_from_payload

DEFAULT_API_BASE = "http://127.0.0.1:8000"


class ApiSegmentsProvider(SegmentsProvider):
    """Reads segments from a remote hotspots endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        path: str = "/api/hotspots",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or os.getenv("SEGMENTS_API_BASE") or DEFAULT_API_BASE).rstrip("/")
        self.path = path
        self.timeout = timeout
        self._transport = transport

    def fetch_segments(self, query: Optional[SegmentQuery] = None) -> List[IncidentSegment]:
        params = (query or SegmentQuery()).as_params()
        with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
            resp = client.get(self.path, params=params)
            resp.raise_for_status()
            data = resp.json()
        return segments_from_payload(data)
