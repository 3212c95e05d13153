from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from threading import Lock
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.engine import Engine

from roadrisk.api.deps import get_engine
from roadrisk.api.routers.hotspots import zone_payload
from roadrisk.presenters.base import RecordingPresenter
from roadrisk.providers.segments.base import SegmentQuery
from roadrisk.providers.segments.store import RepositorySegmentsProvider
from roadrisk.services.alert_session import AlertSession

router = APIRouter(prefix="/monitor", tags=["monitor"])

# oldest sessions are dropped once the table is full
MAX_MONITOR_SESSIONS = int(os.getenv("MAX_MONITOR_SESSIONS", "100"))


class FiltersBody(BaseModel):
    road_name: Optional[str] = None
    time_of_day: Optional[str] = None
    species: Optional[str] = None

    def to_query(self) -> SegmentQuery:
        return SegmentQuery(road_name=self.road_name, time_of_day=self.time_of_day, species=self.species)


class PositionBody(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


@dataclass
class _SessionSlot:
    session: AlertSession
    presenter: RecordingPresenter
    lock: Lock = field(default_factory=Lock)


@router.post("/sessions", status_code=201)
def create_session(
    request: Request,
    body: Optional[FiltersBody] = None,
    engine: Engine = Depends(get_engine),
):
    presenter = RecordingPresenter()
    session = AlertSession(
        RepositorySegmentsProvider(engine),
        presenter=presenter,
        query=(body or FiltersBody()).to_query(),
    )
    stats = session.reload()
    session_id = uuid.uuid4().hex
    with request.app.state.monitor_sessions_lock:
        sessions = request.app.state.monitor_sessions
        while sessions and len(sessions) >= MAX_MONITOR_SESSIONS:
            evicted = next(iter(sessions))
            sessions.pop(evicted)
            print(f"[monitor] session cap {MAX_MONITOR_SESSIONS} reached; dropped {evicted}")
        sessions[session_id] = _SessionSlot(session=session, presenter=presenter)
    return {
        "session_id": session_id,
        "reload": stats,
        "zones": [zone_payload(hs) for hs in session.zones()],
    }


@router.post("/sessions/{session_id}/position")
def update_position(session_id: str, body: PositionBody, request: Request):
    slot = _get_slot(request, session_id)
    with slot.lock:
        events = slot.session.update_position(body.lat, body.lon)
        presented = slot.presenter.drain()
        active = [zone_payload(hs) for hs in slot.session.active()]
    banner = None
    if presented:
        # only the newest banner stays visible
        message, tier = presented[-1]
        banner = {"message": message, "level": tier}
    return {"alerts": [event.to_dict() for event in events], "banner": banner, "active": active}


@router.post("/sessions/{session_id}/reload")
def reload_session(session_id: str, request: Request, body: Optional[FiltersBody] = None):
    slot = _get_slot(request, session_id)
    with slot.lock:
        stats = slot.session.reload(body.to_query() if body else None)
        zones = [zone_payload(hs) for hs in slot.session.zones()]
    return {"reload": stats, "zones": zones}


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str, request: Request):
    with request.app.state.monitor_sessions_lock:
        removed = request.app.state.monitor_sessions.pop(session_id, None)
    if removed is None:
        raise HTTPException(status_code=404, detail=f"Monitor session '{session_id}' not found")


def _get_slot(request: Request, session_id: str) -> _SessionSlot:
    with request.app.state.monitor_sessions_lock:
        slot = request.app.state.monitor_sessions.get(session_id)
    if slot is None:
        raise HTTPException(status_code=404, detail=f"Monitor session '{session_id}' not found")
    return slot
