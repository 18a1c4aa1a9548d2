# offloading/routers/delayed_recall.py
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode
import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from loguru import logger
from sqlmodel import Session, select

from offloading.core.clock import as_utc, utcnow
from offloading.core.db import get_session
from offloading.core.events import record_event
from offloading.core.recall_token import make_token, mask_token, parse_token
from offloading.core.recall_window import WindowState, recall_window
from offloading.core.settings import settings
from offloading.models.recall_session import RecallSession
from offloading.models.schemas import (
    CompleteSessionIn,
    GenerateBulkLinksIn,
    GenerateLinkIn,
    ValidateSessionIn,
)

router = APIRouter(prefix="/delayed-recall", tags=["delayed-recall"])


def _link(participant_id: str, experiment_id: str, token: str) -> str:
    base = (getattr(settings, "FRONTEND_URL", "") or "").rstrip("/") or "http://localhost:3000"
    query = urlencode({"participantId": participant_id, "experimentId": experiment_id, "token": token})
    return f"{base}/delayed-recall?{query}"


def _schedule(
    session: Session,
    participant_id: str,
    experiment_id: str,
    delay_hours: float,
    bulk: bool = False,
) -> RecallSession:
    session_id = uuid.uuid4()
    rs = RecallSession(
        id=str(session_id),
        participant_id=participant_id,
        experiment_id=experiment_id,
        token=make_token(session_id),
        scheduled_at=utcnow() + timedelta(hours=delay_hours),
        delay_hours=delay_hours,
        bulk_generated=bulk,
    )
    session.add(rs)
    record_event(
        session,
        "delayed_recall_bulk_generated" if bulk else "delayed_recall_link_generated",
        participant_id=participant_id,
        experiment_id=experiment_id,
        payload={
            "session_token": mask_token(rs.token),
            "delay_hours": delay_hours,
            "scheduled_time": as_utc(rs.scheduled_at).isoformat(),
            "record_id": rs.id,
        },
    )
    return rs


def _find(session: Session, participant_id: str, experiment_id: str, token: str) -> Optional[RecallSession]:
    sid = parse_token(token)
    if sid is None:
        return None
    rs = session.get(RecallSession, str(sid))
    if rs is None or rs.participant_id != participant_id or rs.experiment_id != experiment_id:
        return None
    return rs


@router.post("/generate-link")
def generate_link(payload: GenerateLinkIn, session: Session = Depends(get_session)):
    delay = payload.delay_hours if payload.delay_hours is not None else settings.RECALL_DEFAULT_DELAY_HOURS
    rs = _schedule(session, payload.participant_id, payload.experiment_id, delay)
    session.commit()
    url = _link(rs.participant_id, rs.experiment_id, rs.token)
    logger.info("delayed recall scheduled participant={} in {}h", rs.participant_id, delay)
    return {
        "success": True,
        "delayed_recall_url": url,
        "scheduled_time": rs.scheduled_at,
        "delay_hours": delay,
        "session_token": mask_token(rs.token),
        "record_id": rs.id,
        "instructions": {
            "send_to_participant": f"Please complete your follow-up memory test at: {url}",
            "scheduling_note": f"Send this link in {delay:g} hours (at {as_utc(rs.scheduled_at).isoformat()})",
        },
    }


@router.post("/generate-bulk-links")
def generate_bulk_links(payload: GenerateBulkLinksIn, session: Session = Depends(get_session)):
    delay = payload.delay_hours if payload.delay_hours is not None else settings.RECALL_DEFAULT_DELAY_HOURS
    links: List[Dict[str, Any]] = []
    for pid in payload.participant_ids:
        if not pid or not pid.strip():
            links.append({"participant_id": pid, "error": "Failed to generate link", "error_message": "empty participant id"})
            continue
        rs = _schedule(session, pid, payload.experiment_id, delay, bulk=True)
        links.append({
            "participant_id": pid,
            "delayed_recall_url": _link(pid, payload.experiment_id, rs.token),
            "scheduled_time": rs.scheduled_at,
            "session_token": mask_token(rs.token),
            "record_id": rs.id,
        })
    session.commit()
    generated = [l for l in links if "error" not in l]
    logger.info("bulk delayed recall: {}/{} links in {}h", len(generated), len(links), delay)
    return {
        "success": True,
        "total_requested": len(payload.participant_ids),
        "total_generated": len(generated),
        "delay_hours": delay,
        "links": links,
        "instructions": f"Send these links to participants in {delay:g} hours",
    }


@router.post("/validate-session")
def validate_session(payload: ValidateSessionIn, session: Session = Depends(get_session)):
    rs = _find(session, payload.participant_id, payload.experiment_id, payload.session_token)
    if rs is None or rs.status != "pending":
        raise HTTPException(status_code=404, detail="Invalid or expired session token")

    now = utcnow()
    window = recall_window(
        rs.scheduled_at, now,
        early_hours=settings.RECALL_EARLY_HOURS,
        late_hours=settings.RECALL_LATE_HOURS,
    )
    if window.state is WindowState.TOO_EARLY:
        wait = math.ceil(window.hours_early - settings.RECALL_EARLY_HOURS)
        return JSONResponse(status_code=403, content={
            "error": f"Session not yet available. Please return in {wait} hours.",
            "valid": False,
            "scheduled_time": as_utc(rs.scheduled_at).isoformat(),
            "can_access_at": window.can_access_at.isoformat() if window.can_access_at else None,
        })
    if window.state is WindowState.EXPIRED:
        return JSONResponse(status_code=410, content={
            "error": "Session has expired. Please contact the researcher.",
            "valid": False,
            "expired": True,
        })

    rs.status = "started"
    rs.accessed_at = now
    session.add(rs)
    record_event(
        session,
        "delayed_recall_session_accessed",
        participant_id=rs.participant_id,
        experiment_id=rs.experiment_id,
        payload={
            "session_token": mask_token(rs.token),
            "scheduled_time": as_utc(rs.scheduled_at).isoformat(),
            "actual_access_time": now.isoformat(),
            "hours_delay": -window.hours_early,
        },
    )
    session.commit()
    return {
        "valid": True,
        "session_info": {
            "scheduled_time": rs.scheduled_at,
            "actual_access_time": now,
            "delay_hours": abs(window.hours_early),
            "status": "active",
        },
    }


@router.get("/sessions/{participant_id}")
def list_sessions(
    participant_id: str,
    experiment_id: Optional[str] = Query(None, alias="experimentId"),
    session: Session = Depends(get_session),
):
    stmt = select(RecallSession).where(RecallSession.participant_id == participant_id)
    if experiment_id:
        stmt = stmt.where(RecallSession.experiment_id == experiment_id)
    rows = session.exec(stmt.order_by(RecallSession.created_at.desc())).all()
    sessions = [{
        "id": r.id,
        "experiment_id": r.experiment_id,
        "scheduled_time": r.scheduled_at,
        "status": r.status,
        "created_at": r.created_at,
        "delay_hours": r.delay_hours,
        "session_token": mask_token(r.token),
    } for r in rows]
    return {"participant_id": participant_id, "sessions": sessions, "total_sessions": len(sessions)}


@router.post("/complete-session")
def complete_session(payload: CompleteSessionIn, session: Session = Depends(get_session)):
    rs = _find(session, payload.participant_id, payload.experiment_id, payload.session_token)
    if rs is None:
        raise HTTPException(status_code=404, detail="Session not found")

    now = utcnow()
    rs.status = "completed"
    rs.completed_at = now
    rs.completion_data = payload.completion_data or {}
    session.add(rs)
    record_event(
        session,
        "delayed_recall_session_completed",
        participant_id=rs.participant_id,
        experiment_id=rs.experiment_id,
        payload={
            "session_token": mask_token(rs.token),
            "completed_at": now.isoformat(),
            "completion_data": rs.completion_data,
        },
    )
    session.commit()
    return {"success": True, "message": "Session marked as completed", "completed_at": now}
