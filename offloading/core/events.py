# offloading/core/events.py
from __future__ import annotations
from typing import Any, Dict, Optional
from sqlmodel import Session

from offloading.models.event import Event


def record_event(
    session: Session,
    event_type: str,
    participant_id: Optional[str] = None,
    experiment_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
    session_id: Optional[str] = None,
    locale: Optional[str] = None,
) -> Event:
    """Adds a telemetry event to the session; the caller commits."""
    ev = Event(
        participant_id=participant_id,
        experiment_id=experiment_id,
        session_id=session_id,
        event_type=event_type,
        locale=locale,
        payload=payload or {},
    )
    session.add(ev)
    return ev
