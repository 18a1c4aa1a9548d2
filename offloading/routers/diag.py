# offloading/routers/diag.py
from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from sqlalchemy import func

from offloading.core.db import get_session
from offloading.core.security import verify_api_key
from offloading.core.settings import settings
from offloading.models.event import Event
from offloading.models.experiment import Experiment
from offloading.models.participant import Participant
from offloading.models.recall_session import RecallSession
from offloading.models.task_result import TaskResult

router = APIRouter(prefix="/_diag", tags=["diag"])

@router.get("/ping")
def diag_ping():
    return {"ok": True, "scope": "/_diag"}

@router.get("/config", dependencies=[Depends(verify_api_key)])
def diag_config(session: Session = Depends(get_session)):
    counts = {}
    for name, model in (
        ("experiments", Experiment),
        ("participants", Participant),
        ("events", Event),
        ("task_results", TaskResult),
        ("recall_sessions", RecallSession),
    ):
        counts[name] = session.exec(select(func.count()).select_from(model)).one()

    return {
        "ok": True,
        "project": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "api_key": settings.masked_api_key(),
        "default_locale": settings.DEFAULT_LOCALE,
        "max_scored_chars": settings.MAX_SCORED_CHARS,
        "hint_defaults": {
            "min_attempts_before_hint": settings.HINT_MIN_ATTEMPTS,
            "time_before_auto_hint_seconds": settings.HINT_TIME_BEFORE_SECONDS,
        },
        "recall_window_hours": {
            "early": settings.RECALL_EARLY_HOURS,
            "late": settings.RECALL_LATE_HOURS,
        },
        "counts": counts,
    }
