# offloading/routers/participants.py
from __future__ import annotations
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from offloading.core.db import get_session
from offloading.models.participant import Participant
from offloading.models.schemas import RegisterIn

router = APIRouter(prefix="/participants", tags=["participants"])


def _new_code(session: Session) -> str:
    # P-xxxxxxxx, drawn again on collision
    while True:
        code = "P-" + uuid4().hex[:8]
        taken = session.exec(select(Participant.id).where(Participant.participant_code == code)).first()
        if taken is None:
            return code


@router.post("/register", status_code=201)
def register(payload: RegisterIn, session: Session = Depends(get_session)):
    p = Participant(
        participant_code=_new_code(session),
        locale=payload.locale or "en",
        timezone=payload.timezone,
        consent=payload.consent,
        demographics=payload.demographics,
    )
    session.add(p)
    session.commit()
    session.refresh(p)
    return {"participant_id": p.id, "participant_code": p.participant_code}


@router.get("/{participant_id}")
def get_participant(participant_id: str, session: Session = Depends(get_session)):
    p = session.get(Participant, participant_id)
    if p is None:
        raise HTTPException(status_code=404, detail="participant not found")
    return {
        "participant_id": p.id,
        "participant_code": p.participant_code,
        "locale": p.locale,
        "timezone": p.timezone,
        "created_at": p.created_at,
    }
