# offloading/routers/tasks.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from loguru import logger
from sqlmodel import Session

from offloading.core.clock import utcnow
from offloading.core.db import get_session
from offloading.core.events import record_event
from offloading.core.hint_gate import HintRequest, decide, resolve_policy
from offloading.core.hint_policy import experiment_policy
from offloading.core.scoring import cap_for_scoring, score_response, utf8_safe
from offloading.core.settings import settings
from offloading.models.participant import Participant
from offloading.models.schemas import AttemptIn, HintRequestIn, PaasIn, ResultIn
from offloading.models.task_result import TaskResult

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _scoring_locale(session: Session, payload: ResultIn) -> str:
    if payload.locale:
        return payload.locale
    if payload.participant_id:
        p = session.get(Participant, payload.participant_id)
        if p is not None and p.locale:
            return p.locale
    return settings.DEFAULT_LOCALE


def _letter_hint(correct: Optional[str]) -> Dict[str, Any]:
    word = (correct or "").strip()
    return {
        "hint_type": "letter",
        "hint_text": f"The word starts with '{word[0]}'" if word else None,
    }


@router.post("/submit-attempt")
def submit_attempt(payload: AttemptIn, session: Session = Depends(get_session)):
    record_event(
        session,
        "blank_submit",
        participant_id=payload.participant_id,
        experiment_id=payload.experiment_id,
        session_id=payload.session_id,
        locale=payload.locale,
        payload=jsonable_encoder(payload.model_dump()),
    )
    session.commit()
    return {"ok": True}


@router.post("/reveal-hint")
def reveal_hint(payload: HintRequestIn, session: Session = Depends(get_session)):
    # experiment config first, then whatever the client sent on top of it
    policy = resolve_policy(payload.hint_rules, base=experiment_policy(session, payload.experiment_id))
    decision = decide(
        HintRequest(
            now=utcnow(),
            attempt_count=payload.attempt_count,
            first_attempt_at=payload.first_attempt_at,
        ),
        policy,
    )
    logger.debug(
        "hint participant={} attempts={} allowed={}",
        payload.participant_id, payload.attempt_count, decision.allowed,
    )

    if not decision.allowed:
        out = decision.as_dict()
        out.pop("allowed")
        return {"allowed": False, **out}

    hint = _letter_hint(utf8_safe(payload.correct))
    record_event(
        session,
        "hint_revealed",
        participant_id=payload.participant_id,
        experiment_id=payload.experiment_id,
        payload={
            "story_id": payload.story_id,
            "target_word_index": payload.target_word_index,
            "attempt_count": payload.attempt_count,
            "hint": hint,
        },
    )
    session.commit()
    return {"allowed": True, "reason": decision.reason.value, "hint": hint}


@router.post("/submit-result")
def submit_result(payload: ResultIn, session: Session = Depends(get_session)):
    locale = _scoring_locale(session, payload)
    limit = settings.MAX_SCORED_CHARS
    response, cut_response = cap_for_scoring(payload.response, limit)
    correct, cut_correct = cap_for_scoring(payload.correct, limit)
    metadata = dict(payload.metadata)
    # rescoring reads the cap back from here
    metadata["max_scored_chars"] = limit
    if cut_response or cut_correct:
        metadata["truncated"] = True
        logger.warning(
            "scoring input truncated to {} chars (participant={}, item={})",
            limit, payload.participant_id, payload.item_id,
        )

    scored = score_response(response, correct, locale)
    response_raw = utf8_safe(payload.response)
    correct_raw = utf8_safe(payload.correct)
    if response_raw != payload.response or correct_raw != payload.correct:
        # stored text no longer matches what was scored
        metadata["unicode_replaced"] = True

    result = TaskResult(
        participant_id=payload.participant_id,
        experiment_id=payload.experiment_id,
        item_id=payload.item_id,
        phase=payload.phase,
        locale=locale,
        response_raw=response_raw,
        correct_raw=correct_raw,
        response_normalized=scored.normalized_response,
        correct_normalized=scored.normalized_correct,
        edit_distance=scored.edit_distance,
        similarity=scored.similarity,
        attempts=payload.attempts,
        time_on_item_seconds=payload.time_on_item_seconds,
        metadata_=metadata,
    )
    session.add(result)
    record_event(
        session,
        "result_submitted",
        participant_id=payload.participant_id,
        experiment_id=payload.experiment_id,
        locale=locale,
        payload={
            "item_id": payload.item_id,
            "phase": payload.phase,
            "response": response_raw,
            "attempts": payload.attempts,
            "time_on_item_seconds": payload.time_on_item_seconds,
            "metadata": metadata,
        },
    )
    session.commit()
    session.refresh(result)
    return {"ok": True, "result": result_out(result)}


@router.post("/submit-paas")
def submit_paas(payload: PaasIn, session: Session = Depends(get_session)):
    record_event(
        session,
        "paas_submit",
        participant_id=payload.participant_id,
        experiment_id=payload.experiment_id,
        payload={"phase": payload.phase, "score": payload.score},
    )
    session.commit()
    return {"ok": True}


def result_out(r: TaskResult) -> Dict[str, Any]:
    return {
        "id": r.id,
        "participant_id": r.participant_id,
        "experiment_id": r.experiment_id,
        "item_id": r.item_id,
        "phase": r.phase,
        "locale": r.locale,
        "response_raw": r.response_raw,
        "response_normalized": r.response_normalized,
        "correct_normalized": r.correct_normalized,
        "edit_distance": r.edit_distance,
        "similarity": r.similarity,
        "attempts": r.attempts,
        "time_on_item_seconds": r.time_on_item_seconds,
        "metadata": r.metadata_ or {},
        "created_at": r.created_at.isoformat() if r.created_at else None,
    }
