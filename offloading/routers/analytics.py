# offloading/routers/analytics.py
from __future__ import annotations

from io import BytesIO, StringIO
from typing import Any, Dict, List, Optional
import csv

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlmodel import Session, select

from offloading.core.clock import utcnow
from offloading.core.db import get_session
from offloading.core.security import verify_api_key
from offloading.models.participant import Participant
from offloading.models.task_result import TaskResult

router = APIRouter(prefix="/analytics", tags=["analytics"], dependencies=[Depends(verify_api_key)])

EXPORT_COLUMNS = [
    "participant_code", "participant_id", "item_id", "phase", "locale",
    "response", "normalized_response", "correct", "edit_distance",
    "similarity", "score_pct", "attempts", "time_seconds", "completed_at",
]


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _pct(similarity: Optional[float]) -> int:
    return round((similarity or 0.0) * 100)


def _results_for_experiment(session: Session, experiment_id: str) -> List[TaskResult]:
    stmt = (
        select(TaskResult)
        .where(TaskResult.experiment_id == experiment_id)
        .order_by(TaskResult.created_at.desc(), TaskResult.id.desc())
    )
    return list(session.exec(stmt).all())


def _codes(session: Session, results: List[TaskResult]) -> Dict[str, str]:
    ids = {r.participant_id for r in results if r.participant_id}
    if not ids:
        return {}
    rows = session.exec(select(Participant).where(Participant.id.in_(list(ids)))).all()
    return {p.id: p.participant_code for p in rows}


def score_distribution(similarities: List[float]) -> Dict[str, int]:
    return {
        "excellent": sum(1 for s in similarities if s >= 0.8),
        "good": sum(1 for s in similarities if 0.6 <= s < 0.8),
        "needs_improvement": sum(1 for s in similarities if s < 0.6),
    }


@router.get("/experiments/{experiment_id}")
def experiment_summary(experiment_id: str, session: Session = Depends(get_session)):
    results = _results_for_experiment(session, experiment_id)
    codes = _codes(session, results)

    similarities = [r.similarity for r in results if r.similarity is not None]
    times = [r.time_on_item_seconds for r in results if r.time_on_item_seconds is not None]

    recent = [{
        "id": r.id,
        "participant": codes.get(r.participant_id or "", "Anonymous"),
        "score": _pct(r.similarity),
        "attempts": r.attempts or 1,
        "time_spent": r.time_on_item_seconds or 0,
        "completed": r.created_at,
        "item_id": r.item_id,
        "response": r.response_raw,
    } for r in results[:50]]

    return {
        "total_participants": len({r.participant_id for r in results if r.participant_id}),
        "completed_sessions": len(results),
        "average_score": round(_mean(similarities) * 100, 1),
        "average_time_on_task": round(_mean(times), 1),
        "recent_results": recent,
        "score_distribution": score_distribution(similarities),
        "total_results": len(results),
    }


@router.get("/participants/{participant_id}")
def participant_progress(
    participant_id: str,
    experiment_id: Optional[str] = Query(None, alias="experimentId"),
    session: Session = Depends(get_session),
):
    stmt = select(TaskResult).where(TaskResult.participant_id == participant_id)
    if experiment_id:
        stmt = stmt.where(TaskResult.experiment_id == experiment_id)
    results = session.exec(stmt.order_by(TaskResult.created_at.desc()).limit(100)).all()

    progress = [{
        "experiment_id": r.experiment_id,
        "item_id": r.item_id,
        "phase": r.phase,
        "score": _pct(r.similarity),
        "attempts": r.attempts or 1,
        "time_spent": r.time_on_item_seconds or 0,
        "completed": r.created_at,
        "response": r.response_raw,
    } for r in results]

    return {
        "participant_id": participant_id,
        "total_attempts": len(results),
        "average_score": round(_mean([r.similarity or 0.0 for r in results]) * 100),
        "progress": progress,
    }


def _export_rows(session: Session, experiment_id: str) -> List[List[Any]]:
    results = _results_for_experiment(session, experiment_id)
    codes = _codes(session, results)
    rows = []
    for r in results:
        rows.append([
            codes.get(r.participant_id or "", "Anonymous"),
            r.participant_id or "",
            r.item_id or "",
            r.phase,
            r.locale,
            (r.response_raw or "").replace("\n", " ").strip(),
            r.response_normalized,
            (r.correct_raw or "").replace("\n", " ").strip(),
            r.edit_distance,
            r.similarity,
            _pct(r.similarity),
            r.attempts or 1,
            r.time_on_item_seconds or 0,
            r.created_at.isoformat() if r.created_at else "",
        ])
    return rows


@router.get("/experiments/{experiment_id}/export")
def export_experiment(
    experiment_id: str,
    fmt: str = Query("csv", pattern="^(csv|xlsx)$"),
    session: Session = Depends(get_session),
):
    rows = _export_rows(session, experiment_id)
    now = utcnow().strftime("%Y%m%d_%H%M%S")

    if fmt == "xlsx":
        wb = Workbook()
        ws = wb.active
        ws.title = "results"
        ws.append(EXPORT_COLUMNS)
        for row in rows:
            ws.append(row)
        stream = BytesIO()
        wb.save(stream)
        stream.seek(0)
        return StreamingResponse(
            stream,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename=results_{experiment_id}_{now}.xlsx"},
        )

    # UTF-8 BOM so Excel picks up accents and non-Latin scripts
    buf = StringIO(newline="")
    buf.write("\ufeff")
    writer = csv.writer(buf)
    writer.writerow(EXPORT_COLUMNS)
    writer.writerows(rows)
    return StreamingResponse(
        BytesIO(buf.getvalue().encode("utf-8")),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename=results_{experiment_id}_{now}.csv"},
    )
