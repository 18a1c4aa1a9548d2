# scripts/rescore_results.py
"""
Recompute every stored task result from its raw response/correct pair and
report rows whose stored score differs. Exit code 1 when any row differs.
"""
from __future__ import annotations
import argparse
import sys

from loguru import logger
from sqlmodel import Session, select

from offloading.core.db import get_engine
from offloading.core.logging import setup_logging
from offloading.core.scoring import cap_for_scoring, score_response
from offloading.core.settings import settings
from offloading.models.task_result import TaskResult


def rescore(session: Session, experiment_id=None, fix: bool = False):
    stmt = select(TaskResult)
    if experiment_id:
        stmt = stmt.where(TaskResult.experiment_id == experiment_id)

    mismatches = []
    for r in session.exec(stmt.order_by(TaskResult.id)):
        meta = r.metadata_ or {}
        if meta.get("unicode_replaced"):
            # raw text was altered on storage, the original input is gone
            logger.debug("result {} skipped: stored text was sanitized", r.id)
            continue
        # the cap in force at submission time, not today's setting
        limit = meta.get("max_scored_chars", settings.MAX_SCORED_CHARS)
        response, _ = cap_for_scoring(r.response_raw, limit)
        correct, _ = cap_for_scoring(r.correct_raw, limit)

        scored = score_response(response, correct, r.locale)
        if (
            scored.edit_distance != r.edit_distance
            or abs(scored.similarity - r.similarity) > 1e-9
            or scored.normalized_response != r.response_normalized
            or scored.normalized_correct != r.correct_normalized
        ):
            mismatches.append({
                "id": r.id,
                "stored": (r.edit_distance, r.similarity),
                "recomputed": (scored.edit_distance, scored.similarity),
            })
            if fix:
                r.response_normalized = scored.normalized_response
                r.correct_normalized = scored.normalized_correct
                r.edit_distance = scored.edit_distance
                r.similarity = scored.similarity
                session.add(r)
    if fix and mismatches:
        session.commit()
    return mismatches


def main():
    ap = argparse.ArgumentParser(description="Rescore stored task results")
    ap.add_argument("--experiment", default=None)
    ap.add_argument("--fix", action="store_true", help="write recomputed values back")
    args = ap.parse_args()

    setup_logging()
    with Session(get_engine()) as session:
        mismatches = rescore(session, args.experiment, fix=args.fix)

    for m in mismatches:
        logger.warning("result {} stored={} recomputed={}", m["id"], m["stored"], m["recomputed"])
    logger.info("{} mismatching result(s){}", len(mismatches), " fixed" if args.fix and mismatches else "")
    sys.exit(1 if mismatches and not args.fix else 0)


if __name__ == "__main__":
    main()
