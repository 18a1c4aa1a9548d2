# scripts/generate_sample_results.py
"""
Seed a database with a demo experiment, a handful of participants and scored
task results, so the analytics and export endpoints have something to show.

    python scripts/generate_sample_results.py --participants 5 --seed 7
"""
from __future__ import annotations
import argparse
import random

from loguru import logger
from sqlmodel import Session, delete, select

from offloading.core.db import get_engine, init_db
from offloading.core.logging import setup_logging
from offloading.core.scoring import score_response
from offloading.models.experiment import Experiment
from offloading.models.participant import Participant
from offloading.models.task_result import TaskResult

DEMO_EXPERIMENT_ID = "demo-experiment"

SAMPLE_RESPONSES = [
    ("computer", ["computer", "compter", "computr", "Computer "]),
    ("programming", ["programming", "programing", "progamming", "programming"]),
    ("software", ["software", "sofware", "software", "softwar"]),
    ("algorithm", ["algorithm", "algoritm", "algorithem", "algorithm"]),
    ("database", ["database", "databse", "data base", "database"]),
]


def ensure_experiment(session: Session) -> Experiment:
    exp = session.get(Experiment, DEMO_EXPERIMENT_ID)
    if exp is None:
        exp = Experiment(
            id=DEMO_EXPERIMENT_ID,
            title="Demo transcription study",
            created_by="seed",
            status="active",
            hint_rules={"min_attempts_before_hint": 3, "time_before_auto_hint_seconds": 120},
        )
        session.add(exp)
        logger.info("created experiment {}", DEMO_EXPERIMENT_ID)
    return exp


def ensure_participants(session: Session, n: int):
    out = []
    for i in range(1, n + 1):
        code = f"STUD{i:03d}"
        p = session.exec(select(Participant).where(Participant.participant_code == code)).first()
        if p is None:
            p = Participant(
                participant_code=code,
                locale="en",
                timezone="UTC",
                consent={"given": True},
            )
            session.add(p)
            logger.info("created participant {}", code)
        out.append(p)
    return out


def main():
    ap = argparse.ArgumentParser(description="Generate sample task results")
    ap.add_argument("--participants", type=int, default=5)
    ap.add_argument("--seed", type=int, default=None, help="random seed for reproducible data")
    ap.add_argument("--keep", action="store_true", help="keep existing results of the demo experiment")
    args = ap.parse_args()

    setup_logging()
    rng = random.Random(args.seed)
    init_db()

    with Session(get_engine()) as session:
        ensure_experiment(session)
        participants = ensure_participants(session, args.participants)
        session.commit()

        if not args.keep:
            session.exec(delete(TaskResult).where(TaskResult.experiment_id == DEMO_EXPERIMENT_ID))
            logger.info("cleared existing results of {}", DEMO_EXPERIMENT_ID)

        created = 0
        for p in participants:
            for idx, (correct, responses) in enumerate(SAMPLE_RESPONSES):
                response = rng.choice(responses)
                scored = score_response(response, correct, p.locale)
                session.add(TaskResult(
                    participant_id=p.id,
                    experiment_id=DEMO_EXPERIMENT_ID,
                    item_id=f"story_001-word_{idx}",
                    phase="immediate_transcription",
                    locale=p.locale,
                    response_raw=response,
                    correct_raw=correct,
                    response_normalized=scored.normalized_response,
                    correct_normalized=scored.normalized_correct,
                    edit_distance=scored.edit_distance,
                    similarity=scored.similarity,
                    attempts=rng.randint(1, 3),
                    time_on_item_seconds=float(rng.randint(10, 39)),
                ))
                created += 1
        session.commit()

    logger.info("generated {} results for {} participants", created, len(participants))


if __name__ == "__main__":
    main()
