# offloading/core/hint_policy.py
from __future__ import annotations
from typing import Optional

from sqlmodel import Session

from offloading.core.hint_gate import HintPolicy, resolve_policy
from offloading.core.settings import settings
from offloading.models.experiment import Experiment


def default_policy() -> HintPolicy:
    return HintPolicy(
        min_attempts_before_hint=settings.HINT_MIN_ATTEMPTS,
        time_before_auto_hint_seconds=settings.HINT_TIME_BEFORE_SECONDS,
    )


def experiment_policy(session: Session, experiment_id: Optional[str]) -> HintPolicy:
    """Stored hint_rules of the experiment over the configured defaults."""
    base = default_policy()
    if not experiment_id:
        return base
    exp = session.get(Experiment, experiment_id)
    if exp is None:
        return base
    return resolve_policy(exp.hint_rules, base=base)
