# offloading/routers/experiments.py
from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from offloading.core.db import get_session
from offloading.core.hint_policy import experiment_policy
from offloading.core.security import verify_api_key
from offloading.models.experiment import Experiment
from offloading.models.schemas import ExperimentIn, HintPolicyOut

router = APIRouter(prefix="/experiments", tags=["experiments"])


def _get_or_404(session: Session, experiment_id: str) -> Experiment:
    exp = session.get(Experiment, experiment_id)
    if exp is None:
        raise HTTPException(status_code=404, detail="not found")
    return exp


@router.get("", response_model=List[Experiment])
def list_experiments(session: Session = Depends(get_session)):
    return session.exec(select(Experiment).order_by(Experiment.created_at.desc())).all()


@router.get("/{experiment_id}", response_model=Experiment)
def get_experiment(experiment_id: str, session: Session = Depends(get_session)):
    return _get_or_404(session, experiment_id)


@router.post("", response_model=Experiment, status_code=201, dependencies=[Depends(verify_api_key)])
def create_experiment(payload: ExperimentIn, session: Session = Depends(get_session)):
    exp = Experiment(**payload.model_dump())
    session.add(exp)
    session.commit()
    session.refresh(exp)
    return exp


@router.get("/{experiment_id}/hint-policy", response_model=HintPolicyOut)
def get_hint_policy(experiment_id: str, session: Session = Depends(get_session)):
    _get_or_404(session, experiment_id)
    policy = experiment_policy(session, experiment_id)
    return HintPolicyOut(
        min_attempts_before_hint=policy.min_attempts_before_hint,
        time_before_auto_hint_seconds=policy.time_before_auto_hint_seconds,
    )
