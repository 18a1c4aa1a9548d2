# offloading/models/event.py
from __future__ import annotations
from datetime import datetime
from typing import Optional, Dict, Any
from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import DateTime

from offloading.core.clock import utcnow


class Event(SQLModel, table=True):
    __tablename__ = "events"

    id: Optional[int] = Field(default=None, primary_key=True)
    participant_id: Optional[str] = Field(default=None, index=True)
    experiment_id: Optional[str] = Field(default=None, index=True)
    session_id: Optional[str] = None
    event_type: str = Field(index=True)  # blank_submit, hint_revealed, result_submitted, paas_submit, delayed_recall_*
    locale: Optional[str] = None

    payload: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=True))
