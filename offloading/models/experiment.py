# offloading/models/experiment.py
from __future__ import annotations
from datetime import datetime
from typing import Optional, Dict, Any, List
from uuid import uuid4
from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import DateTime

from offloading.core.clock import utcnow


class Experiment(SQLModel, table=True):
    __tablename__ = "experiments"

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    title: Optional[str] = None
    created_by: Optional[str] = None
    languages: List[str] = Field(default_factory=lambda: ["en"], sa_column=Column(JSON))
    design: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    # {"min_attempts_before_hint": 3, "time_before_auto_hint_seconds": 120}; partial is fine
    hint_rules: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    delayed_window_hours: Dict[str, Any] = Field(
        default_factory=lambda: {"min": 48, "max": 72}, sa_column=Column(JSON)
    )
    status: str = "draft"

    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=True))
