# offloading/models/task_result.py
from __future__ import annotations
from datetime import datetime
from typing import Optional, Dict, Any
from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import DateTime

from offloading.core.clock import utcnow


class TaskResult(SQLModel, table=True):
    __tablename__ = "task_results"

    id: Optional[int] = Field(default=None, primary_key=True)
    participant_id: Optional[str] = Field(default=None, index=True)
    experiment_id: Optional[str] = Field(default=None, index=True)
    item_id: Optional[str] = None
    phase: str = "immediate"  # baseline_knowledge, immediate_transcription, delayed_recall, ...
    locale: str = "en"

    response_raw: Optional[str] = None
    correct_raw: Optional[str] = None
    response_normalized: str = ""
    correct_normalized: str = ""
    edit_distance: int = 0
    similarity: float = 0.0

    attempts: int = 1
    time_on_item_seconds: float = 0.0
    metadata_: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON))

    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=True))
