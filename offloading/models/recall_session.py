# offloading/models/recall_session.py
from __future__ import annotations
from datetime import datetime
from typing import Optional, Dict, Any
from uuid import uuid4
from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import DateTime

from offloading.core.clock import utcnow


class RecallSession(SQLModel, table=True):
    __tablename__ = "recall_sessions"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    participant_id: str = Field(index=True)
    experiment_id: str = Field(index=True)
    token: str = Field(index=True, unique=True)

    scheduled_at: datetime = Field(sa_type=DateTime(timezone=True))
    delay_hours: float = 48.0
    status: str = "pending"  # pending | started | completed
    bulk_generated: bool = False

    accessed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    completion_data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
