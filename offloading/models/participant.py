# offloading/models/participant.py
from __future__ import annotations
from datetime import datetime
from typing import Optional, Dict, Any
from uuid import uuid4
from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import DateTime

from offloading.core.clock import utcnow


class Participant(SQLModel, table=True):
    __tablename__ = "participants"

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    participant_code: str = Field(index=True, unique=True)
    role: str = "student"
    locale: str = "en"
    timezone: Optional[str] = None

    consent: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    demographics: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
