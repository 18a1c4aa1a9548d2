from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _In(BaseModel):
    # the browser client posts camelCase, scripts post snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- tasks ----

class AttemptIn(_In):
    participant_id: Optional[str] = None
    experiment_id: Optional[str] = None
    session_id: Optional[str] = None
    locale: Optional[str] = None
    item_id: Optional[str] = None
    response: Optional[str] = None
    attempt_count: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class HintRequestIn(_In):
    participant_id: Optional[str] = None
    experiment_id: Optional[str] = None
    story_id: Optional[str] = None
    target_word_index: Optional[int] = None
    attempt_count: Optional[int] = None
    first_attempt_at: Optional[datetime] = None
    hint_rules: Optional[Dict[str, Any]] = None
    correct: Optional[str] = None


class ResultIn(_In):
    participant_id: Optional[str] = None
    experiment_id: Optional[str] = None
    item_id: Optional[str] = None
    phase: str = "immediate"
    response: Optional[str] = None
    correct: Optional[str] = None
    attempts: int = 1
    time_on_item_seconds: float = 0.0
    locale: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PaasIn(_In):
    participant_id: Optional[str] = None
    experiment_id: Optional[str] = None
    phase: str = "post-task"
    score: int = Field(ge=1, le=9)


# ---- participants / experiments ----

class RegisterIn(_In):
    locale: str = "en"
    timezone: Optional[str] = None
    consent: Dict[str, Any] = Field(default_factory=dict)
    demographics: Dict[str, Any] = Field(default_factory=dict)


class ExperimentIn(_In):
    title: str
    created_by: Optional[str] = None
    languages: List[str] = Field(default_factory=lambda: ["en"])
    design: Dict[str, Any] = Field(default_factory=dict)
    hint_rules: Dict[str, Any] = Field(default_factory=dict)
    delayed_window_hours: Dict[str, Any] = Field(default_factory=lambda: {"min": 48, "max": 72})
    status: str = "draft"


class HintPolicyOut(BaseModel):
    min_attempts_before_hint: int
    time_before_auto_hint_seconds: float


# ---- delayed recall ----

class GenerateLinkIn(_In):
    participant_id: str
    experiment_id: str
    delay_hours: Optional[float] = Field(default=None, ge=0)


class GenerateBulkLinksIn(_In):
    participant_ids: List[str] = Field(min_length=1)
    experiment_id: str
    delay_hours: Optional[float] = Field(default=None, ge=0)


class ValidateSessionIn(_In):
    participant_id: str
    experiment_id: str
    session_token: str


class CompleteSessionIn(ValidateSessionIn):
    completion_data: Dict[str, Any] = Field(default_factory=dict)
