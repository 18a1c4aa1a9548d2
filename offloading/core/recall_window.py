# offloading/core/recall_window.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional


class WindowState(str, Enum):
    TOO_EARLY = "too_early"
    OPEN = "open"
    EXPIRED = "expired"


@dataclass(frozen=True)
class RecallWindow:
    state: WindowState
    hours_early: float  # negative once the scheduled time has passed
    can_access_at: Optional[datetime] = None


def _utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def recall_window(
    scheduled_at: datetime,
    now: datetime,
    early_hours: float = 6.0,
    late_hours: float = 24.0,
) -> RecallWindow:
    """Classify `now` against a delayed-recall slot.

    Access opens `early_hours` before `scheduled_at` and closes `late_hours`
    after it.
    """
    scheduled_at, now = _utc(scheduled_at), _utc(now)
    hours_early = (scheduled_at - now).total_seconds() / 3600.0
    if hours_early > early_hours:
        return RecallWindow(
            state=WindowState.TOO_EARLY,
            hours_early=hours_early,
            can_access_at=scheduled_at - timedelta(hours=early_hours),
        )
    if hours_early < -late_hours:
        return RecallWindow(state=WindowState.EXPIRED, hours_early=hours_early)
    return RecallWindow(state=WindowState.OPEN, hours_early=hours_early)
