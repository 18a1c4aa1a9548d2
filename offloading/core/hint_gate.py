# offloading/core/hint_gate.py
"""
Hint gate: a hint may be revealed as soon as EITHER the attempt threshold OR
the elapsed-time threshold is met. Stateless; the caller tracks attempt counts
and the first-attempt timestamp.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

DEFAULT_MIN_ATTEMPTS = 3
DEFAULT_TIME_BEFORE_SECONDS = 120.0

_MIN_ATTEMPTS_KEYS = ("min_attempts_before_hint", "minAttemptsBeforeHint")
_TIME_BEFORE_KEYS = ("time_before_auto_hint_seconds", "timeBeforeAutoHintSeconds")


class HintReason(str, Enum):
    NONE = "none"
    NOT_ALLOWED_YET = "not_allowed_yet"


@dataclass(frozen=True)
class HintPolicy:
    min_attempts_before_hint: int = DEFAULT_MIN_ATTEMPTS
    time_before_auto_hint_seconds: float = DEFAULT_TIME_BEFORE_SECONDS


@dataclass(frozen=True)
class HintRequest:
    now: datetime
    attempt_count: Optional[int] = 0
    first_attempt_at: Optional[datetime] = None


@dataclass(frozen=True)
class HintDecision:
    allowed: bool
    reason: HintReason
    retry_after_attempts: int = 0
    retry_after_seconds: float = 0.0

    def as_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "reason": self.reason.value,
            "retry_after_attempts": self.retry_after_attempts,
            "retry_after_seconds": self.retry_after_seconds,
        }


def _first_present(rules: Mapping[str, Any], keys) -> Any:
    for k in keys:
        if rules.get(k) is not None:
            return rules[k]
    return None


def _as_int(v: Any, default: int) -> int:
    try:
        f = float(v)
        if not math.isfinite(f):
            return default
        return max(0, int(f))
    except (TypeError, ValueError, OverflowError):
        return default


def _as_float(v: Any, default: float) -> float:
    try:
        if isinstance(v, str):
            v = v.strip().replace(",", ".")
        f = float(v)
        if not math.isfinite(f):
            return default
        return max(0.0, f)
    except (TypeError, ValueError, OverflowError):
        return default


def resolve_policy(
    rules: Optional[Mapping[str, Any]] = None,
    base: Optional[HintPolicy] = None,
) -> HintPolicy:
    """Overlay `rules` on `base` (or the defaults) field by field.

    Missing, null or unparsable fields keep the base value; an experiment that
    only sets the time threshold still gets the default attempt threshold.
    """
    base = base or HintPolicy()
    if not isinstance(rules, Mapping):
        return base
    min_attempts = _first_present(rules, _MIN_ATTEMPTS_KEYS)
    time_before = _first_present(rules, _TIME_BEFORE_KEYS)
    return HintPolicy(
        min_attempts_before_hint=(
            base.min_attempts_before_hint if min_attempts is None
            else _as_int(min_attempts, base.min_attempts_before_hint)
        ),
        time_before_auto_hint_seconds=(
            base.time_before_auto_hint_seconds if time_before is None
            else _as_float(time_before, base.time_before_auto_hint_seconds)
        ),
    )


def _utc(dt: datetime) -> datetime:
    # naive timestamps are taken as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def elapsed_seconds(first_attempt_at: Optional[datetime], now: datetime) -> float:
    """Seconds since the first attempt, floored at 0 (clock skew); 0 when absent."""
    if first_attempt_at is None:
        return 0.0
    delta = (_utc(now) - _utc(first_attempt_at)).total_seconds()
    return max(0.0, delta)


def decide(request: HintRequest, policy: Optional[HintPolicy] = None) -> HintDecision:
    policy = policy or HintPolicy()
    attempts = max(0, request.attempt_count or 0)
    min_attempts = max(0, policy.min_attempts_before_hint)
    time_before = policy.time_before_auto_hint_seconds
    # a policy built by hand can still carry inf/nan
    if not math.isfinite(time_before):
        time_before = DEFAULT_TIME_BEFORE_SECONDS
    time_before = max(0.0, time_before)
    elapsed = elapsed_seconds(request.first_attempt_at, request.now)

    if attempts >= min_attempts or elapsed >= time_before:
        return HintDecision(allowed=True, reason=HintReason.NONE)

    return HintDecision(
        allowed=False,
        reason=HintReason.NOT_ALLOWED_YET,
        retry_after_attempts=max(0, min_attempts - attempts),
        retry_after_seconds=max(0.0, time_before - elapsed),
    )
