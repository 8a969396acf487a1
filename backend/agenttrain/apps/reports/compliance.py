# backend/agenttrain/apps/reports/compliance.py
"""
Compliance status computation.

Pure functions only: no session, no clock reads except `utcnow()`, which
callers pass in as `now` so results are reproducible in tests.
"""

from __future__ import annotations

import calendar
import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional, Tuple, Union

from agenttrain.apps.training.models import CompletionStatus, TrainingFrequency


class ComplianceStatus(str, enum.Enum):
    COMPLIANT = "compliant"
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    NOT_STARTED = "not_started"


@dataclass(frozen=True)
class StatusResult:
    status: ComplianceStatus
    next_due: Optional[datetime]


# Months until a completed training comes due again.
RECURRENCE_MONTHS = {
    TrainingFrequency.ANNUAL: 12,
    TrainingFrequency.SEMI_ANNUAL: 6,
}


# ---------------------------------------------------------------------------
# DATE HELPERS
# ---------------------------------------------------------------------------


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Union[datetime, str, None]) -> Optional[datetime]:
    """
    Normalise a stored timestamp to naive UTC.

    SQLite hands back naive values while Postgres returns aware ones; the
    engine compares them all against a naive UTC `now`.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def add_months(base: datetime, months: int) -> datetime:
    """
    Add calendar months, keeping the time of day.

    The day is clamped to the last valid day of the target month, so
    Jan 31 + 1 month is Feb 28 (Feb 29 in leap years).
    """
    if months == 0:
        return base

    total = base.month - 1 + months
    year = base.year + total // 12
    month = total % 12 + 1
    day = min(base.day, calendar.monthrange(year, month)[1])
    return base.replace(year=year, month=month, day=day)


# ---------------------------------------------------------------------------
# STATUS
# ---------------------------------------------------------------------------


def compute_status(
    frequency: Union[TrainingFrequency, str],
    last_completed: Optional[datetime],
    now: datetime,
    due_soon_days: int,
) -> StatusResult:
    frequency = TrainingFrequency(frequency)

    months = RECURRENCE_MONTHS.get(frequency)
    if months is None:
        # one_time / as_needed: done once is done.
        if last_completed is not None:
            return StatusResult(ComplianceStatus.COMPLIANT, None)
        return StatusResult(ComplianceStatus.NOT_STARTED, None)

    if last_completed is None:
        return StatusResult(ComplianceStatus.NOT_STARTED, None)

    next_due = add_months(last_completed, months)
    if next_due < now:
        return StatusResult(ComplianceStatus.OVERDUE, next_due)
    if next_due <= now + timedelta(days=due_soon_days):
        return StatusResult(ComplianceStatus.DUE_SOON, next_due)
    return StatusResult(ComplianceStatus.COMPLIANT, next_due)


# ---------------------------------------------------------------------------
# LATEST APPROVED COMPLETION
# ---------------------------------------------------------------------------


def effective_completion_date(completion) -> Optional[datetime]:
    """Approval time when present, otherwise the completion time."""
    return to_naive_utc(completion.approved_at or completion.completed_at)


def _is_approved(completion) -> bool:
    status = getattr(completion, "status", CompletionStatus.APPROVED)
    return CompletionStatus(status) == CompletionStatus.APPROVED


def latest_approved_completions(completions: Iterable) -> Dict[Tuple[str, str], object]:
    """
    Most recent approved completion per (user_id, training_id).

    Picks the max of (effective date, completed_at) so the result does not
    depend on the order rows arrive in.
    """
    latest: Dict[Tuple[str, str], object] = {}
    latest_key: Dict[Tuple[str, str], Tuple[datetime, datetime]] = {}

    for completion in completions:
        if not _is_approved(completion):
            continue
        effective = effective_completion_date(completion)
        if effective is None:
            continue
        completed = to_naive_utc(completion.completed_at) or effective
        pair = (completion.user_id, completion.training_id)
        sort_key = (effective, completed)
        if pair not in latest_key or sort_key > latest_key[pair]:
            latest[pair] = completion
            latest_key[pair] = sort_key

    return latest
