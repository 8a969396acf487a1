# backend/agenttrain/apps/reports/schemas.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_serializer

from .compliance import ComplianceStatus
from .intents import ReportIntent


def utc_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 UTC with millisecond precision and a trailing "Z". Naive values are UTC."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


# ---------------------------------------------------------------------------
# REQUEST
# ---------------------------------------------------------------------------


class ReportRequest(BaseModel):
    prompt: str = Field("", description="Free-text question, e.g. 'Show overdue trainings'.")


# ---------------------------------------------------------------------------
# ROWS
# ---------------------------------------------------------------------------


class ComplianceRow(BaseModel):
    """One (subject, assigned training) pair with its computed status."""

    user_id: str
    net_id: str
    full_name: str
    job_title: str
    training_id: str
    training_title: str
    category: str
    frequency: str
    status: ComplianceStatus
    last_completed_at: Optional[datetime] = None
    next_due_at: Optional[datetime] = None

    @field_serializer("last_completed_at", "next_due_at", when_used="json")
    def serialize_dates(self, value: Optional[datetime]) -> Optional[str]:
        return utc_timestamp(value)


class JobTitleBreakdownRow(BaseModel):
    job_title: str
    total: int = 0
    compliant: int = 0
    overdue: int = 0
    due_soon: int = 0
    not_started: int = 0
    completion_rate: float = 0.0


class TrainingMatchRow(BaseModel):
    training_id: str
    training_title: str
    description: Optional[str] = None
    category: str
    frequency: str
    match_score: int
    due_date: Optional[datetime] = Field(
        None,
        description="Caller's own next due date, when the caller is assigned this training.",
    )

    @field_serializer("due_date", when_used="json")
    def serialize_due_date(self, value: Optional[datetime]) -> Optional[str]:
        return utc_timestamp(value)


class EmployeeRow(BaseModel):
    user_id: str
    net_id: str
    full_name: str
    job_title: str
    role: str
    supervisor: str
    tags: str = ""
    is_active: str


# ---------------------------------------------------------------------------
# ENVELOPE
# ---------------------------------------------------------------------------


class ReportScope(BaseModel):
    role: str
    users: int
    dueSoonDays: int
    net_id_filter: Optional[str] = None


class Highlights(BaseModel):
    total_assignments: int = 0
    compliant: int = 0
    overdue: int = 0
    due_soon: int = 0
    not_started: int = 0
    completion_rate: float = 0.0


class ReportResponse(BaseModel):
    intent: ReportIntent
    summary: str
    scope: ReportScope
    highlights: Highlights = Field(default_factory=Highlights)
    rows: List[Any] = Field(default_factory=list)
    suggested_prompts: List[str] = Field(default_factory=list)
