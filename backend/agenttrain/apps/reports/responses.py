# backend/agenttrain/apps/reports/responses.py
"""
Envelope construction: summary sentence, scope echo, highlights, rows and
canned follow-up prompts.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from agenttrain.apps.accounts.models import AppRole

from .intents import ReportIntent
from .schemas import Highlights, ReportResponse, ReportScope

SEARCH_PROMPTS = [
    "Find trainings about biosafety",
    "Show overdue trainings",
    "What trainings should I prioritize?",
]
DEFAULT_PROMPTS = [
    "Show overdue trainings",
    "Show completion rate by job title",
]
REPORT_PROMPTS = [
    "What trainings should my team prioritize?",
    "Show overdue trainings",
    "Show completion rate by job title",
]
RECOMMENDATION_PROMPTS = [
    "Show overdue trainings",
    "Show completion rate by job title",
    "Who has the most overdue trainings?",
]
DIRECTORY_PROMPTS = [
    "Show all supervisors",
    "Who has the most overdue trainings?",
    "Show completion rate by job title",
]


def _plural(count: int, singular: str, plural: Optional[str] = None) -> str:
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


def summary_sentence(
    intent: ReportIntent,
    highlights: Highlights,
    *,
    users: int,
    due_soon_days: int,
    rows: Sequence = (),
    query: str = "",
) -> str:
    scope_text = _plural(users, "user")

    if intent == ReportIntent.TRAINING_SEARCH:
        if query:
            return f'Found {_plural(len(rows), "training")} matching "{query}".'
        return f"Listing {_plural(len(rows), 'training')} from the catalog."

    if intent == ReportIntent.EMPLOYEE_SEARCH:
        suffix = f' matching "{query}"' if query else ""
        return f"Found {_plural(len(rows), 'employee')}{suffix}."

    if intent == ReportIntent.OVERDUE:
        return (
            f"{_plural(highlights.overdue, 'overdue training assignment')} "
            f"across {scope_text}."
        )

    if intent == ReportIntent.DUE_SOON:
        return (
            f"{_plural(highlights.due_soon, 'assignment')} due within the next "
            f"{due_soon_days} days across {scope_text}."
        )

    if intent in (ReportIntent.COMPLETION_RATE, ReportIntent.BY_JOB_TITLE):
        return (
            f"Overall completion rate is {highlights.completion_rate}% across "
            f"{_plural(len(rows), 'job title')}."
        )

    if intent == ReportIntent.RECOMMENDATIONS:
        needing = highlights.overdue + highlights.due_soon + highlights.not_started
        return (
            f"{_plural(needing, 'assignment')} need attention: "
            f"{highlights.overdue} overdue, {highlights.due_soon} due soon, "
            f"{highlights.not_started} not started."
        )

    return (
        f"{_plural(highlights.total_assignments, 'assignment')} across {scope_text}: "
        f"{highlights.compliant} compliant, {highlights.overdue} overdue, "
        f"{highlights.due_soon} due soon, {highlights.not_started} not started "
        f"({highlights.completion_rate}% complete)."
    )


def _role_value(role) -> str:
    return role.value if isinstance(role, AppRole) else str(role)


def empty_scope_response(
    intent: ReportIntent,
    *,
    role: AppRole,
    due_soon_days: int,
    net_id_filter: Optional[str],
) -> ReportResponse:
    return ReportResponse(
        intent=intent,
        summary="No users found in your report scope.",
        scope=ReportScope(
            role=_role_value(role),
            users=0,
            dueSoonDays=due_soon_days,
            net_id_filter=net_id_filter,
        ),
        highlights=Highlights(),
        rows=[],
        suggested_prompts=list(DEFAULT_PROMPTS),
    )


def search_response(
    *,
    role: AppRole,
    due_soon_days: int,
    query: str,
    rows: List,
) -> ReportResponse:
    return ReportResponse(
        intent=ReportIntent.TRAINING_SEARCH,
        summary=summary_sentence(
            ReportIntent.TRAINING_SEARCH,
            Highlights(),
            users=1,
            due_soon_days=due_soon_days,
            rows=rows,
            query=query,
        ),
        scope=ReportScope(role=_role_value(role), users=1, dueSoonDays=due_soon_days),
        highlights=Highlights(),
        rows=rows,
        suggested_prompts=list(SEARCH_PROMPTS),
    )


def directory_response(
    *,
    role: AppRole,
    due_soon_days: int,
    query: str,
    rows: List,
) -> ReportResponse:
    return ReportResponse(
        intent=ReportIntent.EMPLOYEE_SEARCH,
        summary=summary_sentence(
            ReportIntent.EMPLOYEE_SEARCH,
            Highlights(),
            users=len(rows),
            due_soon_days=due_soon_days,
            rows=rows,
            query=query,
        ),
        scope=ReportScope(role=_role_value(role), users=len(rows), dueSoonDays=due_soon_days),
        highlights=Highlights(),
        rows=rows,
        suggested_prompts=list(DIRECTORY_PROMPTS),
    )


def report_response(
    intent: ReportIntent,
    *,
    role: AppRole,
    users: int,
    due_soon_days: int,
    net_id_filter: Optional[str],
    highlights: Highlights,
    rows: List,
) -> ReportResponse:
    prompts = RECOMMENDATION_PROMPTS if intent == ReportIntent.RECOMMENDATIONS else REPORT_PROMPTS
    return ReportResponse(
        intent=intent,
        summary=summary_sentence(
            intent,
            highlights,
            users=users,
            due_soon_days=due_soon_days,
            rows=rows,
        ),
        scope=ReportScope(
            role=_role_value(role),
            users=users,
            dueSoonDays=due_soon_days,
            net_id_filter=net_id_filter,
        ),
        highlights=highlights,
        rows=rows,
        suggested_prompts=list(prompts),
    )
