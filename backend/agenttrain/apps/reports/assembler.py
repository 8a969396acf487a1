# backend/agenttrain/apps/reports/assembler.py
"""
Join scope, assignments, completions and job titles into report rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from . import config
from .compliance import (
    ComplianceStatus,
    compute_status,
    effective_completion_date,
    latest_approved_completions,
)
from .intents import ReportIntent
from .repository import AssignmentRecord, CompletionRecord, ProfileRecord
from .schemas import ComplianceRow, Highlights, JobTitleBreakdownRow

SEVERITY_RANK = {
    ComplianceStatus.OVERDUE: 0,
    ComplianceStatus.DUE_SOON: 1,
    ComplianceStatus.NOT_STARTED: 2,
    ComplianceStatus.COMPLIANT: 3,
}


def completion_rate(compliant: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(compliant / total * 100, 1)


def build_detail_rows(
    profiles: Sequence[ProfileRecord],
    assignments: Iterable[AssignmentRecord],
    completions: Iterable[CompletionRecord],
    job_titles: Dict[str, str],
    *,
    now: datetime,
    due_soon_days: int,
) -> List[ComplianceRow]:
    profile_by_id = {p.user_id: p for p in profiles}
    latest = latest_approved_completions(completions)

    rows: List[ComplianceRow] = []
    for assignment in assignments:
        profile = profile_by_id.get(assignment.user_id)
        training = assignment.training
        if profile is None or training is None:
            continue

        completion = latest.get((assignment.user_id, assignment.training_id))
        last_completed = effective_completion_date(completion) if completion else None
        result = compute_status(training.frequency, last_completed, now, due_soon_days)

        job_title = config.UNASSIGNED_JOB_TITLE
        if profile.job_title_id:
            job_title = job_titles.get(profile.job_title_id, config.UNASSIGNED_JOB_TITLE)

        rows.append(
            ComplianceRow(
                user_id=profile.user_id,
                net_id=profile.net_id,
                full_name=profile.full_name,
                job_title=job_title,
                training_id=training.id,
                training_title=training.title,
                category=training.category,
                frequency=training.frequency,
                status=result.status,
                last_completed_at=last_completed,
                next_due_at=result.next_due,
            )
        )

    rows.sort(key=lambda r: (r.full_name.lower(), r.training_title.lower()))
    return rows


def summarize(rows: Sequence[ComplianceRow]) -> Highlights:
    counts = {status: 0 for status in ComplianceStatus}
    for row in rows:
        counts[row.status] += 1

    total = len(rows)
    return Highlights(
        total_assignments=total,
        compliant=counts[ComplianceStatus.COMPLIANT],
        overdue=counts[ComplianceStatus.OVERDUE],
        due_soon=counts[ComplianceStatus.DUE_SOON],
        not_started=counts[ComplianceStatus.NOT_STARTED],
        completion_rate=completion_rate(counts[ComplianceStatus.COMPLIANT], total),
    )


def job_title_breakdown(rows: Sequence[ComplianceRow]) -> List[JobTitleBreakdownRow]:
    groups: Dict[str, List[ComplianceRow]] = {}
    for row in rows:
        groups.setdefault(row.job_title, []).append(row)

    breakdown: List[JobTitleBreakdownRow] = []
    for job_title, members in groups.items():
        totals = summarize(members)
        breakdown.append(
            JobTitleBreakdownRow(
                job_title=job_title,
                total=totals.total_assignments,
                compliant=totals.compliant,
                overdue=totals.overdue,
                due_soon=totals.due_soon,
                not_started=totals.not_started,
                completion_rate=totals.completion_rate,
            )
        )

    breakdown.sort(key=lambda b: (-b.overdue, b.job_title))
    return breakdown


def _by_next_due(row: ComplianceRow):
    return (
        row.next_due_at or datetime.max,
        row.full_name.lower(),
        row.training_title.lower(),
    )


def _by_severity(row: ComplianceRow):
    return (
        SEVERITY_RANK[row.status],
        row.full_name.lower(),
        row.training_title.lower(),
    )


def select_rows(
    intent: ReportIntent,
    rows: Sequence[ComplianceRow],
    breakdown: Sequence[JobTitleBreakdownRow],
    *,
    limit: int = config.ROW_LIMIT,
) -> list:
    if intent == ReportIntent.OVERDUE:
        picked = [r for r in rows if r.status == ComplianceStatus.OVERDUE]
        return sorted(picked, key=_by_next_due)[:limit]

    if intent == ReportIntent.DUE_SOON:
        picked = [r for r in rows if r.status == ComplianceStatus.DUE_SOON]
        return sorted(picked, key=_by_next_due)[:limit]

    if intent in (ReportIntent.COMPLETION_RATE, ReportIntent.BY_JOB_TITLE):
        return list(breakdown)

    if intent == ReportIntent.RECOMMENDATIONS:
        picked = [r for r in rows if r.status != ComplianceStatus.COMPLIANT]
        return sorted(picked, key=_by_severity)[:limit]

    return sorted(rows, key=_by_severity)[:limit]
