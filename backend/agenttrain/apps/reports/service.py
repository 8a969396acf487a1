# backend/agenttrain/apps/reports/service.py
"""
Report pipeline: classify -> resolve scope -> fetch -> compute -> assemble -> format.

Nothing here holds state between calls; every request reads fresh data
through the supplied `ReportDataSource`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from agenttrain.apps.accounts.models import AppRole

from . import assembler, config, responses, scope, search
from .compliance import effective_completion_date, latest_approved_completions, utcnow
from .errors import InvalidRequest, Unauthenticated
from .intents import Classification, ReportIntent, classify_prompt
from .repository import ProfileRecord, ReportDataSource
from .schemas import EmployeeRow, ReportResponse, TrainingMatchRow

logger = logging.getLogger(__name__)


def validate_prompt(prompt: Optional[str]) -> str:
    if not isinstance(prompt, str):
        raise InvalidRequest("Prompt is required")
    text = prompt.strip()
    if not text:
        raise InvalidRequest("Prompt is required")
    if len(text) > config.MAX_PROMPT_LENGTH:
        raise InvalidRequest(
            f"Prompt is too long (max {config.MAX_PROMPT_LENGTH} characters)"
        )
    return text


# ---------------------------------------------------------------------------
# TRAINING SEARCH
# ---------------------------------------------------------------------------


def _run_training_search(
    source: ReportDataSource,
    *,
    caller_id: str,
    role: AppRole,
    classification: Classification,
    now: datetime,
) -> ReportResponse:
    tokens = search.tokenize_query(classification.search_query)
    matches = search.rank_trainings(source.list_trainings(), tokens, limit=config.ROW_LIMIT)

    matched_ids = [m.training.id for m in matches]
    assigned_ids = [
        a.training_id for a in source.list_assignments([caller_id], matched_ids)
    ]
    latest = latest_approved_completions(
        source.list_approved_completions([caller_id], assigned_ids)
    )
    latest_completed: Dict[str, Optional[datetime]] = {
        training_id: effective_completion_date(completion)
        for (_, training_id), completion in latest.items()
    }
    due_dates = search.caller_due_dates(
        matches,
        assigned_ids,
        latest_completed,
        now=now,
        due_soon_days=classification.due_soon_days,
    )

    rows = [
        TrainingMatchRow(
            training_id=m.training.id,
            training_title=m.training.title,
            description=m.training.description,
            category=m.training.category,
            frequency=m.training.frequency,
            match_score=m.match_score,
            due_date=due_dates.get(m.training.id),
        )
        for m in matches
    ]
    return responses.search_response(
        role=role,
        due_soon_days=classification.due_soon_days,
        query=classification.search_query,
        rows=rows,
    )


# ---------------------------------------------------------------------------
# EMPLOYEE DIRECTORY
# ---------------------------------------------------------------------------


def _directory_rows(
    source: ReportDataSource,
    profiles: List[ProfileRecord],
) -> List[EmployeeRow]:
    user_ids = [p.user_id for p in profiles]
    job_titles = source.list_job_titles()
    title_tags = source.list_job_title_tags()
    roles = source.list_roles(user_ids)
    links = source.list_supervisor_links(user_ids)

    names = {p.user_id: p.full_name for p in profiles}
    missing = sorted({sup for _, sup in links if sup not in names})
    if missing:
        for p in source.list_profiles(missing, active_only=False):
            names[p.user_id] = p.full_name

    supervisors: Dict[str, List[str]] = {}
    for employee_id, supervisor_id in links:
        name = names.get(supervisor_id)
        if name:
            supervisors.setdefault(employee_id, []).append(name)

    rows: List[EmployeeRow] = []
    for p in profiles:
        job_title = config.UNASSIGNED_JOB_TITLE
        if p.job_title_id:
            job_title = job_titles.get(p.job_title_id, config.UNASSIGNED_JOB_TITLE)
        rows.append(
            EmployeeRow(
                user_id=p.user_id,
                net_id=p.net_id,
                full_name=p.full_name,
                job_title=job_title,
                role=roles.get(p.user_id, scope.DEFAULT_ROLE.value),
                supervisor=", ".join(sorted(supervisors.get(p.user_id, []))) or "None",
                tags=", ".join(title_tags.get(p.job_title_id, [])) if p.job_title_id else "",
                is_active="Active" if p.is_active else "Inactive",
            )
        )
    return rows


def _run_employee_search(
    source: ReportDataSource,
    *,
    caller_id: str,
    role: AppRole,
    classification: Classification,
) -> ReportResponse:
    profiles = scope.resolve_directory_scope(source, caller_id, role)
    rows = _directory_rows(source, profiles)

    tokens = search.tokenize_query(classification.search_query)
    if tokens:
        def matches(row: EmployeeRow) -> bool:
            haystack = " ".join(
                [
                    row.net_id,
                    row.full_name,
                    row.job_title,
                    row.role,
                    row.supervisor,
                    row.tags,
                    row.is_active,
                ]
            ).lower()
            return any(token in haystack for token in tokens)

        rows = [r for r in rows if matches(r)]

    rows.sort(key=lambda r: r.full_name.lower())
    return responses.directory_response(
        role=role,
        due_soon_days=classification.due_soon_days,
        query=classification.search_query,
        rows=rows[: config.ROW_LIMIT],
    )


# ---------------------------------------------------------------------------
# COMPLIANCE REPORT
# ---------------------------------------------------------------------------


def _run_compliance_report(
    source: ReportDataSource,
    *,
    caller_id: str,
    role: AppRole,
    classification: Classification,
    now: datetime,
) -> ReportResponse:
    profiles = scope.resolve_scope(
        source,
        caller_id,
        role,
        net_id_filter=classification.net_id_filter,
        name_filter=classification.name_filter,
    )
    if not profiles:
        return responses.empty_scope_response(
            classification.intent,
            role=role,
            due_soon_days=classification.due_soon_days,
            net_id_filter=classification.net_id_filter,
        )

    user_ids = [p.user_id for p in profiles]
    job_titles = source.list_job_titles()
    assignments = source.list_assignments(user_ids)
    completions = source.list_approved_completions(user_ids)

    detail_rows = assembler.build_detail_rows(
        profiles,
        assignments,
        completions,
        job_titles,
        now=now,
        due_soon_days=classification.due_soon_days,
    )
    highlights = assembler.summarize(detail_rows)
    breakdown = assembler.job_title_breakdown(detail_rows)
    rows = assembler.select_rows(
        classification.intent, detail_rows, breakdown, limit=config.ROW_LIMIT
    )

    return responses.report_response(
        classification.intent,
        role=role,
        users=len(profiles),
        due_soon_days=classification.due_soon_days,
        net_id_filter=classification.net_id_filter,
        highlights=highlights,
        rows=rows,
    )


# ---------------------------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------------------------


def build_report(
    source: ReportDataSource,
    *,
    caller_id: Optional[str],
    prompt: Optional[str],
    now: Optional[datetime] = None,
) -> ReportResponse:
    if not caller_id:
        raise Unauthenticated("Unauthorized")

    text = validate_prompt(prompt)
    classification = classify_prompt(text)
    role = scope.resolve_caller_role(source, caller_id)
    now = now or utcnow()

    if classification.intent == ReportIntent.TRAINING_SEARCH:
        response = _run_training_search(
            source,
            caller_id=caller_id,
            role=role,
            classification=classification,
            now=now,
        )
    elif classification.intent == ReportIntent.EMPLOYEE_SEARCH:
        response = _run_employee_search(
            source,
            caller_id=caller_id,
            role=role,
            classification=classification,
        )
    else:
        response = _run_compliance_report(
            source,
            caller_id=caller_id,
            role=role,
            classification=classification,
            now=now,
        )

    logger.info(
        "Report built",
        extra={
            "intent": response.intent.value,
            "role": role.value,
            "users": response.scope.users,
            "rows": len(response.rows),
        },
    )
    return response
