# backend/agenttrain/apps/reports/intents.py
"""
Rule-based prompt classification.

Rules are evaluated in order and the first match wins. Prompts routinely
satisfy several rules ("find overdue trainings"), so the order below is
part of the behaviour.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from . import config


class ReportIntent(str, enum.Enum):
    TRAINING_SEARCH = "training_search"
    BY_JOB_TITLE = "by_job_title"
    COMPLETION_RATE = "completion_rate"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    RECOMMENDATIONS = "recommendations"
    EMPLOYEE_SEARCH = "employee_search"
    SUMMARY = "summary"


@dataclass(frozen=True)
class Classification:
    intent: ReportIntent
    due_soon_days: int
    net_id_filter: Optional[str] = None
    search_query: str = ""
    name_filter: Optional[str] = None


# ---------------------------------------------------------------------------
# PATTERNS
# ---------------------------------------------------------------------------

_SEARCH_PREFIX = re.compile(r"^\s*training\s*:\s*(.*)$", re.IGNORECASE | re.DOTALL)
_SEARCH_VERB = re.compile(
    r"\b(?:find|search|look\s*up|lookup)\s+(?:for\s+)?(?:the\s+|all\s+|any\s+)?trainings?\b",
    re.IGNORECASE,
)
_SEARCH_QUERY = re.compile(
    r"\b(?:find|search|look\s*up|lookup)\s+(?:for\s+)?(?:the\s+|all\s+|any\s+)?"
    r"trainings?\b\s*(?:(?:about|for|with|on)\b\s*)?(.*)$",
    re.IGNORECASE | re.DOTALL,
)

_BY_JOB_TITLE = re.compile(r"\bby\s+job\s+title\b|\bjob\s+title\s+breakdown\b|\btitle\s+breakdown\b", re.IGNORECASE)
_COMPLETION_RATE = re.compile(r"\b(?:completion|compliance)\s+rates?\b", re.IGNORECASE)
_DUE_SOON = re.compile(r"\bdue\s+soon\b", re.IGNORECASE)
_OVERDUE = re.compile(r"\boverdue\b|\bnot\s+compliant\b", re.IGNORECASE)
_RECOMMENDATIONS = re.compile(r"\bprioriti[sz]e|\brecommend", re.IGNORECASE)
_EMPLOYEE_SEARCH = re.compile(
    r"\b(?:list|show|find|search|who\s+are)\b.*\b(?:employees|staff|people|supervisors|coordinators)\b"
    r"|\bwho\s+reports\s+to\b",
    re.IGNORECASE,
)

_DAYS_WINDOW = re.compile(r"\b(\d+)\s*-?\s*days?\b", re.IGNORECASE)
_MONTH_WINDOW = re.compile(r"\b(?:this|next)\s+month\b", re.IGNORECASE)
_NET_ID = re.compile(r"\bnet[\s_-]?id\b\s*[:=]?\s*([A-Za-z0-9._-]+)", re.IGNORECASE)
_PERSON_REPORT = re.compile(
    r"^(?:show|generate|get|run)?\s*(?:me\s+)?(?:a\s+)?training\s+report\s+for\s+(.+)$",
    re.IGNORECASE,
)

_EMPLOYEE_QUERY = re.compile(
    r"\b(?:employees|staff|people)\s+(?:named|called|matching|with|in)\s+(.+)$",
    re.IGNORECASE,
)
_REPORTS_TO_QUERY = re.compile(r"\bwho\s+reports\s+to\s+(.+)$", re.IGNORECASE)
_ROLE_KEYWORD = re.compile(r"\b(supervisor|coordinator)s\b", re.IGNORECASE)

_TRAILING_PUNCTUATION = "?!.,;: \t\n"


def _is_training_search(prompt: str) -> bool:
    return bool(_SEARCH_PREFIX.match(prompt) or _SEARCH_VERB.search(prompt))


_RULES: List[Tuple[Callable[[str], bool], ReportIntent]] = [
    (_is_training_search, ReportIntent.TRAINING_SEARCH),
    (lambda p: bool(_BY_JOB_TITLE.search(p)), ReportIntent.BY_JOB_TITLE),
    (lambda p: bool(_COMPLETION_RATE.search(p)), ReportIntent.COMPLETION_RATE),
    (lambda p: bool(_DUE_SOON.search(p)), ReportIntent.DUE_SOON),
    (lambda p: bool(_OVERDUE.search(p)), ReportIntent.OVERDUE),
    (lambda p: bool(_RECOMMENDATIONS.search(p)), ReportIntent.RECOMMENDATIONS),
    (lambda p: bool(_EMPLOYEE_SEARCH.search(p)), ReportIntent.EMPLOYEE_SEARCH),
]


# ---------------------------------------------------------------------------
# PARAMETER EXTRACTION
# ---------------------------------------------------------------------------


def detect_intent(prompt: str) -> ReportIntent:
    for predicate, intent in _RULES:
        if predicate(prompt):
            return intent
    return ReportIntent.SUMMARY


def extract_due_soon_days(prompt: str) -> int:
    """
    First "<n> day(s)" in the prompt, clamped to 1..365.

    Falls back to a 30-day window for "this month"/"next month", then to
    the configured default.
    """
    match = _DAYS_WINDOW.search(prompt)
    if match:
        days = int(match.group(1))
        return max(1, min(config.MAX_DUE_SOON_DAYS, days))
    if _MONTH_WINDOW.search(prompt):
        return config.MONTH_WINDOW_DAYS
    return config.DEFAULT_DUE_SOON_DAYS


def extract_net_id(prompt: str) -> Optional[str]:
    match = _NET_ID.search(prompt)
    if not match:
        return None
    value = match.group(1).rstrip(".")
    return value or None


def extract_search_query(prompt: str) -> str:
    prefix = _SEARCH_PREFIX.match(prompt)
    if prefix:
        return prefix.group(1).strip(_TRAILING_PUNCTUATION)
    phrase = _SEARCH_QUERY.search(prompt)
    if phrase:
        return phrase.group(1).strip(_TRAILING_PUNCTUATION)
    return prompt.strip()


def extract_employee_query(prompt: str) -> str:
    for pattern in (_EMPLOYEE_QUERY, _REPORTS_TO_QUERY):
        match = pattern.search(prompt)
        if match:
            return match.group(1).strip(_TRAILING_PUNCTUATION)
    role = _ROLE_KEYWORD.search(prompt)
    if role:
        return role.group(1).lower()
    return ""


def extract_person_name(prompt: str) -> Optional[str]:
    match = _PERSON_REPORT.match(prompt.strip())
    if not match:
        return None
    name = match.group(1).strip(_TRAILING_PUNCTUATION)
    return name or None


def classify_prompt(prompt: str) -> Classification:
    text = prompt.strip()
    intent = detect_intent(text)
    name_filter = extract_person_name(text)

    # An explicit "training report for <name>" is a report, not a directory lookup.
    if name_filter and intent == ReportIntent.EMPLOYEE_SEARCH:
        intent = ReportIntent.SUMMARY

    search_query = ""
    if intent == ReportIntent.TRAINING_SEARCH:
        search_query = extract_search_query(text)
    elif intent == ReportIntent.EMPLOYEE_SEARCH:
        search_query = extract_employee_query(text)

    return Classification(
        intent=intent,
        due_soon_days=extract_due_soon_days(text),
        net_id_filter=extract_net_id(text),
        search_query=search_query,
        name_filter=name_filter,
    )
