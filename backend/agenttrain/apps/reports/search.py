# backend/agenttrain/apps/reports/search.py
"""
Keyword ranking over the training catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from . import config
from .compliance import compute_status
from .repository import TrainingRecord

MIN_TOKEN_LENGTH = 2


@dataclass(frozen=True)
class TrainingMatch:
    training: TrainingRecord
    match_score: int


def tokenize_query(query: str) -> List[str]:
    return [t for t in query.lower().split() if len(t) >= MIN_TOKEN_LENGTH]


def _haystack(training: TrainingRecord) -> str:
    parts = [
        training.title or "",
        training.description or "",
        training.category or "",
        training.frequency or "",
    ]
    return " ".join(parts).lower()


def score_training(training: TrainingRecord, tokens: Sequence[str]) -> int:
    """Number of distinct tokens found in the training's text; 1 when there are no tokens."""
    if not tokens:
        return 1
    haystack = _haystack(training)
    return sum(1 for token in set(tokens) if token in haystack)


def rank_trainings(
    trainings: Sequence[TrainingRecord],
    tokens: Sequence[str],
    *,
    limit: int = config.ROW_LIMIT,
) -> List[TrainingMatch]:
    matches = [TrainingMatch(t, score_training(t, tokens)) for t in trainings]
    matches = [m for m in matches if m.match_score > 0]
    matches.sort(key=lambda m: (-m.match_score, m.training.title or "", m.training.id))
    return matches[:limit]


def caller_due_dates(
    matches: Sequence[TrainingMatch],
    assigned_ids: Sequence[str],
    latest_completed: Dict[str, Optional[datetime]],
    *,
    now: datetime,
    due_soon_days: int,
) -> Dict[str, Optional[datetime]]:
    """Next due date per matched training the caller is assigned to."""
    assigned = set(assigned_ids)
    due: Dict[str, Optional[datetime]] = {}
    for match in matches:
        training = match.training
        if training.id not in assigned:
            continue
        result = compute_status(
            training.frequency,
            latest_completed.get(training.id),
            now,
            due_soon_days,
        )
        due[training.id] = result.next_due
    return due
