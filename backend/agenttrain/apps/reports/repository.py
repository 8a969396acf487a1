# backend/agenttrain/apps/reports/repository.py
"""
Read contracts the report engine needs from the data store.

`ReportDataSource` lists the bulk reads; `SqlReportDataSource` implements
them over a SQLAlchemy session. Every read returns plain records so the
rest of the engine never touches ORM state, and any driver error is
re-raised as `UpstreamFailure` with its message intact.
"""

from __future__ import annotations

import enum
import functools
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agenttrain.apps.accounts import models as account_models
from agenttrain.apps.training import models as training_models

from .errors import UpstreamFailure

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# RECORDS
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProfileRecord:
    user_id: str
    full_name: str
    net_id: str
    job_title_id: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class TrainingRecord:
    id: str
    title: str
    description: Optional[str]
    category: str
    frequency: str


@dataclass(frozen=True)
class AssignmentRecord:
    user_id: str
    training_id: str
    training: Optional[TrainingRecord]


@dataclass(frozen=True)
class CompletionRecord:
    user_id: str
    training_id: str
    completed_at: datetime
    approved_at: Optional[datetime]
    status: str


def _value(member) -> Optional[str]:
    if member is None:
        return None
    if isinstance(member, enum.Enum):
        return member.value
    return str(member)


# ---------------------------------------------------------------------------
# CONTRACT
# ---------------------------------------------------------------------------


class ReportDataSource:
    """Read-only collaborator used by the report pipeline."""

    def get_role(self, user_id: str) -> Optional[str]:
        raise NotImplementedError

    def list_profiles(
        self,
        user_ids: Optional[Iterable[str]] = None,
        *,
        active_only: bool = True,
    ) -> List[ProfileRecord]:
        raise NotImplementedError

    def list_supervised_employee_ids(self, supervisor_id: str) -> List[str]:
        raise NotImplementedError

    def list_job_titles(self) -> Dict[str, str]:
        raise NotImplementedError

    def list_job_title_tags(self) -> Dict[str, List[str]]:
        """Tag names per job title id, alphabetical."""
        raise NotImplementedError

    def list_assignments(
        self,
        user_ids: Iterable[str],
        training_ids: Optional[Iterable[str]] = None,
    ) -> List[AssignmentRecord]:
        raise NotImplementedError

    def list_approved_completions(
        self,
        user_ids: Iterable[str],
        training_ids: Optional[Iterable[str]] = None,
    ) -> List[CompletionRecord]:
        raise NotImplementedError

    def list_trainings(self) -> List[TrainingRecord]:
        raise NotImplementedError

    def list_roles(self, user_ids: Iterable[str]) -> Dict[str, str]:
        raise NotImplementedError

    def list_supervisor_links(self, employee_ids: Iterable[str]) -> List[Tuple[str, str]]:
        """(employee_id, supervisor_id) pairs for the given employees."""
        raise NotImplementedError


# ---------------------------------------------------------------------------
# SQLALCHEMY IMPLEMENTATION
# ---------------------------------------------------------------------------


def _upstream(func):
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            message = str(getattr(exc, "orig", None) or exc)
            logger.warning(
                "Report data fetch failed",
                extra={"fetch": func.__name__, "error": message},
            )
            raise UpstreamFailure(message) from exc

    return wrapper


def _training_record(training: training_models.Training) -> TrainingRecord:
    return TrainingRecord(
        id=training.id,
        title=training.title,
        description=training.description,
        category=_value(training.category),
        frequency=_value(training.frequency),
    )


class SqlReportDataSource(ReportDataSource):
    def __init__(self, db: Session):
        self.db = db

    @_upstream
    def get_role(self, user_id: str) -> Optional[str]:
        row = (
            self.db.query(account_models.UserRole.role)
            .filter(account_models.UserRole.user_id == user_id)
            .first()
        )
        return _value(row[0]) if row else None

    @_upstream
    def list_profiles(
        self,
        user_ids: Optional[Iterable[str]] = None,
        *,
        active_only: bool = True,
    ) -> List[ProfileRecord]:
        Profile = account_models.Profile
        q = self.db.query(
            Profile.user_id,
            Profile.full_name,
            Profile.net_id,
            Profile.job_title_id,
            Profile.is_active,
        )
        if user_ids is not None:
            ids = list(user_ids)
            if not ids:
                return []
            q = q.filter(Profile.user_id.in_(ids))
        if active_only:
            q = q.filter(Profile.is_active.is_(True))

        rows = q.order_by(Profile.full_name.asc(), Profile.net_id.asc()).all()
        return [
            ProfileRecord(
                user_id=r.user_id,
                full_name=r.full_name,
                net_id=r.net_id,
                job_title_id=r.job_title_id,
                is_active=bool(r.is_active),
            )
            for r in rows
        ]

    @_upstream
    def list_supervised_employee_ids(self, supervisor_id: str) -> List[str]:
        Mapping = account_models.SupervisorEmployeeMapping
        rows = (
            self.db.query(Mapping.employee_id)
            .filter(Mapping.supervisor_id == supervisor_id)
            .all()
        )
        return [r.employee_id for r in rows]

    @_upstream
    def list_job_titles(self) -> Dict[str, str]:
        rows = self.db.query(account_models.JobTitle.id, account_models.JobTitle.name).all()
        return {r.id: r.name for r in rows}

    @_upstream
    def list_job_title_tags(self) -> Dict[str, List[str]]:
        Link = account_models.JobTitleTag
        Tag = account_models.JobTag
        rows = (
            self.db.query(Link.job_title_id, Tag.name)
            .join(Tag, Tag.id == Link.job_tag_id)
            .order_by(Tag.name.asc())
            .all()
        )
        tags: Dict[str, List[str]] = {}
        for r in rows:
            tags.setdefault(r.job_title_id, []).append(r.name)
        return tags

    @_upstream
    def list_assignments(
        self,
        user_ids: Iterable[str],
        training_ids: Optional[Iterable[str]] = None,
    ) -> List[AssignmentRecord]:
        ids = list(user_ids)
        if not ids:
            return []

        Assignment = training_models.UserTrainingAssignment
        q = (
            self.db.query(Assignment, training_models.Training)
            .outerjoin(
                training_models.Training,
                training_models.Training.id == Assignment.training_id,
            )
            .filter(Assignment.user_id.in_(ids))
        )
        if training_ids is not None:
            wanted = list(training_ids)
            if not wanted:
                return []
            q = q.filter(Assignment.training_id.in_(wanted))

        return [
            AssignmentRecord(
                user_id=assignment.user_id,
                training_id=assignment.training_id,
                training=_training_record(training) if training is not None else None,
            )
            for assignment, training in q.all()
        ]

    @_upstream
    def list_approved_completions(
        self,
        user_ids: Iterable[str],
        training_ids: Optional[Iterable[str]] = None,
    ) -> List[CompletionRecord]:
        ids = list(user_ids)
        if not ids:
            return []

        Completion = training_models.TrainingCompletion
        q = self.db.query(Completion).filter(
            Completion.user_id.in_(ids),
            Completion.status == training_models.CompletionStatus.APPROVED,
        )
        if training_ids is not None:
            wanted = list(training_ids)
            if not wanted:
                return []
            q = q.filter(Completion.training_id.in_(wanted))

        rows = q.order_by(Completion.completed_at.desc()).all()
        return [
            CompletionRecord(
                user_id=c.user_id,
                training_id=c.training_id,
                completed_at=c.completed_at,
                approved_at=c.approved_at,
                status=_value(c.status),
            )
            for c in rows
        ]

    @_upstream
    def list_trainings(self) -> List[TrainingRecord]:
        rows = (
            self.db.query(training_models.Training)
            .order_by(training_models.Training.title.asc())
            .all()
        )
        return [_training_record(t) for t in rows]

    @_upstream
    def list_roles(self, user_ids: Iterable[str]) -> Dict[str, str]:
        ids = list(user_ids)
        if not ids:
            return {}
        rows = (
            self.db.query(account_models.UserRole.user_id, account_models.UserRole.role)
            .filter(account_models.UserRole.user_id.in_(ids))
            .all()
        )
        return {r.user_id: _value(r.role) for r in rows}

    @_upstream
    def list_supervisor_links(self, employee_ids: Iterable[str]) -> List[Tuple[str, str]]:
        ids = list(employee_ids)
        if not ids:
            return []
        Mapping = account_models.SupervisorEmployeeMapping
        rows = (
            self.db.query(Mapping.employee_id, Mapping.supervisor_id)
            .filter(Mapping.employee_id.in_(ids))
            .all()
        )
        return [(r.employee_id, r.supervisor_id) for r in rows]
