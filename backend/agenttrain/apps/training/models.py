# backend/agenttrain/apps/training/models.py

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ...database import Base
from ...record_ids import generate_record_id


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class TrainingCategory(str, enum.Enum):
    ONBOARDING = "onboarding"
    ON_THE_JOB = "on_the_job"
    SOP = "sop"


class TrainingFrequency(str, enum.Enum):
    """
    Recurrence rule for a training.

    ONE_TIME and AS_NEEDED never come due again once completed.
    """

    ONE_TIME = "one_time"
    ANNUAL = "annual"
    SEMI_ANNUAL = "semi_annual"
    AS_NEEDED = "as_needed"


class CompletionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# TRAINING CATALOG
# ---------------------------------------------------------------------------


class Training(Base):
    __tablename__ = "trainings"
    __table_args__ = (
        Index("idx_trainings_category", "category"),
    )

    id = Column(String(36), primary_key=True, default=generate_record_id)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    category = Column(
        Enum(TrainingCategory, name="training_category_enum", values_callable=_enum_values),
        nullable=False,
        default=TrainingCategory.ONBOARDING,
    )
    frequency = Column(
        Enum(TrainingFrequency, name="training_frequency_enum", values_callable=_enum_values),
        nullable=False,
        default=TrainingFrequency.ONE_TIME,
    )

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


# ---------------------------------------------------------------------------
# ASSIGNMENTS + COMPLETIONS
# ---------------------------------------------------------------------------


class UserTrainingAssignment(Base):
    """A training that is required for a subject."""

    __tablename__ = "user_training_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "training_id", name="uq_user_training_assignments_pair"),
    )

    id = Column(String(36), primary_key=True, default=generate_record_id)
    user_id = Column(
        String(36),
        ForeignKey("profiles.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    training_id = Column(
        String(36),
        ForeignKey("trainings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    training = relationship("Training", lazy="joined")


class TrainingCompletion(Base):
    """
    A subject's claim to have finished a training.

    Only APPROVED rows count toward compliance. Several rows may exist
    for the same (user, training) over time.
    """

    __tablename__ = "training_completions"
    __table_args__ = (
        Index("idx_training_completions_user_status", "user_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=generate_record_id)
    user_id = Column(
        String(36),
        ForeignKey("profiles.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    training_id = Column(
        String(36),
        ForeignKey("trainings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    completed_at = Column(DateTime(timezone=True), nullable=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(
        Enum(CompletionStatus, name="completion_status_enum", values_callable=_enum_values),
        nullable=False,
        default=CompletionStatus.PENDING,
    )
