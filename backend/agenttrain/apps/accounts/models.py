# backend/agenttrain/apps/accounts/models.py

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from agenttrain.database import Base
from agenttrain.record_ids import generate_record_id


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class AppRole(str, enum.Enum):
    """Reporting roles.

    An identity without a role row is treated as EMPLOYEE.
    """

    EMPLOYEE = "employee"
    SUPERVISOR = "supervisor"
    COORDINATOR = "coordinator"


# ---------------------------------------------------------------------------
# JOB TITLES
# ---------------------------------------------------------------------------


class JobTitle(Base):
    """Grouping dimension for the by-job-title breakdown."""

    __tablename__ = "job_titles"

    id = Column(String(36), primary_key=True, default=generate_record_id)
    name = Column(String(255), nullable=False, unique=True)

    profiles = relationship("Profile", back_populates="job_title", lazy="selectin")


class JobTag(Base):
    """Free-form label (e.g. "NHP contact", "BSL-2") attached to job titles."""

    __tablename__ = "job_tags"

    id = Column(String(36), primary_key=True, default=generate_record_id)
    name = Column(String(255), nullable=False, unique=True)


class JobTitleTag(Base):
    __tablename__ = "job_title_tags"
    __table_args__ = (
        UniqueConstraint("job_title_id", "job_tag_id", name="uq_job_title_tags_pair"),
    )

    id = Column(String(36), primary_key=True, default=generate_record_id)
    job_title_id = Column(
        String(36),
        ForeignKey("job_titles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_tag_id = Column(
        String(36),
        ForeignKey("job_tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


# ---------------------------------------------------------------------------
# PROFILES
# ---------------------------------------------------------------------------


class Profile(Base):
    """
    A person whose training compliance can be reported on.

    - user_id = identity id issued by the auth provider (JWT `sub`)
    - net_id  = external, human-facing identifier used in prompts
    """

    __tablename__ = "profiles"
    __table_args__ = (
        Index("idx_profiles_active_name", "is_active", "full_name"),
    )

    user_id = Column(String(36), primary_key=True, default=generate_record_id)
    full_name = Column(String(255), nullable=False)
    net_id = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)

    job_title_id = Column(
        String(36),
        ForeignKey("job_titles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )

    job_title = relationship("JobTitle", back_populates="profiles", lazy="joined")


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True, default=generate_record_id)
    user_id = Column(
        String(36),
        ForeignKey("profiles.user_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    role = Column(
        Enum(AppRole, name="app_role_enum", values_callable=_enum_values),
        nullable=False,
        default=AppRole.EMPLOYEE,
    )


class SupervisorEmployeeMapping(Base):
    """(supervisor, employee) link used to expand a supervisor's scope."""

    __tablename__ = "supervisor_employee_mappings"
    __table_args__ = (
        UniqueConstraint(
            "supervisor_id",
            "employee_id",
            name="uq_supervisor_employee_mappings_pair",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_record_id)
    supervisor_id = Column(
        String(36),
        ForeignKey("profiles.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id = Column(
        String(36),
        ForeignKey("profiles.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
