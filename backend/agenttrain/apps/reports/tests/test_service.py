from __future__ import annotations

from datetime import datetime

import pytest

from agenttrain.apps.accounts import models as account_models
from agenttrain.apps.accounts.models import AppRole
from agenttrain.apps.reports import service
from agenttrain.apps.reports.compliance import ComplianceStatus, add_months
from agenttrain.apps.reports.errors import Forbidden, InvalidRequest, Unauthenticated
from agenttrain.apps.reports.intents import ReportIntent
from agenttrain.apps.reports.repository import SqlReportDataSource
from agenttrain.apps.training import models as training_models

NOW = datetime(2026, 6, 15, 12, 0, 0)

Frequency = training_models.TrainingFrequency
Category = training_models.TrainingCategory


def _create_profile(db, uid, name, *, role=None, job_title_id=None, active=True):
    db.add(
        account_models.Profile(
            user_id=uid,
            full_name=name,
            net_id=uid.lower(),
            job_title_id=job_title_id,
            is_active=active,
        )
    )
    if role is not None:
        db.add(account_models.UserRole(user_id=uid, role=role))
    db.commit()


def _create_training(db, tid, title, *, frequency=Frequency.ANNUAL, category=Category.SOP, description=None):
    db.add(
        training_models.Training(
            id=tid,
            title=title,
            description=description,
            category=category,
            frequency=frequency,
        )
    )
    db.commit()


def _assign(db, uid, tid, completed_at=None):
    db.add(training_models.UserTrainingAssignment(user_id=uid, training_id=tid))
    if completed_at is not None:
        db.add(
            training_models.TrainingCompletion(
                user_id=uid,
                training_id=tid,
                completed_at=completed_at,
                approved_at=completed_at,
                status=training_models.CompletionStatus.APPROVED,
            )
        )
    db.commit()


def _link(db, supervisor_id, employee_id):
    db.add(account_models.SupervisorEmployeeMapping(supervisor_id=supervisor_id, employee_id=employee_id))
    db.commit()


def _report(db, caller_id, prompt):
    return service.build_report(
        SqlReportDataSource(db),
        caller_id=caller_id,
        prompt=prompt,
        now=NOW,
    )


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("prompt", ["", "   ", None])
def test_blank_prompt_is_invalid(db_session, prompt):
    _create_profile(db_session, "U1", "Ada")
    with pytest.raises(InvalidRequest) as exc:
        _report(db_session, "U1", prompt)
    assert exc.value.detail == "Prompt is required"
    assert exc.value.status_code == 400


def test_overlong_prompt_is_invalid(db_session):
    with pytest.raises(InvalidRequest):
        _report(db_session, "U1", "x" * 2001)


def test_missing_caller_is_unauthenticated(db_session):
    with pytest.raises(Unauthenticated):
        _report(db_session, None, "Show overdue trainings")


# ---------------------------------------------------------------------------
# Compliance reports
# ---------------------------------------------------------------------------


def test_coordinator_overdue_report(db_session):
    _create_profile(db_session, "C1", "Cora Coordinator", role=AppRole.COORDINATOR)
    _create_profile(db_session, "A1", "Ada Analyst")
    _create_profile(db_session, "B1", "Ben Biologist")
    _create_training(db_session, "T-ANN", "Biosafety Refresher")
    _create_training(db_session, "T-ONE", "Orientation", frequency=Frequency.ONE_TIME)
    _assign(db_session, "A1", "T-ANN", add_months(NOW, -14))
    _assign(db_session, "B1", "T-ONE", datetime(2020, 1, 1))

    response = _report(db_session, "C1", "Show overdue trainings")

    assert response.intent == ReportIntent.OVERDUE
    assert response.scope.role == "coordinator"
    assert response.scope.users == 3
    assert response.scope.dueSoonDays == 60
    assert response.highlights.overdue == 1
    assert response.highlights.total_assignments == 2
    assert [(r.user_id, r.training_id, r.status) for r in response.rows] == [
        ("A1", "T-ANN", ComplianceStatus.OVERDUE)
    ]
    assert response.summary == "1 overdue training assignment across 3 users."
    assert "Show completion rate by job title" in response.suggested_prompts


def test_completion_rate_by_job_title(db_session):
    db_session.add_all(
        [
            account_models.JobTitle(id="JT-VET", name="Veterinarian"),
            account_models.JobTitle(id="JT-TECH", name="Animal Technician"),
        ]
    )
    db_session.commit()
    _create_profile(db_session, "C1", "Cora Coordinator", role=AppRole.COORDINATOR, job_title_id="JT-VET")
    _create_profile(db_session, "T1", "Tia Tech", job_title_id="JT-TECH")
    _create_profile(db_session, "T2", "Tom Tech", job_title_id="JT-TECH")
    _create_training(db_session, "T-ONE", "Orientation", frequency=Frequency.ONE_TIME)
    _assign(db_session, "C1", "T-ONE", datetime(2025, 5, 1))
    _assign(db_session, "T1", "T-ONE", datetime(2025, 5, 1))
    _assign(db_session, "T2", "T-ONE")

    response = _report(db_session, "C1", "Show completion rate by job title")

    assert response.intent == ReportIntent.BY_JOB_TITLE
    assert [(r.job_title, r.total, r.completion_rate) for r in response.rows] == [
        ("Animal Technician", 2, 50.0),
        ("Veterinarian", 1, 100.0),
    ]
    assert response.highlights.completion_rate == 66.7
    assert response.summary == "Overall completion rate is 66.7% across 2 job titles."


def test_due_soon_window_comes_from_prompt(db_session):
    _create_profile(db_session, "U1", "Ada")
    _create_training(db_session, "T-ANN", "Biosafety Refresher")
    _create_training(db_session, "T-SEMI", "Sharps Handling", frequency=Frequency.SEMI_ANNUAL)
    _assign(db_session, "U1", "T-ANN", datetime(2025, 6, 25))   # due 2026-06-25
    _assign(db_session, "U1", "T-SEMI", datetime(2026, 2, 1))   # due 2026-08-01

    response = _report(db_session, "U1", "What is due soon in the next 14 days?")

    assert response.intent == ReportIntent.DUE_SOON
    assert response.scope.dueSoonDays == 14
    assert [r.training_id for r in response.rows] == ["T-ANN"]
    assert response.summary == "1 assignment due within the next 14 days across 1 user."


def test_employee_sees_only_own_rows(db_session):
    _create_profile(db_session, "U1", "Ada")
    _create_profile(db_session, "U2", "Ben")
    _create_training(db_session, "T-ANN", "Biosafety Refresher")
    _assign(db_session, "U1", "T-ANN")
    _assign(db_session, "U2", "T-ANN")

    response = _report(db_session, "U1", "How am I doing?")

    assert response.intent == ReportIntent.SUMMARY
    assert response.scope.role == "employee"
    assert response.scope.users == 1
    assert {r.user_id for r in response.rows} == {"U1"}


def test_employee_net_id_filter_is_forbidden(db_session):
    _create_profile(db_session, "U1", "Ada")
    with pytest.raises(Forbidden) as exc:
        _report(db_session, "U1", "netid jdoe")
    assert exc.value.status_code == 403


def test_supervisor_net_id_filter_narrows_scope(db_session):
    _create_profile(db_session, "S1", "Sam Supervisor", role=AppRole.SUPERVISOR)
    _create_profile(db_session, "E1", "Ada Employee")
    _create_profile(db_session, "E2", "Ben Employee")
    _link(db_session, "S1", "E1")
    _link(db_session, "S1", "E2")
    _create_training(db_session, "T-ANN", "Biosafety Refresher")
    for uid in ("S1", "E1", "E2"):
        _assign(db_session, uid, "T-ANN")

    response = _report(db_session, "S1", "Show overdue trainings for netid E2")

    assert response.scope.users == 1
    assert response.scope.net_id_filter == "E2"
    assert response.highlights.not_started == 1


def test_supervisor_recommendations_cover_team(db_session):
    _create_profile(db_session, "S1", "Sam Supervisor", role=AppRole.SUPERVISOR)
    _create_profile(db_session, "E1", "Ada Employee")
    _create_profile(db_session, "X1", "Xena Elsewhere")
    _link(db_session, "S1", "E1")
    _create_training(db_session, "T-ANN", "Biosafety Refresher")
    _assign(db_session, "E1", "T-ANN", add_months(NOW, -13))
    _assign(db_session, "S1", "T-ANN", add_months(NOW, -1))
    _assign(db_session, "X1", "T-ANN")

    response = _report(db_session, "S1", "What should my team prioritize?")

    assert response.intent == ReportIntent.RECOMMENDATIONS
    assert response.scope.users == 2
    assert [r.user_id for r in response.rows] == ["E1"]
    assert response.summary.startswith("1 assignment need attention")


def test_inactive_caller_gets_empty_scope(db_session):
    _create_profile(db_session, "U1", "Ada", active=False)

    response = _report(db_session, "U1", "Show overdue trainings")

    assert response.summary == "No users found in your report scope."
    assert response.scope.users == 0
    assert response.rows == []
    assert response.highlights.total_assignments == 0


# ---------------------------------------------------------------------------
# Training search
# ---------------------------------------------------------------------------


def test_training_search_ranks_and_annotates_due_dates(db_session):
    _create_profile(db_session, "U1", "Ada")
    _create_training(db_session, "T1", "Biosafety Level 2", description="Biosafety cabinet use")
    _create_training(db_session, "T2", "Animal Handling", description="Includes biosafety basics")
    _create_training(db_session, "T3", "Fire Safety")
    _assign(db_session, "U1", "T1", datetime(2026, 1, 10))

    response = _report(db_session, "U1", "Find trainings about biosafety level")

    assert response.intent == ReportIntent.TRAINING_SEARCH
    assert [(r.training_id, r.match_score) for r in response.rows] == [("T1", 2), ("T2", 1)]
    assert response.rows[0].due_date == datetime(2027, 1, 10)
    assert response.rows[1].due_date is None
    assert response.scope.users == 1
    assert response.highlights.total_assignments == 0
    assert response.summary == 'Found 2 trainings matching "biosafety level".'


def test_training_search_with_no_match_returns_empty_rows(db_session):
    _create_profile(db_session, "U1", "Ada")
    _create_training(db_session, "T1", "Biosafety Level 2")

    response = _report(db_session, "U1", "training: radiation")

    assert response.rows == []
    assert response.summary == 'Found 0 trainings matching "radiation".'


# ---------------------------------------------------------------------------
# Employee directory
# ---------------------------------------------------------------------------


def test_employee_cannot_search_directory(db_session):
    _create_profile(db_session, "U1", "Ada")
    with pytest.raises(Forbidden):
        _report(db_session, "U1", "List employees named Ben")


def test_supervisor_directory_lists_team_with_supervisors(db_session):
    _create_profile(db_session, "S1", "Sam Supervisor", role=AppRole.SUPERVISOR)
    _create_profile(db_session, "S2", "Zed Second", role=AppRole.SUPERVISOR)
    _create_profile(db_session, "E1", "Ben Employee")
    _create_profile(db_session, "E2", "Ben Former", active=False)
    _create_profile(db_session, "E3", "Cy Employee")
    _link(db_session, "S1", "E1")
    _link(db_session, "S2", "E1")
    _link(db_session, "S1", "E2")
    _link(db_session, "S1", "E3")

    response = _report(db_session, "S1", "List employees named Ben")

    assert response.intent == ReportIntent.EMPLOYEE_SEARCH
    assert [(r.user_id, r.supervisor, r.is_active) for r in response.rows] == [
        ("E1", "Sam Supervisor, Zed Second", "Active"),
        ("E2", "Sam Supervisor", "Inactive"),
    ]
    assert response.rows[0].role == "employee"
    assert response.rows[0].job_title == "Unassigned"
    assert response.summary == 'Found 2 employees matching "Ben".'


def test_find_overdue_trainings_runs_overdue_report(db_session):
    _create_profile(db_session, "C1", "Cora Coordinator", role=AppRole.COORDINATOR)
    _create_profile(db_session, "A1", "Ada Analyst")
    _create_training(db_session, "T-ANN", "Biosafety Refresher")
    _create_training(db_session, "T-FIRE", "Fire trainings", frequency=Frequency.ONE_TIME)
    _assign(db_session, "A1", "T-ANN", add_months(NOW, -14))

    response = _report(db_session, "C1", "Find overdue trainings")

    assert response.intent == ReportIntent.OVERDUE
    assert response.highlights.overdue == 1
    assert [(r.user_id, r.training_id) for r in response.rows] == [("A1", "T-ANN")]


def test_directory_search_matches_job_title_tags(db_session):
    db_session.add_all(
        [
            account_models.JobTitle(id="JT-TECH", name="Animal Technician"),
            account_models.JobTitle(id="JT-ADMIN", name="Administrator"),
            account_models.JobTag(id="TG-BSL", name="BSL-2"),
            account_models.JobTag(id="TG-NHP", name="NHP contact"),
            account_models.JobTitleTag(job_title_id="JT-TECH", job_tag_id="TG-BSL"),
            account_models.JobTitleTag(job_title_id="JT-TECH", job_tag_id="TG-NHP"),
        ]
    )
    db_session.commit()
    _create_profile(db_session, "C1", "Cora Coordinator", role=AppRole.COORDINATOR, job_title_id="JT-ADMIN")
    _create_profile(db_session, "E1", "Ada Employee", job_title_id="JT-TECH")
    _create_profile(db_session, "E2", "Ben Employee")

    response = _report(db_session, "C1", "List staff with BSL-2")

    assert response.intent == ReportIntent.EMPLOYEE_SEARCH
    assert [(r.user_id, r.tags) for r in response.rows] == [("E1", "BSL-2, NHP contact")]
    assert response.summary == 'Found 1 employee matching "BSL-2".'
