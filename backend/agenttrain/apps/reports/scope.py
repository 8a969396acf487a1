# backend/agenttrain/apps/reports/scope.py
"""
Who may the caller report on?

- coordinator: every active profile
- supervisor:  own profile + active profiles mapped to them as employees
- employee:    own active profile only

Identity and name filters narrow a non-employee's scope; an employee
asking for either is refused outright.
"""

from __future__ import annotations

from typing import List, Optional

from agenttrain.apps.accounts.models import AppRole

from .errors import Forbidden
from .repository import ProfileRecord, ReportDataSource

DEFAULT_ROLE = AppRole.EMPLOYEE


def resolve_caller_role(source: ReportDataSource, caller_id: str) -> AppRole:
    """Missing or unknown role rows fall back to EMPLOYEE."""
    raw = source.get_role(caller_id)
    if raw is None:
        return DEFAULT_ROLE
    try:
        return AppRole(raw)
    except ValueError:
        return DEFAULT_ROLE


def _scoped_profiles(
    source: ReportDataSource,
    caller_id: str,
    role: AppRole,
    *,
    active_only: bool,
) -> List[ProfileRecord]:
    if role == AppRole.COORDINATOR:
        profiles = source.list_profiles(active_only=active_only)
    elif role == AppRole.SUPERVISOR:
        scoped_ids = [caller_id]
        for employee_id in source.list_supervised_employee_ids(caller_id):
            if employee_id not in scoped_ids:
                scoped_ids.append(employee_id)
        profiles = source.list_profiles(scoped_ids, active_only=active_only)
    else:
        profiles = source.list_profiles([caller_id], active_only=active_only)

    # Guard against duplicate rows from the store.
    seen = set()
    unique: List[ProfileRecord] = []
    for profile in profiles:
        if profile.user_id in seen:
            continue
        seen.add(profile.user_id)
        unique.append(profile)
    return unique


def resolve_scope(
    source: ReportDataSource,
    caller_id: str,
    role: AppRole,
    *,
    net_id_filter: Optional[str] = None,
    name_filter: Optional[str] = None,
) -> List[ProfileRecord]:
    if role == AppRole.EMPLOYEE and (net_id_filter or name_filter):
        raise Forbidden("Employees can only run reports for their own account.")

    profiles = _scoped_profiles(source, caller_id, role, active_only=True)

    if net_id_filter:
        wanted = net_id_filter.strip().lower()
        profiles = [p for p in profiles if (p.net_id or "").lower() == wanted]

    if name_filter:
        wanted_name = name_filter.strip().lower()
        profiles = [p for p in profiles if (p.full_name or "").strip().lower() == wanted_name]

    return profiles


def resolve_directory_scope(
    source: ReportDataSource,
    caller_id: str,
    role: AppRole,
) -> List[ProfileRecord]:
    """Profiles (active or not) a supervisor/coordinator may look up."""
    if role == AppRole.EMPLOYEE:
        raise Forbidden("Employees cannot search other employee records.")
    return _scoped_profiles(source, caller_id, role, active_only=False)
