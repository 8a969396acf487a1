# backend/agenttrain/apps/accounts/__init__.py
"""
Accounts app

Read-only view of the identity side of the store:
- Profiles (display name, NetID, job title, active flag)
- Reporting roles (employee / supervisor / coordinator)
- Supervisor -> employee links
- Job titles and their tags

Rows are owned and maintained by the identity subsystem; the report
engine never writes them.
"""

from . import models  # noqa: F401

__all__ = ["models"]
