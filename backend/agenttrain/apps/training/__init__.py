# backend/agenttrain/apps/training/__init__.py
"""
Training app

Catalog, per-subject assignments and completion records, as read by the
report engine.
"""

from . import models  # noqa: F401

__all__ = ["models"]
