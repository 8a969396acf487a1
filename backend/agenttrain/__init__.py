# backend/agenttrain/__init__.py
"""
Import ORM models from each app so that Base.metadata sees all tables.

The actual model classes are kept in agenttrain/apps/*/models.py.
"""

from .apps.accounts import models as accounts_models          # profiles / roles / supervisors
from .apps.training import models as training_models          # catalog / assignments / completions

__all__ = [
    "accounts_models",
    "training_models",
]
