from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"

from agenttrain.database import Base  # noqa: E402
from agenttrain.apps.accounts import models as account_models  # noqa: E402
from agenttrain.apps.training import models as training_models  # noqa: E402


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(
        bind=engine,
        tables=[
            account_models.JobTitle.__table__,
            account_models.JobTag.__table__,
            account_models.JobTitleTag.__table__,
            account_models.Profile.__table__,
            account_models.UserRole.__table__,
            account_models.SupervisorEmployeeMapping.__table__,
            training_models.Training.__table__,
            training_models.UserTrainingAssignment.__table__,
            training_models.TrainingCompletion.__table__,
        ],
    )
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
