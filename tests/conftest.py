"""Shared fixtures: every test gets its own SQLite database file."""

import os
import sys
from datetime import datetime, timezone

# Keep the app's default engine off the working directory
os.environ.setdefault("DATABASE_URL", "sqlite://")

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
from sqlalchemy.orm import sessionmaker

from app.database import init_db, make_engine
from app.schemas.job_schema import JobPriority, ValveJob
from app.services.job_service import JobService
from app.services.job_store import JobStore
from app.services.spreadsheet_codec import SpreadsheetCodec
from app.services.status_bands import derive_job_status

NOW = datetime(2025, 3, 14, 15, 9, 26, tzinfo=timezone.utc)


def make_job(valve_id: str, **overrides) -> ValveJob:
    data = dict(
        id=f"id-{valve_id}",
        valve_id=valve_id,
        description=f"Repair {valve_id}",
        priority=JobPriority.MEDIUM,
        percent_complete=0,
        created_at=datetime(2025, 1, 5, 8, 30, tzinfo=timezone.utc),
        updated_at=datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc),
    )
    data.update(overrides)
    data.setdefault("status", derive_job_status(data["percent_complete"]))
    return ValveJob(**data)


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'jobs.db'}")
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory) -> JobStore:
    return JobStore(session_factory, storage_key="@valve_jobs")


@pytest.fixture
def codec() -> SpreadsheetCodec:
    return SpreadsheetCodec()


@pytest.fixture
def service(store, codec) -> JobService:
    return JobService(store=store, codec=codec)
