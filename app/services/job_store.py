"""Persistence of the full job collection as one serialized blob"""
import json
import logging
from typing import List
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from app.models import StorageEntry
from app.schemas.job_schema import JobStatus, ValveJob
from app.services.errors import StorageError
from app.services.status_bands import STATUS_SEED_PERCENT, derive_job_status

logger = logging.getLogger(__name__)

_jobs_adapter = TypeAdapter(List[ValveJob])


class JobStore:
    """
    Loads and saves every job at once under a single storage key.
    Each call runs in its own transaction so a failed write leaves the
    previously stored blob untouched.
    """

    def __init__(self, session_factory: sessionmaker, storage_key: str = "@valve_jobs"):
        self.session_factory = session_factory
        self.storage_key = storage_key

    def load_all(self) -> List[ValveJob]:
        """Return stored jobs; a missing or corrupt blob yields an empty list"""
        try:
            with self.session_factory() as db:
                entry = db.get(StorageEntry, self.storage_key)
                blob = entry.value if entry else None
        except SQLAlchemyError as e:
            logger.error(f"Error loading jobs: {e}")
            raise StorageError(f"Failed to load jobs: {e}") from e

        if blob is None:
            return []

        try:
            data = json.loads(blob)
            if isinstance(data, list):
                data = [self._seed_percent(item) for item in data]
            jobs = _jobs_adapter.validate_python(data)
        except (ValueError, ValidationError) as e:
            logger.error(f"Stored jobs under {self.storage_key} are corrupt, treating as empty: {e}")
            return []

        # Percent complete decides the status bucket, whatever was stored
        return [job.model_copy(update={"status": derive_job_status(job.percent_complete)}) for job in jobs]

    def save_all(self, jobs: List[ValveJob]) -> None:
        blob = json.dumps(self.serialize(jobs))

        with self.session_factory() as db:
            try:
                entry = db.get(StorageEntry, self.storage_key)
                if entry is None:
                    db.add(StorageEntry(key=self.storage_key, value=blob))
                else:
                    entry.value = blob
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error saving jobs: {e}")
                raise StorageError(f"Failed to save jobs: {e}") from e

        logger.info(f"Saved {len(jobs)} jobs")

    def clear(self) -> None:
        with self.session_factory() as db:
            try:
                entry = db.get(StorageEntry, self.storage_key)
                if entry is not None:
                    db.delete(entry)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error clearing jobs: {e}")
                raise StorageError(f"Failed to clear jobs: {e}") from e

        logger.info("Jobs cleared")

    @staticmethod
    def _seed_percent(item):
        """Jobs saved without a percent get one from their stored status"""
        if not isinstance(item, dict) or "percentComplete" in item or "percent_complete" in item:
            return item
        try:
            status = JobStatus(item.get("status"))
        except ValueError:
            return item
        return {**item, "percentComplete": STATUS_SEED_PERCENT[status]}

    @staticmethod
    def serialize(jobs: List[ValveJob]) -> list:
        """Absent optional fields are left out rather than stored as null"""
        return [job.model_dump(mode="json", by_alias=True, exclude_none=True) for job in jobs]
