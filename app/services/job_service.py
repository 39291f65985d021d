"""Job operations used by the API: manual edits, import, export, reset"""
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional
from app.schemas.job_schema import (
    ImportSummary,
    JobPriority,
    JobStats,
    JobStatus,
    ValveJob,
    ValveJobCreate,
    ValveJobUpdate,
)
from app.services.errors import JobNotFoundError, JobValidationError
from app.services.job_store import JobStore
from app.services.reconciler import Reconciler
from app.services.sample_data import generate_sample_jobs
from app.services.spreadsheet_codec import EXPORT_EXTENSIONS, SpreadsheetCodec, compute_stats, export_filename
from app.services.status_bands import derive_job_status

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JobService:
    """
    Every operation loads the full job set, computes the change and saves the
    whole set back. Callers must not run two operations at once.
    """

    def __init__(self, store: JobStore, codec: SpreadsheetCodec, reconciler: Optional[Reconciler] = None):
        self.store = store
        self.codec = codec
        self.reconciler = reconciler or Reconciler()

    # Queries

    def list_jobs(
        self,
        status: Optional[JobStatus] = None,
        priority: Optional[JobPriority] = None,
        search: Optional[str] = None,
    ) -> List[ValveJob]:
        jobs = self.store.load_all()

        if status is not None:
            jobs = [job for job in jobs if job.status == status]
        if priority is not None:
            jobs = [job for job in jobs if job.priority == priority]
        if search:
            needle = search.strip().lower()
            jobs = [
                job for job in jobs
                if needle in job.valve_id.lower()
                or needle in job.description.lower()
                or needle in (job.assigned_to or "").lower()
            ]

        return jobs

    def get_job(self, job_id: str) -> ValveJob:
        for job in self.store.load_all():
            if job.id == job_id:
                return job
        raise JobNotFoundError(job_id)

    def stats(self) -> JobStats:
        return compute_stats(self.store.load_all())

    # Manual edits

    def create_job(self, data: ValveJobCreate, now: Optional[datetime] = None) -> ValveJob:
        now = now or _utc_now()
        valve_id = self._require_text(data.valve_id, "Please enter a valve ID")
        description = self._require_text(data.description, "Please enter a description")

        jobs = self.store.load_all()
        if any(job.valve_id == valve_id for job in jobs):
            raise JobValidationError("A job with this valve ID already exists")

        job = ValveJob(
            id=uuid.uuid4().hex,
            valve_id=valve_id,
            description=description,
            status=derive_job_status(data.percent_complete),
            priority=data.priority,
            assigned_to=self._optional_text(data.assigned_to),
            notes=self._optional_text(data.notes),
            percent_complete=data.percent_complete,
            created_at=now,
            updated_at=now,
            estimated_completion=data.estimated_completion,
        )

        self.store.save_all(jobs + [job])
        logger.info(f"Created job {job.id} for valve {job.valve_id}")
        return job

    def update_job(self, job_id: str, data: ValveJobUpdate, now: Optional[datetime] = None) -> ValveJob:
        now = now or _utc_now()
        jobs = self.store.load_all()
        position = self._find_position(jobs, job_id)
        current = jobs[position]

        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
        if "valve_id" in changes:
            changes["valve_id"] = self._require_text(changes["valve_id"], "Please enter a valve ID")
            if any(job.valve_id == changes["valve_id"] and job.id != job_id for job in jobs):
                raise JobValidationError("A job with this valve ID already exists")
        if "description" in changes:
            changes["description"] = self._require_text(changes["description"], "Please enter a description")
        if changes.get("priority") is None:
            changes.pop("priority", None)
        if changes.get("percent_complete") is None:
            changes.pop("percent_complete", None)
        for key in ("assigned_to", "notes"):
            if key in changes:
                changes[key] = self._optional_text(changes[key])

        updated_data = current.model_dump()
        updated_data.update(changes)
        updated_data["status"] = derive_job_status(updated_data["percent_complete"])
        updated_data["updated_at"] = max(now, current.created_at)
        updated = ValveJob(**updated_data)

        jobs[position] = updated
        self.store.save_all(jobs)
        logger.info(f"Updated job {job_id}")
        return updated

    def delete_job(self, job_id: str) -> None:
        jobs = self.store.load_all()
        position = self._find_position(jobs, job_id)
        del jobs[position]
        self.store.save_all(jobs)
        logger.info(f"Deleted job {job_id}")

    def reset(self) -> None:
        self.store.clear()

    def load_sample_data(self, now: Optional[datetime] = None) -> List[ValveJob]:
        """Append the sample jobs with a timestamp suffix on their valve IDs"""
        now = now or _utc_now()
        samples = generate_sample_jobs(now=now, valve_suffix=now.strftime("%Y%m%d%H%M%S"))

        jobs = self.store.load_all()
        taken = {job.valve_id for job in jobs}
        samples = [job for job in samples if job.valve_id not in taken]

        self.store.save_all(jobs + samples)
        logger.info(f"Added {len(samples)} sample jobs")
        return samples

    # Spreadsheets

    def import_file(self, file_path: Path, file_name: Optional[str] = None) -> ImportSummary:
        rows = self.codec.read_spreadsheet(file_path)
        return self.import_rows(rows, file_name or file_path.name)

    def import_rows(
        self,
        raw_rows: Iterable[Mapping[str, Any]],
        file_name: str,
        now: Optional[datetime] = None,
    ) -> ImportSummary:
        """
        Parse, merge and save in one pass. Zero parsed rows leaves the store
        alone; the caller decides whether that is an error.
        """
        now = now or _utc_now()
        batch = self.codec.parse_rows(raw_rows, now=now)

        summary = ImportSummary(
            file_name=file_name,
            rows_parsed=len(batch.jobs),
            added=0,
            updated=0,
            warnings=batch.warnings,
        )
        if not batch.jobs:
            logger.info(f"No rows parsed from {file_name}")
            return summary

        result = self.reconciler.reconcile(self.store.load_all(), batch.jobs, now=now)
        self.store.save_all(result.merged)

        summary.added = result.added
        summary.updated = result.updated
        logger.info(
            f"Imported {file_name}: {result.added} added, {result.updated} updated, "
            f"{len(batch.warnings)} warnings"
        )
        return summary

    def export_report(
        self,
        export_dir: Path,
        fmt: str = "excel",
        include_stats: bool = True,
        now: Optional[datetime] = None,
    ) -> Path:
        """Write a workbook (jobs + statistics) or a compact CSV; returns its path"""
        if fmt not in EXPORT_EXTENSIONS:
            raise JobValidationError(f"Unsupported export format: {fmt}")

        jobs = self.store.load_all()
        file_path = export_dir / export_filename(fmt, now)

        if fmt == "csv":
            self.codec.write_csv(self.codec.render_rows(jobs), file_path)
        else:
            self.codec.write_workbook(self.codec.render_rows(jobs, include_stats=include_stats), file_path)

        logger.info(f"Exported {len(jobs)} jobs to {file_path}")
        return file_path

    # Helpers

    @staticmethod
    def _find_position(jobs: List[ValveJob], job_id: str) -> int:
        for position, job in enumerate(jobs):
            if job.id == job_id:
                return position
        raise JobNotFoundError(job_id)

    @staticmethod
    def _require_text(value: Optional[str], message: str) -> str:
        text = (value or "").strip()
        if not text:
            raise JobValidationError(message)
        return text

    @staticmethod
    def _optional_text(value: Optional[str]) -> Optional[str]:
        text = (value or "").strip()
        return text or None
