"""Sample jobs for demos and empty shops"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from app.schemas.job_schema import JobPriority, ValveJob
from app.services.status_bands import derive_job_status

# (valve_id, description, percent, priority, assigned_to, notes, created_ago, updated_ago, estimate_in)
SAMPLE_JOBS = [
    ("VLV-001", "Replace valve seat and stem", 30, JobPriority.HIGH, "John Smith",
     "Customer requested expedited service", timedelta(days=2), timedelta(hours=1), timedelta(days=1)),
    ("VLV-002", "Pressure test and recalibration", 10, JobPriority.MEDIUM, "Sarah Johnson",
     "Waiting for parts delivery", timedelta(days=1), timedelta(days=1), timedelta(days=3)),
    ("VLV-003", "Complete overhaul and inspection", 100, JobPriority.LOW, "Mike Davis",
     "All tests passed successfully", timedelta(days=5), timedelta(hours=6), -timedelta(hours=6)),
    ("VLV-004", "Leak repair and seal replacement", 65, JobPriority.HIGH, "Emily Brown",
     "Awaiting customer approval for additional work", timedelta(days=3), timedelta(days=2), None),
    ("VLV-005", "Routine maintenance check", 0, JobPriority.LOW, None,
     None, timedelta(hours=12), timedelta(hours=12), timedelta(days=5)),
]


def generate_sample_jobs(now: Optional[datetime] = None, valve_suffix: Optional[str] = None) -> List[ValveJob]:
    """
    Build the sample jobs relative to `now`. A suffix is appended to each
    valve ID so repeated loads do not collide with earlier ones.
    """
    now = now or datetime.now(timezone.utc)
    jobs = []

    for valve_id, description, percent, priority, assigned_to, notes, created_ago, updated_ago, estimate_in in SAMPLE_JOBS:
        jobs.append(ValveJob(
            id=uuid.uuid4().hex,
            valve_id=f"{valve_id}-{valve_suffix}" if valve_suffix else valve_id,
            description=description,
            status=derive_job_status(percent),
            priority=priority,
            assigned_to=assigned_to,
            notes=notes,
            percent_complete=percent,
            created_at=now - created_ago,
            updated_at=now - updated_ago,
            estimated_completion=now + estimate_in if estimate_in is not None else None,
        ))

    return jobs
