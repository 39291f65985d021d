"""Reconciliation of imported jobs against the stored job set"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional
from app.schemas.job_schema import ValveJob
from app.services.status_bands import derive_job_status


@dataclass
class MergeResult:
    merged: List[ValveJob]
    added: int = 0
    updated: int = 0


class Reconciler:
    """Folds an imported batch into existing jobs, matching on valve ID"""

    def merge_job_data(self, existing: ValveJob, incoming: ValveJob, now: datetime) -> ValveJob:
        """
        Take every field from the incoming job except the identity and
        creation date of the existing one
        """
        data = incoming.model_dump()
        data.update(
            id=existing.id,
            created_at=existing.created_at,
            updated_at=max(now, existing.created_at),
            status=derive_job_status(incoming.percent_complete),
        )
        return ValveJob(**data)

    def reconcile(
        self,
        existing: List[ValveJob],
        incoming: List[ValveJob],
        now: Optional[datetime] = None,
    ) -> MergeResult:
        """
        Returns a new job list; neither input list nor its jobs are modified,
        so a caller that fails to persist the result can simply drop it.

        A duplicate valve ID already inside `existing` keeps only the last job.
        A key repeated within `incoming` is added once and then updated.
        """
        now = now or datetime.now(timezone.utc)
        job_map: Dict[str, ValveJob] = {job.valve_id: job for job in existing}
        result = MergeResult(merged=[])

        for new_job in incoming:
            current = job_map.get(new_job.valve_id)
            if current is not None:
                job_map[new_job.valve_id] = self.merge_job_data(current, new_job, now)
                result.updated += 1
            else:
                job_map[new_job.valve_id] = new_job
                result.added += 1

        result.merged = list(job_map.values())
        return result


def reconcile(existing: List[ValveJob], incoming: List[ValveJob], now: Optional[datetime] = None) -> MergeResult:
    return Reconciler().reconcile(existing, incoming, now=now)
