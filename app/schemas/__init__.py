from app.schemas.job_schema import (
    ValveJob,
    ValveJobCreate,
    ValveJobUpdate,
    ValveJobResponse,
    ImportSummary,
    JobStats,
    JobStatus,
    JobPriority,
)

__all__ = [
    "ValveJob",
    "ValveJobCreate",
    "ValveJobUpdate",
    "ValveJobResponse",
    "ImportSummary",
    "JobStats",
    "JobStatus",
    "JobPriority",
]
