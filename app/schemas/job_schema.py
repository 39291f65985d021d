from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional


class JobStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"


class JobPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def clamp_percent(value) -> int:
    """Round and clamp a progress value into [0, 100]"""
    return max(0, min(100, int(round(float(value)))))


class ValveJob(BaseModel):
    """A repair job. Serialized with camelCase keys (valveId, percentComplete, ...)"""
    id: str
    valve_id: str
    description: str
    status: JobStatus = JobStatus.PENDING
    priority: JobPriority = JobPriority.MEDIUM
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    percent_complete: int = 0
    created_at: datetime
    updated_at: datetime
    estimated_completion: Optional[datetime] = None

    @field_validator("percent_complete")
    @classmethod
    def _clamp(cls, value: int) -> int:
        return clamp_percent(value)

    @field_validator("created_at", "updated_at", "estimated_completion")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Dates without an offset are taken as UTC"""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ValveJobCreate(BaseModel):
    valve_id: str
    description: str
    priority: JobPriority = JobPriority.MEDIUM
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    percent_complete: int = Field(default=0, ge=0, le=100)
    estimated_completion: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ValveJobUpdate(BaseModel):
    """Partial edit; only fields that are set are applied"""
    valve_id: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[JobPriority] = None
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    percent_complete: Optional[int] = Field(default=None, ge=0, le=100)
    estimated_completion: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ValveJobResponse(ValveJob):
    """Job plus display fields derived from percent complete"""
    status_label: str
    status_color: str


class ImportSummary(BaseModel):
    file_name: str
    rows_parsed: int
    added: int
    updated: int
    warnings: List[str] = []


class JobStats(BaseModel):
    total: int
    average_progress: int
    by_status: Dict[str, int]
    by_priority: Dict[str, int]
