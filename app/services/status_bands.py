"""Phase label, display color and status bucket derived from percent complete"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple
from app.schemas.job_schema import JobStatus


class ColorToken(str, Enum):
    GREEN = "#10b981"
    BLUE = "#3b82f6"
    RED = "#ef4444"
    ORANGE = "#f59e0b"
    PURPLE = "#8b5cf6"
    INDIGO = "#6366f1"
    GRAY = "#6b7280"


@dataclass(frozen=True)
class StatusBand:
    threshold: int
    label: str
    color: ColorToken
    status: JobStatus


# Evaluated top-down, first match wins.
# 65-69 is ON-HOLD/red even though it sits between orange and blue bands.
STATUS_BANDS: Tuple[StatusBand, ...] = (
    StatusBand(100, "Shipped", ColorToken.GREEN, JobStatus.COMPLETED),
    StatusBand(95, "Preparing for Shipment", ColorToken.BLUE, JobStatus.IN_PROGRESS),
    StatusBand(80, "Final Testing", ColorToken.BLUE, JobStatus.IN_PROGRESS),
    StatusBand(70, "Assembly", ColorToken.BLUE, JobStatus.IN_PROGRESS),
    StatusBand(65, "ON-HOLD", ColorToken.RED, JobStatus.ON_HOLD),
    StatusBand(60, "Waiting on Parts", ColorToken.ORANGE, JobStatus.ON_HOLD),
    StatusBand(40, "Advised Cost/HOLD", ColorToken.ORANGE, JobStatus.ON_HOLD),
    StatusBand(30, "Evaluation", ColorToken.PURPLE, JobStatus.IN_PROGRESS),
    StatusBand(20, "Teardown", ColorToken.PURPLE, JobStatus.IN_PROGRESS),
    StatusBand(15, "Pre-Test", ColorToken.PURPLE, JobStatus.IN_PROGRESS),
    StatusBand(10, "Received", ColorToken.INDIGO, JobStatus.PENDING),
)
DEFAULT_BAND = StatusBand(0, "Planned", ColorToken.GRAY, JobStatus.PENDING)

# Representative percent used when a legacy sheet only carries a status value
STATUS_SEED_PERCENT = {
    JobStatus.PENDING: 0,
    JobStatus.IN_PROGRESS: 15,
    JobStatus.ON_HOLD: 40,
    JobStatus.COMPLETED: 100,
}


def find_band(percent: int) -> StatusBand:
    """Return the band a percent falls into. Callers clamp the range first."""
    for band in STATUS_BANDS:
        if percent >= band.threshold:
            return band
    return DEFAULT_BAND


def derive_status_label(percent: int) -> str:
    return find_band(percent).label


def derive_status_color(percent: int) -> ColorToken:
    return find_band(percent).color


def derive_job_status(percent: int) -> JobStatus:
    """Coarse filter bucket for a percent complete"""
    return find_band(percent).status
