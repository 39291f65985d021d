"""Spreadsheet import/export for valve repair jobs"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional
import pandas as pd
from openpyxl.utils import get_column_letter
from app.schemas.job_schema import JobPriority, JobStats, JobStatus, ValveJob
from app.services.errors import SpreadsheetParseError
from app.services.normalizer import DataNormalizer
from app.services.status_bands import STATUS_SEED_PERCENT, derive_job_status, derive_status_label

logger = logging.getLogger(__name__)

# Candidate column names per field, tried in order: exact key, snake_case,
# human readable, then the header this module writes on export.
FIELD_ALIASES: Dict[str, tuple] = {
    "valve_id": ("valveId", "valve_id", "Valve ID"),
    "description": ("description", "Description"),
    "status": ("status", "Status"),
    "priority": ("priority", "Priority"),
    "assigned_to": ("assignedTo", "assigned_to", "Assigned To"),
    "notes": ("notes", "Notes"),
    "percent_complete": ("percentComplete", "percent_complete", "Percent Complete", "% Complete"),
    "created_at": ("createdAt", "created_at", "Created At", "Created Date"),
    "estimated_completion": (
        "estimatedCompletion", "estimated_completion", "Estimated Completion", "Est. Completion",
    ),
}

EXPORT_COLUMNS = [
    "Valve ID",
    "Description",
    "% Complete",
    "Job Status",
    "Priority",
    "Assigned To",
    "Notes",
    "Created Date",
    "Updated Date",
    "Est. Completion",
]
EXPORT_COLUMN_WIDTHS = [12, 30, 10, 20, 10, 15, 30, 15, 15, 15]

JOBS_SHEET = "Valve Repair Jobs"
STATS_SHEET = "Statistics"

EXPORT_EXTENSIONS = {"excel": "xlsx", "csv": "csv"}
EXPORT_MIME_TYPES = {
    "excel": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
}
IMPORT_EXTENSIONS = (".xlsx", ".xls", ".csv")


@dataclass
class ImportBatch:
    jobs: List[ValveJob] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class RenderedReport:
    jobs: pd.DataFrame
    stats: Optional[pd.DataFrame] = None


def resolve_column(row: Mapping[str, Any], field_name: str) -> Any:
    """Return the first non-empty value among the field's column aliases"""
    for key in FIELD_ALIASES[field_name]:
        value = row.get(key)
        if not DataNormalizer.is_blank(value):
            return value
    return None


def format_date(value: Optional[datetime]) -> str:
    """Short month/day/year, e.g. "Jan 5, 2025" """
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def compute_stats(jobs: List[ValveJob]) -> JobStats:
    total = len(jobs)
    # Half-up rounding; an empty list averages to 0
    average = (2 * sum(job.percent_complete for job in jobs) + total) // (2 * total) if total else 0

    return JobStats(
        total=total,
        average_progress=average,
        by_status={status.value: sum(1 for job in jobs if job.status == status) for status in JobStatus},
        by_priority={priority.value: sum(1 for job in jobs if job.priority == priority) for priority in JobPriority},
    )


def export_filename(fmt: str, now: Optional[datetime] = None) -> str:
    """valve_repair_report_2025-01-05T10-20-30.xlsx, sortable by name"""
    now = now or datetime.now(timezone.utc)
    return f"valve_repair_report_{now:%Y-%m-%dT%H-%M-%S}.{EXPORT_EXTENSIONS[fmt]}"


class SpreadsheetCodec:
    """Converts spreadsheet rows to jobs and jobs to report tables"""

    def __init__(self, default_description: str = "No description", synthetic_valve_prefix: str = "VLV"):
        self.default_description = default_description
        self.synthetic_valve_prefix = synthetic_valve_prefix

    def read_spreadsheet(self, file_path: Path) -> List[Dict[str, Any]]:
        """Read the first sheet of a file into row mappings keyed by header"""
        extension = file_path.suffix.lower()
        if extension not in IMPORT_EXTENSIONS:
            raise SpreadsheetParseError(
                f"Unsupported file type: {extension}. Allowed: {', '.join(IMPORT_EXTENSIONS)}"
            )

        try:
            if extension == '.csv':
                df = pd.read_csv(file_path, dtype=object)
            else:
                df = pd.read_excel(file_path, sheet_name=0, dtype=object)
        except pd.errors.EmptyDataError:
            return []
        except Exception as e:
            logger.error(f"Error parsing spreadsheet {file_path.name}: {e}")
            raise SpreadsheetParseError(
                "Failed to parse spreadsheet. Please ensure it has the correct format."
            ) from e

        df.columns = [str(column).strip() for column in df.columns]
        df = df.dropna(how="all")
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict(orient="records")

    def parse_rows(self, raw_rows: Iterable[Mapping[str, Any]], now: Optional[datetime] = None) -> ImportBatch:
        """
        Convert raw rows into candidate jobs.
        Rows are never rejected; questionable values are coerced and reported
        in the batch warnings.
        """
        now = now or datetime.now(timezone.utc)
        stamp = now.strftime("%Y%m%d%H%M%S")
        batch = ImportBatch()

        for index, row in enumerate(raw_rows):
            row_label = f"Row {index + 1}"
            warnings = batch.warnings

            valve_id = DataNormalizer.normalize_text(resolve_column(row, "valve_id"))
            if valve_id is None:
                valve_id = f"{self.synthetic_valve_prefix}-{stamp}-{index + 1:03d}"
                warnings.append(f"{row_label}: missing valve ID, assigned {valve_id}")

            status = None
            raw_status = DataNormalizer.normalize_choice(resolve_column(row, "status"))
            if raw_status is not None:
                try:
                    status = JobStatus(raw_status)
                except ValueError:
                    warnings.append(f"{row_label}: unrecognized status '{raw_status}', ignored")

            raw_percent = resolve_column(row, "percent_complete")
            percent = DataNormalizer.normalize_percent(raw_percent)
            if percent is None:
                if raw_percent is not None:
                    warnings.append(f"{row_label}: invalid percent complete '{raw_percent}', using 0")
                percent = STATUS_SEED_PERCENT[status] if status and raw_percent is None else 0

            priority = JobPriority.MEDIUM
            raw_priority = DataNormalizer.normalize_choice(resolve_column(row, "priority"))
            if raw_priority is not None:
                try:
                    priority = JobPriority(raw_priority)
                except ValueError:
                    warnings.append(f"{row_label}: unrecognized priority '{raw_priority}', using 'medium'")

            created_at = DataNormalizer.normalize_date(resolve_column(row, "created_at"))
            if created_at is None or created_at > now:
                created_at = now

            estimated_completion = None
            raw_estimate = resolve_column(row, "estimated_completion")
            if raw_estimate is not None:
                estimated_completion = DataNormalizer.normalize_date(raw_estimate)
                if estimated_completion is None:
                    warnings.append(f"{row_label}: unreadable estimated completion '{raw_estimate}', ignored")

            batch.jobs.append(ValveJob(
                id=uuid.uuid4().hex,
                valve_id=valve_id,
                description=(
                    DataNormalizer.normalize_text(resolve_column(row, "description"))
                    or self.default_description
                ),
                status=derive_job_status(percent),
                priority=priority,
                assigned_to=DataNormalizer.normalize_text(resolve_column(row, "assigned_to")),
                notes=DataNormalizer.normalize_text(resolve_column(row, "notes")),
                percent_complete=percent,
                created_at=created_at,
                updated_at=now,
                estimated_completion=estimated_completion,
            ))

        return batch

    def render_rows(self, jobs: List[ValveJob], include_stats: bool = False) -> RenderedReport:
        """Build the job table, plus the statistics table unless compact"""
        rows = [
            {
                "Valve ID": job.valve_id,
                "Description": job.description,
                "% Complete": job.percent_complete,
                "Job Status": derive_status_label(job.percent_complete),
                "Priority": job.priority.value,
                "Assigned To": job.assigned_to or "",
                "Notes": job.notes or "",
                "Created Date": format_date(job.created_at),
                "Updated Date": format_date(job.updated_at),
                "Est. Completion": format_date(job.estimated_completion),
            }
            for job in jobs
        ]
        report = RenderedReport(jobs=pd.DataFrame(rows, columns=EXPORT_COLUMNS))

        if include_stats:
            report.stats = self._render_stats(compute_stats(jobs))

        return report

    @staticmethod
    def _render_stats(stats: JobStats) -> pd.DataFrame:
        rows = [
            ("Total Jobs", stats.total),
            ("Average Progress", f"{stats.average_progress}%"),
            ("", ""),
            ("Status Breakdown", ""),
            ("Pending", stats.by_status[JobStatus.PENDING.value]),
            ("In Progress", stats.by_status[JobStatus.IN_PROGRESS.value]),
            ("On Hold", stats.by_status[JobStatus.ON_HOLD.value]),
            ("Completed", stats.by_status[JobStatus.COMPLETED.value]),
            ("", ""),
            ("Priority Breakdown", ""),
            ("High Priority", stats.by_priority[JobPriority.HIGH.value]),
            ("Medium Priority", stats.by_priority[JobPriority.MEDIUM.value]),
            ("Low Priority", stats.by_priority[JobPriority.LOW.value]),
        ]
        return pd.DataFrame(rows, columns=["Metric", "Count"])

    def write_workbook(self, report: RenderedReport, file_path: Path) -> Path:
        """Write the job sheet and, when present, the statistics sheet"""
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(file_path, engine="openpyxl") as writer:
            report.jobs.to_excel(writer, sheet_name=JOBS_SHEET, index=False)
            self._set_widths(writer.sheets[JOBS_SHEET], EXPORT_COLUMN_WIDTHS)

            if report.stats is not None:
                report.stats.to_excel(writer, sheet_name=STATS_SHEET, index=False)
                self._set_widths(writer.sheets[STATS_SHEET], [20, 10])

        return file_path

    def write_csv(self, report: RenderedReport, file_path: Path) -> Path:
        """CSV carries the job table only"""
        file_path.parent.mkdir(parents=True, exist_ok=True)
        report.jobs.to_csv(file_path, index=False)
        return file_path

    @staticmethod
    def _set_widths(worksheet, widths: List[int]) -> None:
        for position, width in enumerate(widths, 1):
            worksheet.column_dimensions[get_column_letter(position)].width = width
