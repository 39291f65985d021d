"""FastAPI dependencies wiring the job service to the configured store"""
from app.config import get_settings
from app.database import SessionLocal
from app.services.job_service import JobService
from app.services.job_store import JobStore
from app.services.spreadsheet_codec import SpreadsheetCodec


def get_job_service() -> JobService:
    settings = get_settings()
    return JobService(
        store=JobStore(SessionLocal, storage_key=settings.storage_key),
        codec=SpreadsheetCodec(
            default_description=settings.default_description,
            synthetic_valve_prefix=settings.synthetic_valve_prefix,
        ),
    )
