"""Spreadsheet import and export endpoints"""
from fastapi import APIRouter, Depends, UploadFile, File, HTTPException
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask
from pathlib import Path
import shutil
import tempfile
from app.api.dependencies import get_job_service
from app.schemas import ImportSummary
from app.services.errors import JobValidationError, SpreadsheetParseError, StorageError
from app.services.job_service import JobService
from app.services.spreadsheet_codec import EXPORT_MIME_TYPES, IMPORT_EXTENSIONS

router = APIRouter(prefix="/api", tags=["spreadsheets"])


@router.post("/import", response_model=ImportSummary)
async def import_spreadsheet(
    file: UploadFile = File(...),
    service: JobService = Depends(get_job_service),
):
    """Add or update jobs from an Excel/CSV file, matching rows on valve ID"""
    file_extension = Path(file.filename or "").suffix.lower()

    if file_extension not in IMPORT_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type. Allowed: {', '.join(IMPORT_EXTENSIONS)}"
        )

    # Save to temporary file
    with tempfile.NamedTemporaryFile(delete=False, suffix=file_extension) as tmp:
        content = await file.read()
        tmp.write(content)
        tmp_path = Path(tmp.name)

    try:
        summary = service.import_file(tmp_path, file_name=file.filename)

    except SpreadsheetParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))

    finally:
        # Clean up temp file
        if tmp_path.exists():
            tmp_path.unlink()

    if summary.rows_parsed == 0:
        raise HTTPException(status_code=400, detail="The spreadsheet contains no valid data")

    return summary


@router.get("/export")
async def export_spreadsheet(
    format: str = "excel",
    include_stats: bool = True,
    service: JobService = Depends(get_job_service),
):
    """Download a full workbook (format=excel) or a compact CSV (format=csv)"""
    # Written to a temporary directory that is removed once the download is sent
    export_dir = Path(tempfile.mkdtemp(prefix="valve_export_"))

    try:
        file_path = service.export_report(export_dir, fmt=format, include_stats=include_stats)
    except JobValidationError as e:
        shutil.rmtree(export_dir, ignore_errors=True)
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        shutil.rmtree(export_dir, ignore_errors=True)
        raise HTTPException(status_code=503, detail=str(e))

    return FileResponse(
        file_path,
        filename=file_path.name,
        media_type=EXPORT_MIME_TYPES[format],
        background=BackgroundTask(shutil.rmtree, export_dir, ignore_errors=True),
    )
