"""Valve repair job endpoints: list, filter, create, edit, delete"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
from app.api.dependencies import get_job_service
from app.schemas import (
    JobPriority,
    JobStats,
    JobStatus,
    ValveJob,
    ValveJobCreate,
    ValveJobResponse,
    ValveJobUpdate,
)
from app.services.errors import JobNotFoundError, JobValidationError, StorageError
from app.services.job_service import JobService
from app.services.status_bands import derive_status_color, derive_status_label

router = APIRouter()


def to_response(job: ValveJob) -> ValveJobResponse:
    return ValveJobResponse(
        **job.model_dump(),
        status_label=derive_status_label(job.percent_complete),
        status_color=derive_status_color(job.percent_complete).value,
    )


@router.get("/jobs", response_model=List[ValveJobResponse])
def list_jobs(
    status: Optional[JobStatus] = None,
    priority: Optional[JobPriority] = None,
    search: Optional[str] = None,
    service: JobService = Depends(get_job_service),
):
    """List jobs, optionally filtered by status bucket, priority or text"""
    try:
        jobs = service.list_jobs(status=status, priority=priority, search=search)
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [to_response(job) for job in jobs]


@router.get("/jobs/stats", response_model=JobStats)
def get_stats(service: JobService = Depends(get_job_service)):
    try:
        return service.stats()
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/jobs", response_model=ValveJobResponse, status_code=201)
def create_job(data: ValveJobCreate, service: JobService = Depends(get_job_service)):
    try:
        job = service.create_job(data)
    except JobValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return to_response(job)


@router.get("/jobs/{job_id}", response_model=ValveJobResponse)
def get_job(job_id: str, service: JobService = Depends(get_job_service)):
    try:
        return to_response(service.get_job(job_id))
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.put("/jobs/{job_id}", response_model=ValveJobResponse)
def update_job(job_id: str, data: ValveJobUpdate, service: JobService = Depends(get_job_service)):
    try:
        return to_response(service.update_job(job_id, data))
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except JobValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.delete("/jobs/{job_id}")
def delete_job(job_id: str, service: JobService = Depends(get_job_service)):
    try:
        service.delete_job(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"message": "Job deleted successfully"}


@router.delete("/jobs")
def reset_jobs(service: JobService = Depends(get_job_service)):
    """Delete every job"""
    try:
        service.reset()
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"message": "All jobs have been deleted"}


@router.post("/sample-data", response_model=List[ValveJobResponse], status_code=201)
def load_sample_data(service: JobService = Depends(get_job_service)):
    try:
        jobs = service.load_sample_data()
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [to_response(job) for job in jobs]
