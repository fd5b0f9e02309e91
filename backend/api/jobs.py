from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from api.dependencies import get_current_user, get_db, limiter
from api.errors import bad_request, not_found
from config import settings
from database import Job, User, is_valid_id
from models.job import EmploymentType, RemoteKind, Seniority, StoredJob
from models.requests import JobImportRequest
from models.responses import JobSaveResponse, JobSearchResponse, SavedJobList
from services import job_store, saved_jobs

router = APIRouter()


def _load_job(db: Session, job_id: str) -> Job:
    if not is_valid_id(job_id):
        raise bad_request("Invalid job id")
    row = job_store.get_job(db, job_id)
    if row is None:
        raise not_found("Job not found")
    return row


@router.get("/jobs/search", response_model=JobSearchResponse)
@limiter.limit(settings.rate_limit)
def search_jobs(
    request: Request,
    q: str | None = None,
    location: str | None = None,
    remote: RemoteKind | None = None,
    seniority: Seniority | None = None,
    employment_type: EmploymentType | None = None,
    skills: list[str] | None = Query(None),
    limit: int = Query(job_store.DEFAULT_SEARCH_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
):
    rows = job_store.search_jobs(
        db,
        q=q,
        location=location,
        remote=remote,
        seniority=seniority,
        employment_type=employment_type,
        skills=skills,
        limit=limit,
    )
    return JobSearchResponse(items=[job_store.to_schema(r) for r in rows])


@router.post("/jobs/import", response_model=StoredJob, status_code=201)
@limiter.limit(settings.rate_limit)
def import_job(
    request: Request,
    body: JobImportRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = job_store.create_job(db, body)
    return job_store.to_schema(row)


@router.get("/jobs/{job_id}", response_model=StoredJob)
@limiter.limit(settings.rate_limit)
def get_job(request: Request, job_id: str, db: Session = Depends(get_db)):
    return job_store.to_schema(_load_job(db, job_id))


@router.post("/jobs/{job_id}/save", response_model=JobSaveResponse, status_code=201)
@limiter.limit(settings.rate_limit)
def save_job(
    request: Request,
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _load_job(db, job_id)
    row = saved_jobs.save_job(db, user.id, job_id)
    return JobSaveResponse(saved_at=row.created_at)


@router.delete("/jobs/{job_id}/save", status_code=204)
@limiter.limit(settings.rate_limit)
def unsave_job(
    request: Request,
    job_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not is_valid_id(job_id):
        raise bad_request("Invalid job id")
    saved_jobs.unsave_job(db, user.id, job_id)
    return Response(status_code=204)


@router.get("/me/saved-jobs", response_model=SavedJobList)
@limiter.limit(settings.rate_limit)
def list_saved_jobs(
    request: Request,
    limit: int = Query(saved_jobs.DEFAULT_SAVED_LIMIT, ge=1, le=50),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = saved_jobs.list_saved_jobs(db, user.id, limit=limit)
    return SavedJobList(items=[saved_jobs.to_schema(save, job) for save, job in rows])
