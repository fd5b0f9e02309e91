from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from api.dependencies import get_current_user, get_db, limiter
from api.errors import bad_request, not_found
from config import settings
from database import Application, User, is_valid_id
from models.application import ApplicationStatus
from models.requests import (
    ApplicationCreateRequest,
    ApplicationUpdateRequest,
    NoteCreateRequest,
)
from models.responses import (
    ApplicationCreated,
    ApplicationDetail,
    ApplicationList,
    ApplicationUpdated,
    NoteCreated,
)
from services import application_store, job_store

router = APIRouter(prefix="/applications")


def _load_owned(db: Session, application_id: str, user: User) -> Application:
    if not is_valid_id(application_id):
        raise bad_request("Invalid id")
    row = application_store.get_owned_application(db, application_id, user.id)
    if row is None:
        raise not_found("Application not found")
    return row


@router.post("", response_model=ApplicationCreated, status_code=201)
@limiter.limit(settings.rate_limit)
def create_application(
    request: Request,
    body: ApplicationCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not is_valid_id(body.job_id):
        raise bad_request("Invalid job id")
    job = job_store.get_job(db, body.job_id)
    if job is None:
        raise not_found("Job not found")
    row = application_store.create_application(db, user.id, job, body)
    return ApplicationCreated(id=row.id)


@router.get("", response_model=ApplicationList)
@limiter.limit(settings.rate_limit)
def list_applications(
    request: Request,
    status: list[ApplicationStatus] | None = Query(None),
    limit: int = Query(application_store.DEFAULT_LIST_LIMIT, ge=1, le=50),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = application_store.list_applications(db, user.id, statuses=status, limit=limit)
    return ApplicationList(items=[application_store.to_summary(r) for r in rows])


@router.get("/{application_id}", response_model=ApplicationDetail)
@limiter.limit(settings.rate_limit)
def get_application(
    request: Request,
    application_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return application_store.to_detail(_load_owned(db, application_id, user))


@router.patch("/{application_id}", response_model=ApplicationUpdated)
@limiter.limit(settings.rate_limit)
def update_application(
    request: Request,
    application_id: str,
    body: ApplicationUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = application_store.update_application(db, _load_owned(db, application_id, user), body)
    return ApplicationUpdated(
        id=row.id, status=row.status, applied_at=row.applied_at, updated_at=row.updated_at
    )


@router.post("/{application_id}/notes", response_model=NoteCreated, status_code=201)
@limiter.limit(settings.rate_limit)
def add_note(
    request: Request,
    application_id: str,
    body: NoteCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    note = application_store.add_note(db, _load_owned(db, application_id, user), body.text)
    return NoteCreated(note_id=note.id, created_at=note.created_at)
