"""Application tracker: create, list, update and annotate job applications."""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from database import Application, Job, new_id, utcnow
from models.application import JobSnapshot, Note, TimelineEvent
from models.requests import ApplicationCreateRequest, ApplicationUpdateRequest
from models.responses import ApplicationDetail, ApplicationSummary

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20
INITIAL_STATUS = "applied"
# Status an application is considered to move out of when it is created
CREATED_FROM_STATUS = "wishlist"


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _event(type_: str, **fields) -> dict:
    """Timeline entry as stored in the JSON column."""
    return {"id": new_id(), "at": utcnow().isoformat(), "type": type_, **fields}


def _snapshot(row: Application) -> JobSnapshot:
    return JobSnapshot(title=row.job_title, company=row.job_company, location=row.job_location)


def to_summary(row: Application) -> ApplicationSummary:
    return ApplicationSummary(
        id=row.id,
        job_id=row.job_id,
        job=_snapshot(row),
        status=row.status,
        applied_at=row.applied_at,
        updated_at=row.updated_at,
    )


def to_detail(row: Application) -> ApplicationDetail:
    return ApplicationDetail(
        id=row.id,
        job_id=row.job_id,
        job=_snapshot(row),
        status=row.status,
        applied_at=row.applied_at,
        applied_via=row.applied_via,
        cover_letter_text=row.cover_letter_text,
        timeline=[TimelineEvent(**e) for e in row.timeline or []],
        notes=[Note(**n) for n in row.notes or []],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def create_application(
    db: Session, user_id: str, job: Job, body: ApplicationCreateRequest
) -> Application:
    status = body.status or INITIAL_STATUS
    row = Application(
        user_id=user_id,
        job_id=job.id,
        job_title=job.title,
        job_company=job.company_name,
        job_location=job.location,
        status=status,
        applied_at=_naive_utc(body.applied_at) or utcnow(),
        applied_via=body.applied_via,
        cover_letter_text=body.cover_letter_text,
        timeline=[
            _event("created", text="Application created"),
            _event("status", from_status=CREATED_FROM_STATUS, to_status=status),
        ],
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("User %s tracked application %s (job %s)", user_id, row.id, job.id)
    return row


def list_applications(
    db: Session,
    user_id: str,
    statuses: list[str] | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[Application]:
    """The user's applications, most recently updated first."""
    query = db.query(Application).filter(Application.user_id == user_id)
    if statuses:
        query = query.filter(Application.status.in_(statuses))
    order = (Application.updated_at.desc(), Application.id.desc())
    return query.order_by(*order).limit(limit).all()


def get_owned_application(db: Session, application_id: str, user_id: str) -> Application | None:
    row = db.get(Application, application_id)
    if row is None or row.user_id != user_id:
        return None
    return row


def update_application(
    db: Session, row: Application, body: ApplicationUpdateRequest
) -> Application:
    """Apply the fields present in ``body``; a status change is logged on the timeline."""
    previous = row.status
    if body.status:
        row.status = body.status
    if body.applied_at:
        row.applied_at = _naive_utc(body.applied_at)
    if body.applied_via is not None:
        row.applied_via = body.applied_via
    if body.cover_letter_text is not None:
        row.cover_letter_text = body.cover_letter_text

    if body.status and body.status != previous:
        # JSON columns only persist on reassignment
        row.timeline = [
            *row.timeline,
            _event("status", from_status=previous, to_status=body.status),
        ]
    db.commit()
    db.refresh(row)
    return row


def add_note(db: Session, row: Application, text: str) -> Note:
    note = {"id": new_id(), "text": text, "created_at": utcnow().isoformat()}
    row.notes = [note, *row.notes]
    row.timeline = [*row.timeline, _event("note", text=text)]
    db.commit()
    return Note(**note)
