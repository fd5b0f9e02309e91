"""Saved (bookmarked) jobs per user."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import Job, JobSave
from models.job import Company
from models.responses import SavedJob, SavedJobSummary

logger = logging.getLogger(__name__)

DEFAULT_SAVED_LIMIT = 20


def to_schema(save: JobSave, job: Job) -> SavedJob:
    return SavedJob(
        saved_at=save.created_at,
        job=SavedJobSummary(
            id=job.id,
            title=job.title,
            company=Company(name=job.company_name, site=job.company_site),
            location=job.location,
            remote=job.remote,
            posted_at=job.posted_at,
            skills_required=list(job.skills_required or []),
        ),
    )


def _find(db: Session, user_id: str, job_id: str) -> JobSave | None:
    return (
        db.query(JobSave)
        .filter(JobSave.user_id == user_id, JobSave.job_id == job_id)
        .one_or_none()
    )


def save_job(db: Session, user_id: str, job_id: str) -> JobSave:
    """Save ``job_id`` for the user; saving again returns the existing row."""
    existing = _find(db, user_id, job_id)
    if existing is not None:
        return existing

    row = JobSave(user_id=user_id, job_id=job_id)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent save of the same job
        db.rollback()
        return _find(db, user_id, job_id)
    db.refresh(row)
    logger.info("User %s saved job %s", user_id, job_id)
    return row


def unsave_job(db: Session, user_id: str, job_id: str) -> None:
    db.query(JobSave).filter(JobSave.user_id == user_id, JobSave.job_id == job_id).delete()
    db.commit()


def list_saved_jobs(
    db: Session, user_id: str, limit: int = DEFAULT_SAVED_LIMIT
) -> list[tuple[JobSave, Job]]:
    """Saved jobs, most recently saved first. Saves of deleted jobs drop out."""
    return (
        db.query(JobSave, Job)
        .join(Job, Job.id == JobSave.job_id)
        .filter(JobSave.user_id == user_id)
        .order_by(JobSave.created_at.desc(), JobSave.id.desc())
        .limit(limit)
        .all()
    )
