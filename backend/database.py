"""
Database schema and connection management.

Uses SQLAlchemy over SQLite by default for users, jobs, saved jobs,
applications and ATS evaluations.
"""

import re
import secrets
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings

Base = declarative_base()

_ID_RE = re.compile(r"^[0-9a-f]{24}$")


def new_id() -> str:
    """24 hex chars, same shape as a Mongo ObjectId."""
    return secrets.token_hex(12)


def is_valid_id(value: str | None) -> bool:
    return bool(value) and bool(_ID_RE.match(value))


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """Registered account."""

    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=new_id)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)  # lower-cased
    password_hash = Column(String, nullable=False)
    token_version = Column(Integer, nullable=False, default=0)  # bump to revoke refresh tokens
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Job(Base):
    """Job posting."""

    __tablename__ = "jobs"

    id = Column(String(24), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    company_name = Column(String, nullable=False, index=True)
    company_site = Column(String)
    location = Column(String)
    remote = Column(String)  # on_site, remote, hybrid
    employment_type = Column(String)  # full_time, part_time, contract, internship
    seniority = Column(String)  # intern, junior, mid, senior, lead
    posted_at = Column(DateTime)
    salary_currency = Column(String)
    salary_min = Column(Float)
    salary_max = Column(Float)
    skills_required = Column(JSON, nullable=False, default=list)
    description_html = Column(Text)
    source_provider = Column(String)
    source_url = Column(String)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("ix_jobs_posted_at_id", "posted_at", "id"),)


class JobSave(Base):
    """A job bookmarked by a user. Saving twice keeps the first row."""

    __tablename__ = "job_saves"

    id = Column(String(24), primary_key=True, default=new_id)
    user_id = Column(String(24), ForeignKey("users.id"), nullable=False)
    job_id = Column(String(24), ForeignKey("jobs.id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "job_id", name="uq_job_saves_user_job"),
        Index("ix_job_saves_user_created", "user_id", "created_at"),
    )


class Application(Base):
    """A user's application to a job, tracked through its statuses."""

    __tablename__ = "applications"

    id = Column(String(24), primary_key=True, default=new_id)
    user_id = Column(String(24), ForeignKey("users.id"), nullable=False)
    job_id = Column(String(24), ForeignKey("jobs.id"), nullable=False, index=True)
    # Snapshot so the list still reads right if the job changes
    job_title = Column(String, nullable=False)
    job_company = Column(String, nullable=False)
    job_location = Column(String)
    status = Column(String, nullable=False, default="applied")
    applied_at = Column(DateTime)
    applied_via = Column(String)
    cover_letter_text = Column(Text)
    timeline = Column(JSON, nullable=False, default=list)  # oldest first
    notes = Column(JSON, nullable=False, default=list)  # newest first
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_applications_user_status_created", "user_id", "status", "created_at"),
    )


class AtsEvaluation(Base):
    """Persisted ATS score of one resume snapshot against one job."""

    __tablename__ = "ats_evaluations"

    id = Column(String(24), primary_key=True, default=new_id)
    user_id = Column(String(24), ForeignKey("users.id"), nullable=False, index=True)
    job_id = Column(String(24), ForeignKey("jobs.id"), nullable=False, index=True)
    resume_text = Column(Text, nullable=False)  # trimmed snapshot
    score = Column(Integer, nullable=False)
    skills_score = Column(Integer, nullable=False)
    keywords_score = Column(Integer, nullable=False)
    matched_skills = Column(JSON, nullable=False, default=list)
    missing_skills = Column(JSON, nullable=False, default=list)
    matched_keywords = Column(JSON, nullable=False, default=list)
    missing_keywords = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_ats_user_job_created", "user_id", "job_id", "created_at"),
    )


def create_db_engine(url: str):
    """
    Build an engine for the given URL.

    SQLite connections are shared across FastAPI's worker threads, and an
    in-memory database must stay on a single connection to survive.
    """
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = create_db_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def init_database(bind=None) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind or engine)
