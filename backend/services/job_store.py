"""Job persistence: ORM rows <-> JobPosting schemas, lookup and search."""

from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import Job
from models.job import Company, JobPosting, JobSource, Salary, StoredJob

DEFAULT_SEARCH_LIMIT = 20


def _contains_pattern(text: str) -> str:
    """LIKE pattern matching ``text`` literally anywhere in the column."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def to_schema(row: Job) -> StoredJob:
    salary = None
    if row.salary_currency or row.salary_min is not None or row.salary_max is not None:
        salary = Salary(currency=row.salary_currency, min=row.salary_min, max=row.salary_max)
    source = None
    if row.source_provider or row.source_url:
        source = JobSource(provider=row.source_provider, url=row.source_url)
    return StoredJob(
        id=row.id,
        title=row.title,
        company=Company(name=row.company_name, site=row.company_site),
        location=row.location,
        remote=row.remote,
        employment_type=row.employment_type,
        seniority=row.seniority,
        posted_at=row.posted_at,
        salary=salary,
        skills_required=list(row.skills_required or []),
        description_html=row.description_html,
        source=source,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def create_job(db: Session, job: JobPosting) -> Job:
    row = Job(
        title=job.title,
        company_name=job.company.name,
        company_site=str(job.company.site) if job.company.site else None,
        location=job.location,
        remote=job.remote,
        employment_type=job.employment_type,
        seniority=job.seniority,
        posted_at=job.posted_at,
        salary_currency=job.salary.currency if job.salary else None,
        salary_min=job.salary.min if job.salary else None,
        salary_max=job.salary.max if job.salary else None,
        skills_required=list(job.skills_required),
        description_html=job.description_html,
        source_provider=job.source.provider if job.source else None,
        source_url=str(job.source.url) if job.source and job.source.url else None,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def get_job(db: Session, job_id: str) -> Job | None:
    return db.get(Job, job_id)


def search_jobs(
    db: Session,
    q: str | None = None,
    location: str | None = None,
    remote: str | None = None,
    seniority: str | None = None,
    employment_type: str | None = None,
    skills: list[str] | None = None,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[Job]:
    """Filter jobs, newest posting first.

    ``q`` matches title, company or location; every listed skill must be
    among the job's required skills (exact string).
    """
    query = db.query(Job)
    if q:
        pattern = _contains_pattern(q)
        query = query.filter(or_(
            Job.title.ilike(pattern, escape="\\"),
            Job.company_name.ilike(pattern, escape="\\"),
            Job.location.ilike(pattern, escape="\\"),
        ))
    if location:
        query = query.filter(Job.location.ilike(_contains_pattern(location), escape="\\"))
    if remote:
        query = query.filter(Job.remote == remote)
    if seniority:
        query = query.filter(Job.seniority == seniority)
    if employment_type:
        query = query.filter(Job.employment_type == employment_type)
    query = query.order_by(Job.posted_at.desc(), Job.id.desc())

    if not skills:
        return query.limit(limit).all()

    # JSON containment is not portable across backends; filter skills in Python
    wanted = set(skills)
    items = []
    for row in query:
        if wanted.issubset(row.skills_required or []):
            items.append(row)
            if len(items) >= limit:
                break
    return items
