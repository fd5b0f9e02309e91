"""Job posting schema shared by the jobs API and the ATS scorer."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl

RemoteKind = Literal["on_site", "remote", "hybrid"]
EmploymentType = Literal["full_time", "part_time", "contract", "internship"]
Seniority = Literal["intern", "junior", "mid", "senior", "lead"]


class Company(BaseModel):
    name: str = Field(..., min_length=1)
    site: HttpUrl | None = None


class Salary(BaseModel):
    currency: str | None = None
    min: float | None = None
    max: float | None = None


class JobSource(BaseModel):
    provider: str | None = None
    url: HttpUrl | None = None


class JobPosting(BaseModel):
    """A job as the scorer sees it. Only title, company, location,
    description and required skills feed into scoring."""
    title: str = Field(..., min_length=2)
    company: Company
    location: str | None = None
    remote: RemoteKind | None = None
    employment_type: EmploymentType | None = None
    seniority: Seniority | None = None
    posted_at: datetime | None = None
    salary: Salary | None = None
    skills_required: list[str] = []
    description_html: str | None = None
    source: JobSource | None = None


class StoredJob(JobPosting):
    id: str
    created_at: datetime
    updated_at: datetime
