from datetime import datetime

from pydantic import BaseModel

from models.application import ApplicationStatus, JobSnapshot, Note, TimelineEvent
from models.job import Company, RemoteKind, StoredJob


class ScoreBreakdown(BaseModel):
    skills: int = 0  # 0-60
    keywords: int = 0  # 0-40


class MatchResult(BaseModel):
    score: int = 0
    breakdown: ScoreBreakdown = ScoreBreakdown()
    matched_skills: list[str] = []
    missing_skills: list[str] = []
    matched_keywords: list[str] = []
    missing_keywords: list[str] = []


class RankedResume(BaseModel):
    label: str
    score: int
    breakdown: ScoreBreakdown
    missing_skills: list[str] = []


class AtsScoreResponse(BaseModel):
    job_id: str
    score: int
    breakdown: ScoreBreakdown
    matched_skills: list[str] = []
    missing_skills: list[str] = []
    matched_keywords: list[str] = []
    missing_keywords: list[str] = []
    recommendations: list[str] = []


class AtsEvaluateResponse(BaseModel):
    ats_score_id: str
    job_id: str
    score: int
    breakdown: ScoreBreakdown
    missing_skills: list[str] = []


class AtsCompareResponse(BaseModel):
    job_id: str
    results: list[RankedResume] = []


class AtsEvaluation(BaseModel):
    id: str
    user_id: str
    job_id: str
    resume_text: str
    score: int
    breakdown: ScoreBreakdown
    matched_skills: list[str] = []
    missing_skills: list[str] = []
    matched_keywords: list[str] = []
    missing_keywords: list[str] = []
    created_at: datetime


class AtsEvaluationList(BaseModel):
    items: list[AtsEvaluation] = []


class JobSearchResponse(BaseModel):
    items: list[StoredJob] = []
    next_cursor: str | None = None


class UserOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int
    user: UserOut | None = None


class JobSaveResponse(BaseModel):
    saved_at: datetime


class SavedJobSummary(BaseModel):
    id: str
    title: str
    company: Company
    location: str | None = None
    remote: RemoteKind | None = None
    posted_at: datetime | None = None
    skills_required: list[str] = []


class SavedJob(BaseModel):
    saved_at: datetime
    job: SavedJobSummary


class SavedJobList(BaseModel):
    items: list[SavedJob] = []


class ApplicationCreated(BaseModel):
    id: str


class ApplicationSummary(BaseModel):
    id: str
    job_id: str
    job: JobSnapshot
    status: ApplicationStatus
    applied_at: datetime | None = None
    updated_at: datetime


class ApplicationList(BaseModel):
    items: list[ApplicationSummary] = []


class ApplicationDetail(ApplicationSummary):
    applied_via: str | None = None
    cover_letter_text: str | None = None
    timeline: list[TimelineEvent] = []
    notes: list[Note] = []
    created_at: datetime


class ApplicationUpdated(BaseModel):
    id: str
    status: ApplicationStatus
    applied_at: datetime | None = None
    updated_at: datetime


class NoteCreated(BaseModel):
    note_id: str
    created_at: datetime
