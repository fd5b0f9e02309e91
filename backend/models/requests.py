from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from models.application import ApplicationStatus
from models.job import JobPosting

MIN_RESUME_CHARS = 20
BCRYPT_MAX_BYTES = 72


def _check_password_bytes(value: str) -> str:
    # bcrypt refuses anything past 72 bytes, and non-ASCII characters take more than one
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


class AtsScoreRequest(BaseModel):
    job_id: str = Field(..., min_length=8, description="Id of a stored job")
    resume_text: str = Field(
        ..., min_length=MIN_RESUME_CHARS, description="Plain text resume content"
    )


class LabeledResume(BaseModel):
    label: str = Field(..., min_length=1)
    resume_text: str = Field(..., min_length=MIN_RESUME_CHARS)


class AtsCompareRequest(BaseModel):
    job_id: str = Field(..., min_length=8)
    resumes: list[LabeledResume] = Field(..., min_length=2, max_length=10)


class JobImportRequest(JobPosting):
    pass


class RegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=BCRYPT_MAX_BYTES)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=BCRYPT_MAX_BYTES)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=10)


class ApplicationCreateRequest(BaseModel):
    job_id: str = Field(..., min_length=8)
    status: ApplicationStatus | None = None
    applied_at: datetime | None = None
    applied_via: str | None = Field(None, max_length=120, description="e.g. company_site, referral")
    cover_letter_text: str | None = Field(None, max_length=20_000)


class ApplicationUpdateRequest(BaseModel):
    status: ApplicationStatus | None = None
    applied_at: datetime | None = None
    applied_via: str | None = Field(None, max_length=120)
    cover_letter_text: str | None = Field(None, max_length=20_000)


class NoteCreateRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
