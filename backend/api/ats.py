import logging

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile
from sqlalchemy.orm import Session

from api.dependencies import get_current_user, get_db, limiter
from api.errors import bad_request, not_found
from config import settings
from database import User, is_valid_id
from models.job import StoredJob
from models.requests import AtsCompareRequest, AtsScoreRequest
from models.responses import (
    AtsCompareResponse,
    AtsEvaluateResponse,
    AtsEvaluation,
    AtsEvaluationList,
    AtsScoreResponse,
    MatchResult,
)
from services import ats_scorer, evaluation_store, job_store, pdf_parser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ats")

DISPLAY_KEYWORDS_LIMIT = 15
DISPLAY_MISSING_SKILLS_LIMIT = 15


def _load_job(db: Session, job_id: str) -> StoredJob:
    if not is_valid_id(job_id):
        raise bad_request("Invalid job id")
    row = job_store.get_job(db, job_id)
    if row is None:
        raise not_found("Job not found")
    return job_store.to_schema(row)


def _score_response(job_id: str, result: MatchResult) -> AtsScoreResponse:
    return AtsScoreResponse(
        job_id=job_id,
        score=result.score,
        breakdown=result.breakdown,
        matched_skills=result.matched_skills,
        missing_skills=result.missing_skills,
        matched_keywords=result.matched_keywords[:DISPLAY_KEYWORDS_LIMIT],
        missing_keywords=result.missing_keywords[:DISPLAY_KEYWORDS_LIMIT],
        recommendations=ats_scorer.build_recommendations(result),
    )


@router.post("/score", response_model=AtsScoreResponse)
@limiter.limit(settings.rate_limit)
def score(
    request: Request,
    body: AtsScoreRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    job = _load_job(db, body.job_id)
    resume_text = ats_scorer.validate_resume_text(body.resume_text)
    result = ats_scorer.score_resume(job, resume_text)
    return _score_response(body.job_id, result)


@router.post("/score/upload", response_model=AtsScoreResponse)
@limiter.limit(settings.rate_limit)
def score_upload(
    request: Request,
    job_id: str = Form(..., min_length=8),
    resume_file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    job = _load_job(db, job_id)

    content = resume_file.file.read()
    if not pdf_parser.is_pdf(resume_file.filename, content):
        raise bad_request("Only PDF files are accepted")
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise bad_request(f"File too large. Max size: {settings.max_upload_size_mb}MB")

    try:
        resume_text = pdf_parser.extract_text(content)
    except Exception as e:
        logger.warning("Could not parse uploaded PDF %s: %s", resume_file.filename, e)
        raise bad_request("Could not parse PDF file")
    if not resume_text.strip():
        raise bad_request("No text could be extracted from PDF")

    resume_text = ats_scorer.validate_resume_text(resume_text)
    result = ats_scorer.score_resume(job, resume_text)
    return _score_response(job_id, result)


@router.post("/evaluate", response_model=AtsEvaluateResponse, status_code=201)
@limiter.limit(settings.rate_limit)
def evaluate(
    request: Request,
    body: AtsScoreRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    job = _load_job(db, body.job_id)
    resume_text = ats_scorer.validate_resume_text(body.resume_text)
    result = ats_scorer.score_resume(job, resume_text)
    row = evaluation_store.save_evaluation(db, user.id, body.job_id, resume_text, result)
    return AtsEvaluateResponse(
        ats_score_id=row.id,
        job_id=body.job_id,
        score=result.score,
        breakdown=result.breakdown,
        missing_skills=result.missing_skills[:DISPLAY_MISSING_SKILLS_LIMIT],
    )


@router.post("/compare", response_model=AtsCompareResponse)
@limiter.limit(settings.rate_limit)
def compare(
    request: Request,
    body: AtsCompareRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    job = _load_job(db, body.job_id)
    resumes = [
        (r.label, ats_scorer.validate_resume_text(r.resume_text)) for r in body.resumes
    ]
    return AtsCompareResponse(job_id=body.job_id, results=ats_scorer.rank_resumes(job, resumes))


@router.get("/scores", response_model=AtsEvaluationList)
@limiter.limit(settings.rate_limit)
def list_scores(
    request: Request,
    job_id: str | None = None,
    limit: int = Query(20, ge=1, le=50),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if job_id and not is_valid_id(job_id):
        raise bad_request("Invalid job id")
    rows = evaluation_store.list_evaluations(db, user.id, job_id=job_id, limit=limit)
    return AtsEvaluationList(items=[evaluation_store.to_schema(r) for r in rows])


@router.get("/scores/{evaluation_id}", response_model=AtsEvaluation)
@limiter.limit(settings.rate_limit)
def get_score(
    request: Request,
    evaluation_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not is_valid_id(evaluation_id):
        raise bad_request("Invalid id")
    row = evaluation_store.get_owned_evaluation(db, evaluation_id, user.id)
    if row is None:
        raise not_found("Evaluation not found")
    return evaluation_store.to_schema(row)


@router.delete("/scores/{evaluation_id}", status_code=204)
@limiter.limit(settings.rate_limit)
def delete_score(
    request: Request,
    evaluation_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not is_valid_id(evaluation_id):
        raise bad_request("Invalid id")
    row = evaluation_store.get_owned_evaluation(db, evaluation_id, user.id)
    if row is None:
        raise not_found("Evaluation not found")
    evaluation_store.delete_evaluation(db, row)
    return Response(status_code=204)
