"""ATS evaluation history: persist, list and fetch scored resume snapshots."""

import logging

from sqlalchemy.orm import Session

from database import AtsEvaluation as EvaluationRow
from models.responses import AtsEvaluation, MatchResult, ScoreBreakdown

logger = logging.getLogger(__name__)

RESUME_SNAPSHOT_CHARS = 32_000
STORED_KEYWORDS_LIMIT = 100


def to_schema(row: EvaluationRow) -> AtsEvaluation:
    return AtsEvaluation(
        id=row.id,
        user_id=row.user_id,
        job_id=row.job_id,
        resume_text=row.resume_text,
        score=row.score,
        breakdown=ScoreBreakdown(skills=row.skills_score, keywords=row.keywords_score),
        matched_skills=row.matched_skills or [],
        missing_skills=row.missing_skills or [],
        matched_keywords=row.matched_keywords or [],
        missing_keywords=row.missing_keywords or [],
        created_at=row.created_at,
    )


def save_evaluation(
    db: Session, user_id: str, job_id: str, resume_text: str, result: MatchResult
) -> EvaluationRow:
    row = EvaluationRow(
        user_id=user_id,
        job_id=job_id,
        resume_text=resume_text[:RESUME_SNAPSHOT_CHARS],
        score=result.score,
        skills_score=result.breakdown.skills,
        keywords_score=result.breakdown.keywords,
        matched_skills=result.matched_skills,
        missing_skills=result.missing_skills,
        matched_keywords=result.matched_keywords[:STORED_KEYWORDS_LIMIT],
        missing_keywords=result.missing_keywords[:STORED_KEYWORDS_LIMIT],
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Stored ATS evaluation %s (job %s, score %d)", row.id, job_id, row.score)
    return row


def list_evaluations(
    db: Session, user_id: str, job_id: str | None = None, limit: int = 20
) -> list[EvaluationRow]:
    query = db.query(EvaluationRow).filter(EvaluationRow.user_id == user_id)
    if job_id:
        query = query.filter(EvaluationRow.job_id == job_id)
    order = (EvaluationRow.created_at.desc(), EvaluationRow.id.desc())
    return query.order_by(*order).limit(limit).all()


def get_owned_evaluation(db: Session, evaluation_id: str, user_id: str) -> EvaluationRow | None:
    """Return the evaluation only if ``user_id`` owns it."""
    row = db.get(EvaluationRow, evaluation_id)
    if row is None or row.user_id != user_id:
        return None
    return row


def delete_evaluation(db: Session, row: EvaluationRow) -> None:
    db.delete(row)
    db.commit()
