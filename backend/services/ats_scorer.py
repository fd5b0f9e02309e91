"""Resume-to-job ATS scoring.

Score = skills sub-score (0-60) + keywords sub-score (0-40):
1. Skills: job's required skills found verbatim (phrase match) in the resume
2. Keywords: top-N frequent tokens of the job corpus found in the resume

Corpus = title + company name + location + HTML-stripped description.
Deterministic, no I/O.
"""

import logging
import math
from typing import Iterable

from models.job import JobPosting
from models.requests import MIN_RESUME_CHARS
from models.responses import MatchResult, RankedResume, ScoreBreakdown
from services.text_utils import contains_phrase, normalize, strip_html, top_keywords

logger = logging.getLogger(__name__)

SKILLS_WEIGHT = 60
KEYWORDS_WEIGHT = 40
TOP_KEYWORDS = 30

COMPARE_MISSING_SKILLS_LIMIT = 10
RECOMMENDATION_TERMS_LIMIT = 10


class InvalidInput(ValueError):
    """Resume text rejected before scoring."""


def validate_resume_text(resume_text: str | None) -> str:
    """Reject resumes too short to score meaningfully."""
    if resume_text is None or len(resume_text.strip()) < MIN_RESUME_CHARS:
        raise InvalidInput(
            f"Resume text must be at least {MIN_RESUME_CHARS} characters"
        )
    return resume_text


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (unlike built-in round)."""
    return int(math.floor(value + 0.5))


def _weighted_ratio(matched: int, total: int, weight: int) -> int:
    if total == 0:
        return 0
    return round_half_up(matched / total * weight)


def _partition(terms: Iterable[str], resume_norm: str) -> tuple[list[str], list[str]]:
    matched, missing = [], []
    for term in terms:
        if contains_phrase(resume_norm, term):
            matched.append(term)
        else:
            missing.append(term)
    return matched, missing


def build_corpus(job: JobPosting) -> str:
    company_name = job.company.name if job.company else ""
    return " ".join([
        job.title or "",
        company_name or "",
        job.location or "",
        strip_html(job.description_html),
    ])


def score_resume(
    job: JobPosting, resume_text: str, top_n: int = TOP_KEYWORDS
) -> MatchResult:
    """Score a resume against a job posting. Returns a 0-100 MatchResult."""
    resume_norm = f" {normalize(resume_text)} "

    job_skills = list(job.skills_required or [])
    matched_skills, missing_skills = _partition(job_skills, resume_norm)
    skills_score = _weighted_ratio(len(matched_skills), len(job_skills), SKILLS_WEIGHT)

    job_keywords = top_keywords(build_corpus(job), top_n)
    matched_keywords, missing_keywords = _partition(job_keywords, resume_norm)
    keywords_score = _weighted_ratio(
        len(matched_keywords), len(job_keywords), KEYWORDS_WEIGHT
    )

    score = max(0, min(100, skills_score + keywords_score))
    logger.debug(
        "ATS score %d (skills %d/%d, keywords %d/%d)",
        score, len(matched_skills), len(job_skills),
        len(matched_keywords), len(job_keywords),
    )

    return MatchResult(
        score=score,
        breakdown=ScoreBreakdown(skills=skills_score, keywords=keywords_score),
        matched_skills=matched_skills,
        missing_skills=missing_skills,
        matched_keywords=matched_keywords,
        missing_keywords=missing_keywords,
    )


def rank_resumes(
    job: JobPosting, resumes: Iterable[tuple[str, str]]
) -> list[RankedResume]:
    """Score (label, text) pairs against one job, best first.

    Ties keep input order.
    """
    ranked = []
    for label, text in resumes:
        result = score_resume(job, text)
        ranked.append(RankedResume(
            label=label,
            score=result.score,
            breakdown=result.breakdown,
            missing_skills=result.missing_skills[:COMPARE_MISSING_SKILLS_LIMIT],
        ))
    ranked.sort(key=lambda r: r.score, reverse=True)
    return ranked


def build_recommendations(result: MatchResult) -> list[str]:
    recommendations = []
    if result.missing_skills:
        recommendations.append(
            f"Add or demonstrate: {', '.join(result.missing_skills)}"
        )
    if result.missing_keywords:
        terms = result.missing_keywords[:RECOMMENDATION_TERMS_LIMIT]
        recommendations.append(f"Mention relevant terms like: {', '.join(terms)}")
    return recommendations
