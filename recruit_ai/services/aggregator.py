import math
from typing import Any, Callable, List, Optional

from recruit_ai.models.models import (
    CandidateProfile, CandidateScore, DimensionResult, JobProfile,
    ScoreBreakdown, ScoringWeights, DEFAULT_WEIGHTS,
)
from recruit_ai.services.scoring import (
    education_score, experience_score, location_score, salary_score, skills_score,
)
from recruit_ai.utils.logging_config import get_logger, log_function_call

logger = get_logger(__name__)

AI_ANALYSIS_DEFAULT_SCORE = 50

DIMENSIONS = ("experience", "skills", "education", "location", "salary", "ai_analysis")

# (dimension, below this score, message)
RECOMMENDATION_RULES = (
    ("experience", 70, "Consider experience requirements"),
    ("skills", 60, "Skills gap identified"),
    ("location", 50, "Location mismatch"),
    ("salary", 60, "Salary expectations misaligned"),
)


def ai_analysis_score(stored_score: Optional[float]) -> DimensionResult:
    return DimensionResult(score=stored_score or AI_ANALYSIS_DEFAULT_SCORE, details="AI analysis score")


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def overall_score(breakdown: ScoreBreakdown, weights: ScoringWeights) -> int:
    # Always divided by 100, never by the weight total: weights that do not
    # sum to 100 scale the result.
    total = sum(
        getattr(breakdown, dim).score * (getattr(weights, dim, 0) or 0)
        for dim in DIMENSIONS
    )
    return round_half_up(total / 100)


def build_recommendations(breakdown: ScoreBreakdown) -> List[str]:
    return [
        message for dim, threshold, message in RECOMMENDATION_RULES
        if getattr(breakdown, dim).score < threshold
    ]


def aggregate(
    breakdown: ScoreBreakdown,
    weights: Optional[ScoringWeights] = None,
    candidate_id: Optional[str] = None,
    job_id: Optional[str] = None,
) -> CandidateScore:
    weights = weights or DEFAULT_WEIGHTS
    return CandidateScore(
        candidate_id=candidate_id,
        job_id=job_id,
        overall_score=overall_score(breakdown, weights),
        experience_score=breakdown.experience.score,
        skills_score=breakdown.skills.score,
        education_score=breakdown.education.score,
        location_score=breakdown.location.score,
        salary_score=breakdown.salary.score,
        ai_analysis_score=breakdown.ai_analysis.score,
        breakdown=breakdown,
        recommendations=build_recommendations(breakdown),
    )


@log_function_call
def score_candidate(
    candidate: CandidateProfile,
    job: JobProfile,
    weights: Optional[ScoringWeights] = None,
    candidate_id: Optional[str] = None,
    job_id: Optional[str] = None,
    education_rubric: Optional[Callable[[Any], DimensionResult]] = None,
) -> CandidateScore:
    """Score one candidate against one job.

    Runs each dimension comparison, takes the AI dimension from the
    candidate's stored AI score, then combines them with ``weights``
    (``DEFAULT_WEIGHTS`` when omitted).
    """
    breakdown = ScoreBreakdown(
        experience=experience_score(candidate.years_of_experience, job.min_experience, job.max_experience),
        skills=skills_score(candidate.skills, job.requirements),
        education=education_score(candidate.education, education_rubric),
        location=location_score(candidate.location, job.location, job.is_remote_ok),
        salary=salary_score(
            candidate.desired_salary_min, candidate.desired_salary_max,
            job.salary_min, job.salary_max,
        ),
        ai_analysis=ai_analysis_score(candidate.ai_score),
    )
    result = aggregate(breakdown, weights, candidate_id=candidate_id, job_id=job_id)
    logger.debug(f"Scored candidate {candidate_id or '-'} for job {job_id or '-'}: {result.overall_score}")
    return result
