"""
Per-dimension candidate/job comparisons.

Every function here is pure and total: missing numbers are treated as zero
and missing strings as blank, and each returns a DimensionResult on a 0-100
scale with a short human-readable rationale.
"""
from typing import Any, Callable, List, Optional

from recruit_ai.models.models import DimensionResult

EDUCATION_NEUTRAL_SCORE = 75


def _years(x) -> str:
    if float(x).is_integer():
        return str(int(x))
    return repr(x)


def experience_score(candidate_years: Optional[float], job_min: Optional[float], job_max: Optional[float]) -> DimensionResult:
    candidate_years = candidate_years or 0
    job_min = job_min or 0
    job_max = job_max or 0

    if job_min <= candidate_years <= job_max:
        return DimensionResult(score=100, details=f"Perfect experience match ({_years(candidate_years)} years)")
    if candidate_years > job_max:
        over = candidate_years - job_max
        return DimensionResult(score=max(60, 100 - over * 10), details=f"Over-qualified by {_years(over)} years")
    under = job_min - candidate_years
    return DimensionResult(score=max(20, 100 - under * 15), details=f"Under-qualified by {_years(under)} years")


def _skill_matches(skill: str, requirement: str) -> bool:
    s, r = skill.lower(), requirement.lower()
    return s in r or r in s


def skills_score(candidate_skills: Optional[List[str]], job_requirements: Optional[List[str]]) -> DimensionResult:
    candidate_skills = [s for s in (candidate_skills or []) if s]
    job_requirements = [r for r in (job_requirements or []) if r]

    if not candidate_skills:
        return DimensionResult(score=0, details="No skills listed")
    if not job_requirements:
        return DimensionResult(score=50, details="No specific requirements listed")

    matched = sum(
        1 for req in job_requirements
        if any(_skill_matches(skill, req) for skill in candidate_skills)
    )
    total = len(job_requirements)
    return DimensionResult(score=min(100, matched / total * 100), details=f"{matched}/{total} skills matched")


def _city(location: str) -> str:
    return location.lower().split(",")[0].strip()


def location_score(candidate_location: Optional[str], job_location: Optional[str], is_remote_ok: bool) -> DimensionResult:
    if not candidate_location or not job_location:
        return DimensionResult(score=50, details="Location information incomplete")
    if is_remote_ok:
        return DimensionResult(score=100, details="Remote work available")
    if _city(candidate_location) == _city(job_location):
        return DimensionResult(score=100, details="Perfect location match")
    # no distance credit outside of remote roles
    return DimensionResult(score=30, details="Location mismatch")


def salary_score(
    candidate_min: Optional[float],
    candidate_max: Optional[float],
    job_min: Optional[float],
    job_max: Optional[float],
) -> DimensionResult:
    if not candidate_min or not candidate_max or not job_min or not job_max:
        return DimensionResult(score=50, details="Salary information incomplete")

    candidate_mid = (candidate_min + candidate_max) / 2
    if job_min <= candidate_mid <= job_max:
        return DimensionResult(score=100, details="Salary expectations aligned")
    if candidate_mid < job_min:
        return DimensionResult(score=80, details="Candidate may accept lower salary")

    over_budget = (candidate_mid - job_max) / job_max * 100
    return DimensionResult(score=max(20, 100 - over_budget), details=f"Over budget by {over_budget:.1f}%")


def education_score(education: Any = None, rubric: Optional[Callable[[Any], DimensionResult]] = None) -> DimensionResult:
    """Neutral placeholder unless a rubric is supplied."""
    if rubric is not None:
        return rubric(education)
    return DimensionResult(score=EDUCATION_NEUTRAL_SCORE, details="Education assessment")
