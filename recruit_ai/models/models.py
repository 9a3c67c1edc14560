from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Recommendation(str, Enum):
    STRONG_MATCH = "STRONG_MATCH"
    GOOD_MATCH = "GOOD_MATCH"
    POTENTIAL_MATCH = "POTENTIAL_MATCH"
    POOR_MATCH = "POOR_MATCH"
    REQUIRES_REVIEW = "REQUIRES_REVIEW"


# -------- Scoring inputs --------
class CandidateProfile(CamelModel):
    years_of_experience: float = 0
    skills: List[str] = Field(default_factory=list)
    location: str = ""
    desired_salary_min: Optional[float] = None
    desired_salary_max: Optional[float] = None
    education: Any = None
    ai_score: Optional[float] = None

    @field_validator("years_of_experience", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator("location", mode="before")
    @classmethod
    def _none_is_blank(cls, v):
        return "" if v is None else v


class JobProfile(CamelModel):
    title: str = ""
    description: str = ""
    min_experience: float = 0
    max_experience: float = 10
    requirements: List[str] = Field(default_factory=list)
    location: str = ""
    is_remote_ok: bool = False
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None

    @field_validator("min_experience", "max_experience", mode="before")
    @classmethod
    def _none_is_default(cls, v, info):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("requirements", mode="before")
    @classmethod
    def _split_requirements(cls, v):
        # stored jobs keep requirements as one comma-separated string
        if v is None:
            return []
        if isinstance(v, str):
            return [r.strip() for r in v.split(",") if r.strip()]
        return v

    @field_validator("location", mode="before")
    @classmethod
    def _none_is_blank(cls, v):
        return "" if v is None else v


class ScoringWeights(CamelModel):
    """Percent weights per dimension; a field left out contributes nothing"""
    experience: float = Field(default=0, ge=0)
    skills: float = Field(default=0, ge=0)
    education: float = Field(default=0, ge=0)
    location: float = Field(default=0, ge=0)
    salary: float = Field(default=0, ge=0)
    ai_analysis: float = Field(default=0, ge=0)


DEFAULT_WEIGHTS = ScoringWeights(
    experience=25, skills=30, education=15, location=10, salary=10, ai_analysis=10
)


# -------- Scoring outputs --------
class DimensionResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    score: float
    details: str


class ScoreBreakdown(CamelModel):
    experience: DimensionResult
    skills: DimensionResult
    education: DimensionResult
    location: DimensionResult
    salary: DimensionResult
    ai_analysis: DimensionResult


class CandidateScore(CamelModel):
    candidate_id: Optional[str] = None
    job_id: Optional[str] = None
    overall_score: int
    experience_score: float
    skills_score: float
    education_score: float
    location_score: float
    salary_score: float
    ai_analysis_score: float
    breakdown: ScoreBreakdown
    recommendations: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)


# -------- Parsed model output --------
class ExtractedAnalysis(CamelModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    current_position: Optional[str] = None
    current_company: Optional[str] = None
    years_of_experience: Optional[float] = None
    skills: List[str] = Field(default_factory=list)
    experience: Optional[str] = None
    summary: Optional[str] = None
    ai_analysis_summary: Optional[str] = None
    overall_score: Optional[float] = None
    experience_score: Optional[float] = None
    skills_score: Optional[float] = None
    location_score: Optional[float] = None
    education_score: Optional[float] = None
    salary_score: Optional[float] = None
    recommendation: Recommendation = Recommendation.REQUIRES_REVIEW
    key_strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
