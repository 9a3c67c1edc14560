import pytest
from pydantic import ValidationError

from recruit_ai.models.models import (
    CandidateProfile,
    DimensionResult,
    JobProfile,
    ScoreBreakdown,
    ScoringWeights,
    DEFAULT_WEIGHTS,
)
from recruit_ai.services.aggregator import (
    aggregate,
    ai_analysis_score,
    build_recommendations,
    overall_score,
    round_half_up,
    score_candidate,
)


def make_breakdown(**scores):
    dims = ("experience", "skills", "education", "location", "salary", "ai_analysis")
    return ScoreBreakdown(**{
        d: DimensionResult(score=scores.get(d, 80), details=d) for d in dims
    })


@pytest.fixture
def candidate():
    return CandidateProfile(
        years_of_experience=5,
        skills=["Python", "SQL"],
        location="New York, NY",
        desired_salary_min=90000,
        desired_salary_max=110000,
    )


@pytest.fixture
def job():
    return JobProfile(
        title="Backend Engineer",
        min_experience=3,
        max_experience=7,
        requirements=["Python", "AWS"],
        location="New York",
        salary_min=80000,
        salary_max=120000,
    )


class TestOverallScore:
    """Test cases for the weighted overall score"""

    def test_uniform_scores_with_default_weights(self):
        assert overall_score(make_breakdown(), DEFAULT_WEIGHTS) == 80

    def test_weights_are_divided_by_one_hundred(self):
        """Weights summing to 50 halve the result instead of being renormalized"""
        weights = ScoringWeights(experience=10, skills=10, education=10, location=10, salary=5, ai_analysis=5)
        assert overall_score(make_breakdown(), weights) == 40

    def test_missing_weight_fields_contribute_nothing(self):
        weights = ScoringWeights(experience=100)
        breakdown = make_breakdown(experience=90, skills=0, salary=0)
        assert overall_score(breakdown, weights) == 90

    def test_rounds_half_up(self):
        weights = ScoringWeights(experience=1)
        assert overall_score(make_breakdown(experience=50), weights) == 1

    def test_round_half_up(self):
        assert round_half_up(76.25) == 76
        assert round_half_up(76.5) == 77
        assert round_half_up(2.5) == 3

    def test_overall_stays_in_range_for_percent_weights(self):
        dims = ("experience", "skills", "education", "location", "salary", "ai_analysis")
        assert overall_score(make_breakdown(**{d: 100 for d in dims}), DEFAULT_WEIGHTS) == 100
        assert overall_score(make_breakdown(**{d: 0 for d in dims}), DEFAULT_WEIGHTS) == 0

    def test_negative_weights_are_rejected(self):
        with pytest.raises(ValidationError):
            ScoringWeights(experience=-5)


class TestRecommendations:
    """Test cases for the recruiter hints"""

    def test_no_hints_for_strong_candidate(self):
        assert build_recommendations(make_breakdown()) == []

    def test_all_hints_in_fixed_order(self):
        breakdown = make_breakdown(experience=20, skills=0, location=30, salary=20)
        assert build_recommendations(breakdown) == [
            "Consider experience requirements",
            "Skills gap identified",
            "Location mismatch",
            "Salary expectations misaligned",
        ]

    def test_thresholds_are_strict(self):
        breakdown = make_breakdown(experience=70, skills=60, location=50, salary=60)
        assert build_recommendations(breakdown) == []


class TestAIAnalysisScore:
    """Test cases for the AI dimension"""

    def test_stored_score_is_used(self):
        assert ai_analysis_score(88).score == 88

    @pytest.mark.parametrize("stored", [None, 0])
    def test_missing_score_defaults_to_fifty(self, stored):
        assert ai_analysis_score(stored).score == 50


class TestScoreCandidate:
    """Test cases for end-to-end scoring of one candidate"""

    def test_end_to_end(self, candidate, job):
        result = score_candidate(candidate, job, candidate_id="c1", job_id="j1")

        assert result.experience_score == 100
        assert result.skills_score == 50
        assert result.education_score == 75
        assert result.location_score == 100
        assert result.salary_score == 100
        assert result.ai_analysis_score == 50
        # (2500 + 1500 + 1125 + 1000 + 1000 + 500) / 100 = 76.25
        assert result.overall_score == 76
        assert result.recommendations == ["Skills gap identified"]
        assert result.candidate_id == "c1"
        assert result.job_id == "j1"
        assert result.breakdown.skills.details == "1/2 skills matched"

    def test_flat_scores_mirror_breakdown(self, candidate, job):
        result = score_candidate(candidate, job)
        for dim in ("experience", "skills", "education", "location", "salary", "ai_analysis"):
            assert getattr(result, f"{dim}_score") == getattr(result.breakdown, dim).score

    def test_custom_weights(self, candidate, job):
        result = score_candidate(candidate, job, ScoringWeights(skills=100))
        assert result.overall_score == 50

    def test_stored_ai_score(self, candidate, job):
        result = score_candidate(candidate.model_copy(update={"ai_score": 90}), job)
        assert result.ai_analysis_score == 90
        assert result.overall_score == 80

    def test_is_deterministic(self, candidate, job):
        first = score_candidate(candidate, job)
        second = score_candidate(candidate, job)
        assert first.model_dump(exclude={"created_at"}) == second.model_dump(exclude={"created_at"})

    def test_aggregate_defaults_weights(self):
        result = aggregate(make_breakdown())
        assert result.overall_score == 80
        assert result.candidate_id is None


class TestProfiles:
    """Test cases for the scoring input models"""

    def test_candidate_accepts_camel_case(self):
        candidate = CandidateProfile.model_validate({
            "yearsOfExperience": 4,
            "desiredSalaryMin": 70000,
            "location": None,
        })
        assert candidate.years_of_experience == 4
        assert candidate.desired_salary_min == 70000
        assert candidate.location == ""

    def test_job_requirements_from_comma_string(self):
        job = JobProfile.model_validate({"requirements": "Python, AWS ,, Docker"})
        assert job.requirements == ["Python", "AWS", "Docker"]

    def test_job_null_experience_bounds_use_defaults(self):
        job = JobProfile.model_validate({"minExperience": None, "maxExperience": None})
        assert job.min_experience == 0
        assert job.max_experience == 10

    def test_job_null_bounds_still_score(self, candidate):
        job = JobProfile.model_validate({"minExperience": None, "maxExperience": None, "requirements": ["SQL"]})
        assert score_candidate(candidate, job).experience_score == 100

    def test_job_defaults(self):
        job = JobProfile()
        assert job.min_experience == 0
        assert job.max_experience == 10
        assert job.is_remote_ok is False
