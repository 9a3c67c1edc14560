import os
import time
from collections import deque
from typing import Callable, List, Optional, TypedDict

from dotenv import load_dotenv
from langgraph.graph import StateGraph, END
from pydantic import Field

from recruit_ai.helpers.extraction import as_number, extract_analysis
from recruit_ai.helpers.prompts import build_analysis_prompt
from recruit_ai.models.models import (
    CamelModel, CandidateProfile, CandidateScore, ExtractedAnalysis, JobProfile, ScoringWeights,
)
from recruit_ai.services import providers
from recruit_ai.services.aggregator import score_candidate
from recruit_ai.utils.exceptions import RateLimitError, RecruitAIBaseException
from recruit_ai.utils.logging_config import PerformanceMonitor, get_logger

load_dotenv()
logger = get_logger(__name__)

BULK_DELAY_SECONDS = float(os.getenv("BULK_DELAY_SECONDS", "1.2"))


class RateLimiter:
    """Sliding-window call budget for one provider account."""

    def __init__(self, max_calls: int = 100, window_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self.clock = clock
        self._calls = deque()

    def try_acquire(self) -> bool:
        now = self.clock()
        while self._calls and self._calls[0] <= now - self.window_seconds:
            self._calls.popleft()
        if len(self._calls) >= self.max_calls:
            return False
        self._calls.append(now)
        return True

    def acquire(self) -> None:
        if not self.try_acquire():
            raise RateLimitError(
                "Provider rate limit exceeded",
                limit=self.max_calls, window=f"{self.window_seconds:g}s",
            )


class ResumeInput(CamelModel):
    file_name: str
    file_content: str


class BulkItemResult(CamelModel):
    file_name: str
    success: bool
    analysis: Optional[ExtractedAnalysis] = None
    score: Optional[CandidateScore] = None
    error: Optional[str] = None


class BulkAnalysisResult(CamelModel):
    total_processed: int
    successful: int
    failed: int
    results: List[BulkItemResult] = Field(default_factory=list)


def profile_from_analysis(analysis: ExtractedAnalysis) -> CandidateProfile:
    """Map a parsed model response onto the scoring input for a candidate."""
    extra = analysis.model_extra or {}
    return CandidateProfile(
        years_of_experience=analysis.years_of_experience or 0,
        skills=analysis.skills,
        location=analysis.location or "",
        desired_salary_min=as_number(extra.get("desiredSalaryMin")),
        desired_salary_max=as_number(extra.get("desiredSalaryMax")),
        education=extra.get("education"),
        ai_score=analysis.overall_score,
    )


# LangGraph state and nodes
class AnalysisState(TypedDict, total=False):
    resume_text: str
    job: Optional[JobProfile]
    weights: Optional[ScoringWeights]
    provider_config: providers.ProviderConfig
    prompt: str
    response_text: str
    analysis: ExtractedAnalysis
    score: Optional[CandidateScore]


def node_prompt(state: AnalysisState):
    return {"prompt": build_analysis_prompt(state["resume_text"], state.get("job"), state.get("weights"))}


def node_generate(state: AnalysisState):
    # provider failures propagate; the caller decides whether to retry
    resp = providers.generate_text(state["prompt"], state["provider_config"])
    return {"response_text": resp.text}


def node_extract(state: AnalysisState):
    return {"analysis": extract_analysis(state.get("response_text", ""))}


def node_score(state: AnalysisState):
    job = state.get("job")
    if job is None:
        return {"score": None}
    candidate = profile_from_analysis(state["analysis"])
    return {"score": score_candidate(candidate, job, state.get("weights"))}


def build_graph():
    g = StateGraph(AnalysisState)
    g.add_node("build_prompt", node_prompt)
    g.add_node("generate", node_generate)
    g.add_node("extract", node_extract)
    g.add_node("score_candidate", node_score)
    g.set_entry_point("build_prompt")
    g.add_edge("build_prompt", "generate")
    g.add_edge("generate", "extract")
    g.add_edge("extract", "score_candidate")
    g.add_edge("score_candidate", END)
    return g.compile()


def run_sequential(state: AnalysisState) -> AnalysisState:
    out = dict(state)
    for node in (node_prompt, node_generate, node_extract, node_score):
        out.update(node(out))
    return out


def analyze_resume(
    resume_text: str,
    config: providers.ProviderConfig,
    job: Optional[JobProfile] = None,
    weights: Optional[ScoringWeights] = None,
) -> AnalysisState:
    return run_sequential({
        "resume_text": resume_text,
        "job": job,
        "weights": weights,
        "provider_config": config,
    })


def bulk_analyze(
    resumes: List[ResumeInput],
    job: JobProfile,
    config: providers.ProviderConfig,
    weights: Optional[ScoringWeights] = None,
    rate_limiter: Optional[RateLimiter] = None,
    delay_seconds: float = BULK_DELAY_SECONDS,
    sleep: Optional[Callable[[float], None]] = None,
) -> BulkAnalysisResult:
    """Analyze resumes one after another, pausing between provider calls.

    A failure on one resume is recorded against that file and the run moves
    on to the next one.
    """
    sleep = sleep or time.sleep
    results: List[BulkItemResult] = []

    with PerformanceMonitor(f"bulk analysis of {len(resumes)} resumes", logger, threshold_ms=60000):
        for i, resume in enumerate(resumes):
            try:
                if rate_limiter is not None:
                    rate_limiter.acquire()
                state = analyze_resume(resume.file_content, config, job, weights)
                results.append(BulkItemResult(
                    file_name=resume.file_name, success=True,
                    analysis=state["analysis"], score=state["score"],
                ))
            except RecruitAIBaseException as e:
                logger.error(f"Failed to process resume {resume.file_name}: {e.message}")
                results.append(BulkItemResult(file_name=resume.file_name, success=False, error=e.message))
            except Exception as e:
                logger.error(f"Unexpected error processing resume {resume.file_name}: {e}", exc_info=True)
                results.append(BulkItemResult(file_name=resume.file_name, success=False, error=str(e) or e.__class__.__name__))

            if i < len(resumes) - 1:
                sleep(delay_seconds)

    successful = sum(1 for r in results if r.success)
    return BulkAnalysisResult(
        total_processed=len(results),
        successful=successful,
        failed=len(results) - successful,
        results=results,
    )
