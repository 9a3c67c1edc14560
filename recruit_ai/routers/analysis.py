"""
Resume analysis endpoints: single and bulk AI analysis, offline extraction
of a model response, and provider housekeeping.
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from recruit_ai.helpers.extraction import DEFAULT_TRUNCATE_AT, extract_analysis
from recruit_ai.models.models import (
    CamelModel, CandidateScore, ExtractedAnalysis, JobProfile, ScoringWeights,
)
from recruit_ai.services import providers
from recruit_ai.services.pipeline import (
    BulkAnalysisResult, ResumeInput, analyze_resume, bulk_analyze,
)
from recruit_ai.utils.exceptions import RecruitAIBaseException, map_to_http_exception
from recruit_ai.utils.logging_config import get_logger, log_api_call

router = APIRouter(prefix="/analysis", tags=["analysis"])
logger = get_logger(__name__)


class AnalyzeRequest(CamelModel):
    resume_text: str
    job: Optional[JobProfile] = None
    weights: Optional[ScoringWeights] = None


class AnalyzeResponse(CamelModel):
    analysis: ExtractedAnalysis
    score: Optional[CandidateScore] = None
    provider: str
    model: str


class ExtractRequest(CamelModel):
    text: str = ""
    truncate_at: Optional[int] = DEFAULT_TRUNCATE_AT


class BulkRequest(CamelModel):
    resumes: List[ResumeInput]
    job: JobProfile
    weights: Optional[ScoringWeights] = None


class ProviderCheck(CamelModel):
    provider: str
    model: str
    success: bool


def _provider_config() -> providers.ProviderConfig:
    try:
        return providers.get_provider_config()
    except RecruitAIBaseException as e:
        raise map_to_http_exception(e) from e


@router.post("/", response_model=AnalyzeResponse)
@log_api_call("analyze_resume")
async def analyze(req: AnalyzeRequest):
    if not req.resume_text.strip():
        raise HTTPException(status_code=400, detail="Resume text is required")

    config = _provider_config()
    try:
        state = await run_in_threadpool(analyze_resume, req.resume_text, config, req.job, req.weights)
    except RecruitAIBaseException as e:
        raise map_to_http_exception(e) from e

    return AnalyzeResponse(
        analysis=state["analysis"],
        score=state.get("score"),
        provider=config.provider.value,
        model=config.model,
    )


@router.post("/extract", response_model=ExtractedAnalysis)
async def extract(req: ExtractRequest):
    """Parse an already generated model response without calling a provider"""
    return extract_analysis(req.text, truncate_at=req.truncate_at)


@router.post("/bulk", response_model=BulkAnalysisResult)
@log_api_call("bulk_analyze")
async def bulk(req: BulkRequest, request: Request):
    if not req.resumes:
        raise HTTPException(status_code=400, detail="Resumes array is required")

    config = _provider_config()
    limiter = getattr(request.app.state, "rate_limiter", None)
    return await run_in_threadpool(
        bulk_analyze, req.resumes, req.job, config, req.weights, limiter,
    )


@router.get("/models", response_model=Dict[str, List[str]])
async def list_models():
    return providers.AVAILABLE_MODELS


@router.post("/test", response_model=ProviderCheck)
async def check_configured_provider():
    config = _provider_config()
    ok = await run_in_threadpool(providers.check_provider, config)
    return ProviderCheck(provider=config.provider.value, model=config.model, success=ok)
