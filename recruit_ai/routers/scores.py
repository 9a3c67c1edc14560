from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from recruit_ai.models.models import (
    CamelModel, CandidateProfile, CandidateScore, JobProfile, ScoringWeights,
)
from recruit_ai.services.aggregator import score_candidate
from recruit_ai.services.db import scores_coll, to_dict
from recruit_ai.services.reports import write_score_report
from recruit_ai.utils.exceptions import DatabaseError, map_to_http_exception
from recruit_ai.utils.logging_config import get_logger, log_api_call

router = APIRouter(prefix="/scores", tags=["scores"])
logger = get_logger(__name__)


class ScoreRequest(CamelModel):
    candidate_id: Optional[str] = None
    job_id: Optional[str] = None
    candidate: CandidateProfile
    job: JobProfile
    weights: Optional[ScoringWeights] = None


class ReportPaths(CamelModel):
    job_id: str
    candidates: int
    csv_path: str
    markdown_path: str


@router.post("/", response_model=CandidateScore)
@log_api_call("score_candidate")
async def create_score(req: ScoreRequest):
    """Score a candidate against a job; the result is kept when both ids are given"""
    result = score_candidate(
        req.candidate, req.job, req.weights,
        candidate_id=req.candidate_id, job_id=req.job_id,
    )

    if req.candidate_id and req.job_id:
        try:
            await scores_coll.insert_one(result.model_dump())
        except Exception as e:
            raise map_to_http_exception(
                DatabaseError(f"Could not store score: {e}", operation="insert", collection="candidate_scores", cause=e)
            ) from e
        logger.info(f"Stored score {result.overall_score} for candidate {req.candidate_id} / job {req.job_id}")

    return result


@router.get("/", response_model=List[CandidateScore])
async def list_scores(
    candidate_id: Optional[str] = Query(None, alias="candidateId"),
    job_id: Optional[str] = Query(None, alias="jobId"),
    limit: int = Query(50, ge=1, le=200),
):
    """Most recent scores first, optionally filtered by candidate and/or job"""
    query = {}
    if candidate_id:
        query["candidate_id"] = candidate_id
    if job_id:
        query["job_id"] = job_id

    cursor = scores_coll.find(query).sort("created_at", -1).limit(limit)
    docs = await cursor.to_list(length=None)
    return [CandidateScore(**to_dict(doc)) for doc in docs]


@router.get("/latest", response_model=CandidateScore)
async def get_latest_score(
    candidate_id: str = Query(..., alias="candidateId"),
    job_id: str = Query(..., alias="jobId"),
):
    doc = await scores_coll.find_one(
        {"candidate_id": candidate_id, "job_id": job_id},
        sort=[("created_at", -1)],
    )
    if not doc:
        raise HTTPException(status_code=404, detail="No score found for this candidate and job")
    return CandidateScore(**to_dict(doc))


@router.post("/report/{job_id}", response_model=ReportPaths)
@log_api_call("score_report")
async def create_report(job_id: str):
    """Write the ranked CSV/Markdown report for every stored score of a job"""
    docs = await scores_coll.find({"job_id": job_id}).sort("created_at", -1).to_list(length=None)
    if not docs:
        raise HTTPException(status_code=404, detail="No scores found for this job")

    # keep only the newest score per candidate
    latest = {}
    for doc in docs:
        latest.setdefault(doc.get("candidate_id"), doc)
    scores = [CandidateScore(**to_dict(doc)) for doc in latest.values()]

    csv_path, md_path = write_score_report(job_id, scores)
    return ReportPaths(job_id=job_id, candidates=len(scores), csv_path=csv_path, markdown_path=md_path)
