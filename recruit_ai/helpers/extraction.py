"""
Turn free-text model output into an ExtractedAnalysis.

Models are asked for JSON but often wrap it in prose or markdown fences, or
return nothing usable at all. ``extract_analysis`` never raises: when no JSON
object can be recovered it returns a degraded analysis flagged
REQUIRES_REVIEW so a recruiter looks at the candidate by hand.
"""
import json
import math
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from recruit_ai.models.models import ExtractedAnalysis, Recommendation
from recruit_ai.utils.logging_config import get_logger

logger = get_logger(__name__)

# Single source of truth for the score given to unparseable responses.
FALLBACK_SCORE = 70
DEFAULT_TRUNCATE_AT = 500

SCORE_FIELDS = (
    "overallScore", "experienceScore", "skillsScore",
    "locationScore", "educationScore", "salaryScore",
)
TEXT_FIELDS = (
    "name", "firstName", "lastName", "email", "phone", "location",
    "currentPosition", "currentCompany", "summary", "aiAnalysisSummary",
)

# snake_case keys other prompts have used for the same fields
KEY_SYNONYMS = {
    "experience_years": "yearsOfExperience",
    "years_experience": "yearsOfExperience",
    "current_position": "currentPosition",
    "current_company": "currentCompany",
    "overall_score": "overallScore",
    "key_strengths": "keyStrengths",
    "ai_analysis_summary": "aiAnalysisSummary",
}

_LABEL_PATTERNS = {
    "name": re.compile(r"name[:\s]+([^\n,]+)", re.I),
    "email": re.compile(r"email[:\s]+([^\s\n]+@[^\s\n]+)", re.I),
    "phone": re.compile(r"phone[:\s]+([0-9\-\+\(\)\s]+)", re.I),
}


def find_json_block(text: str) -> Optional[str]:
    """Substring from the first '{' to the last '}', if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < start:
        return None
    return text[start:end + 1]


def _as_text(x: Any) -> Optional[str]:
    if x is None:
        return None
    if isinstance(x, list):
        return " ".join([str(t).strip() for t in x if str(t).strip()]) or None
    if isinstance(x, dict):
        return json.dumps(x)
    return str(x).strip() or None


def _as_list(x: Any) -> List[str]:
    if x is None:
        return []
    if isinstance(x, dict):
        # {"allSkills": [...], "technical": [...]} style
        x = x.get("allSkills") or [v for vals in x.values() if isinstance(vals, list) for v in vals]
    if isinstance(x, str):
        parts = [p.strip() for p in x.replace(";", ",").split(",")]
        return [p for p in parts if p]
    if isinstance(x, list):
        return [str(t).strip() for t in x if str(t).strip()]
    return []


def as_number(x: Any) -> Optional[float]:
    if isinstance(x, list):
        x = x[0] if x else None
    if isinstance(x, bool) or x is None or x == "":
        return None
    if isinstance(x, str):
        m = re.search(r"-?\d+(\.\d+)?", x)
        if not m:
            return None
        x = m.group(0)
    try:
        n = float(x)
    except (TypeError, ValueError, OverflowError):
        return None
    # digit runs too long for a float come back as inf
    return n if math.isfinite(n) else None


def _as_recommendation(x: Any) -> Recommendation:
    if isinstance(x, str):
        token = x.strip().upper().replace(" ", "_")
        try:
            return Recommendation(token)
        except ValueError:
            pass
    return Recommendation.REQUIRES_REVIEW


def normalize_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce the loose shapes models return into the ExtractedAnalysis schema."""
    out = {KEY_SYNONYMS.get(k, k): v for k, v in data.items()}

    for key in TEXT_FIELDS:
        if key in out:
            out[key] = _as_text(out[key])
    if "experience" in out:
        out["experience"] = _as_text(out["experience"])

    for key in SCORE_FIELDS:
        if key in out:
            score = as_number(out[key])
            out[key] = None if score is None else max(0.0, min(100.0, score))
    if "yearsOfExperience" in out:
        out["yearsOfExperience"] = as_number(out["yearsOfExperience"])

    for key in ("skills", "keyStrengths", "concerns"):
        if key in out:
            out[key] = _as_list(out[key])

    out["recommendation"] = _as_recommendation(out.get("recommendation"))
    return out


def fallback_analysis(text: str, truncate_at: Optional[int] = DEFAULT_TRUNCATE_AT,
                      fallback_score: float = FALLBACK_SCORE) -> ExtractedAnalysis:
    summary = text if truncate_at is None else text[:truncate_at]
    labelled = {}
    for field, pattern in _LABEL_PATTERNS.items():
        m = pattern.search(text)
        if m:
            labelled[field] = m.group(1).strip()
    return ExtractedAnalysis(
        summary=summary or None,
        overall_score=fallback_score,
        recommendation=Recommendation.REQUIRES_REVIEW,
        **labelled,
    )


def extract_analysis(text: Optional[str], truncate_at: Optional[int] = DEFAULT_TRUNCATE_AT,
                     fallback_score: float = FALLBACK_SCORE) -> ExtractedAnalysis:
    text = text or ""
    block = find_json_block(text)
    if block is None:
        logger.warning("No JSON object in model response; using fallback analysis")
        return fallback_analysis(text, truncate_at, fallback_score)

    try:
        data = json.loads(block)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return ExtractedAnalysis.model_validate(normalize_fields(data))
    except (ValueError, RecursionError, ValidationError) as e:
        logger.warning(f"Could not parse model response as analysis: {e}")
        return fallback_analysis(text, truncate_at, fallback_score)
