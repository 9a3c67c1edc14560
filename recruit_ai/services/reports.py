import os
from pathlib import Path
from typing import List, Tuple

import pandas as pd
from dotenv import load_dotenv

from recruit_ai.models.models import CandidateScore
from recruit_ai.utils.logging_config import get_logger

load_dotenv()
logger = get_logger(__name__)

REPORT_DIR = os.getenv("REPORT_DIR", "./reports")

REPORT_COLUMNS = [
    "candidate_id", "overall_score", "experience_score", "skills_score",
    "education_score", "location_score", "salary_score", "ai_analysis_score",
    "recommendations",
]


def scores_frame(scores: List[CandidateScore]) -> pd.DataFrame:
    data = [{
        "candidate_id": s.candidate_id or "",
        "overall_score": s.overall_score,
        "experience_score": round(s.experience_score, 2),
        "skills_score": round(s.skills_score, 2),
        "education_score": round(s.education_score, 2),
        "location_score": round(s.location_score, 2),
        "salary_score": round(s.salary_score, 2),
        "ai_analysis_score": round(s.ai_analysis_score, 2),
        "recommendations": "; ".join(s.recommendations),
    } for s in scores]
    df = pd.DataFrame(data, columns=REPORT_COLUMNS)
    return df.sort_values("overall_score", ascending=False, kind="stable").reset_index(drop=True)


def write_score_report(job_id: str, scores: List[CandidateScore], report_dir: str = None) -> Tuple[str, str]:
    """Write a ranked CSV and a top-10 Markdown summary for one job."""
    report_dir = report_dir or REPORT_DIR
    Path(report_dir).mkdir(parents=True, exist_ok=True)

    df = scores_frame(scores)
    csv_path = os.path.join(report_dir, f"{job_id}_scores.csv")
    df.to_csv(csv_path, index=False)

    md_lines = [f"# Job {job_id}: Top Candidates", ""]
    if len(df):
        md_lines += [
            "| Rank | Candidate | Overall | Experience | Skills | Location | Salary | AI |",
            "|---:|---|---:|---:|---:|---:|---:|---:|",
        ]
        for i, r in enumerate(df.head(10).itertuples(), start=1):
            md_lines.append(
                f"| {i} | {r.candidate_id} | {r.overall_score} | {r.experience_score:g} | "
                f"{r.skills_score:g} | {r.location_score:g} | {r.salary_score:g} | {r.ai_analysis_score:g} |"
            )
        flagged = df[df["recommendations"] != ""].head(5)
        if len(flagged):
            md_lines.append("\n---\nRecommendations:")
            for r in flagged.itertuples():
                md_lines.append(f"- **{r.candidate_id}**: {r.recommendations}")
    else:
        md_lines.append("> No candidates scored for this job.")

    md_path = os.path.join(report_dir, f"{job_id}_top.md")
    Path(md_path).write_text("\n".join(md_lines), encoding="utf-8")
    logger.info(f"Wrote score report for job {job_id}: {len(df)} candidates")
    return csv_path, md_path
