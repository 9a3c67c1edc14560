import csv

from recruit_ai.models.models import CandidateProfile, JobProfile
from recruit_ai.services.aggregator import score_candidate
from recruit_ai.services.reports import scores_frame, write_score_report

JOB = JobProfile(title="Engineer", min_experience=2, max_experience=6, requirements=["Python"], location="Denver")


def make_score(candidate_id, years, skills):
    candidate = CandidateProfile(years_of_experience=years, skills=skills, location="Denver")
    return score_candidate(candidate, JOB, candidate_id=candidate_id, job_id="job-1")


class TestScoreReports:
    """Test cases for ranked score reports"""

    def test_frame_is_ranked(self):
        scores = [make_score("weak", 0, ["Excel"]), make_score("strong", 4, ["Python"])]

        df = scores_frame(scores)

        assert list(df["candidate_id"]) == ["strong", "weak"]
        assert df.loc[0, "overall_score"] > df.loc[1, "overall_score"]
        assert "Skills gap identified" in df.loc[1, "recommendations"]

    def test_write_report(self, tmp_path):
        scores = [make_score("weak", 0, ["Excel"]), make_score("strong", 4, ["Python"])]

        csv_path, md_path = write_score_report("job-1", scores, report_dir=str(tmp_path))

        assert csv_path == str(tmp_path / "job-1_scores.csv")
        with open(csv_path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [r["candidate_id"] for r in rows] == ["strong", "weak"]

        md = (tmp_path / "job-1_top.md").read_text(encoding="utf-8")
        assert md.startswith("# Job job-1: Top Candidates")
        assert "| 1 | strong |" in md
        assert "- **weak**:" in md

    def test_empty_report(self, tmp_path):
        csv_path, md_path = write_score_report("job-2", [], report_dir=str(tmp_path / "nested"))

        with open(md_path, encoding="utf-8") as f:
            assert "No candidates scored" in f.read()
        with open(csv_path, encoding="utf-8") as f:
            assert f.readline().startswith("candidate_id,overall_score")
