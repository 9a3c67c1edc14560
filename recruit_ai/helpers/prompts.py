from typing import Optional

from recruit_ai.models.models import JobProfile, ScoringWeights, DEFAULT_WEIGHTS

SYSTEM_PROMPT = "You are an expert recruitment assistant. Extract candidate information accurately and return valid JSON."

RESUME_ANALYSIS_PROMPT = """Analyze this resume for the position: {title}

**JOB REQUIREMENTS:**
{requirements}

**JOB DESCRIPTION:**
{description}

**SCORING PRIORITIES:**
- Experience: {w_experience:g}% weight
- Skills: {w_skills:g}% weight
- Location: {w_location:g}% weight
- Education: {w_education:g}% weight
- Salary: {w_salary:g}% weight

Please extract the following information and return it as a JSON object:

{{
  "firstName": "extracted first name",
  "lastName": "extracted last name",
  "email": "extracted email",
  "phone": "extracted phone",
  "location": "extracted location",
  "currentPosition": "current job title",
  "currentCompany": "current company",
  "yearsOfExperience": "estimated years as number",
  "skills": {{
    "allSkills": ["comprehensive list of all skills found"]
  }},
  "summary": "professional summary",
  "overallScore": "score 0-100 for job match based on weighted priorities",
  "experienceScore": "score 0-100",
  "skillsScore": "score 0-100",
  "locationScore": "score 0-100",
  "educationScore": "score 0-100",
  "salaryScore": "score 0-100",
  "keyStrengths": ["strength1", "strength2"],
  "concerns": ["concern1", "concern2"],
  "recommendation": "STRONG_MATCH, GOOD_MATCH, POTENTIAL_MATCH, or POOR_MATCH",
  "aiAnalysisSummary": "comprehensive 2-3 sentence summary of candidate fit for this specific role"
}}

Resume Content:
{resume}
"""

GENERIC_ANALYSIS_PROMPT = """Analyze this resume and extract key information including name, email, phone, skills, experience, and qualifications. Provide an overall score (0-100), key strengths, potential concerns and a recommendation (STRONG_MATCH, GOOD_MATCH, POTENTIAL_MATCH, or POOR_MATCH). Return the analysis in JSON format.

Resume:
{resume}
"""


def build_analysis_prompt(resume_text: str, job: Optional[JobProfile] = None,
                          weights: Optional[ScoringWeights] = None) -> str:
    if job is None:
        return GENERIC_ANALYSIS_PROMPT.format(resume=resume_text)

    weights = weights or DEFAULT_WEIGHTS
    return RESUME_ANALYSIS_PROMPT.format(
        title=job.title or "Unspecified role",
        requirements=", ".join(job.requirements) or "General requirements",
        description=job.description or "No description provided",
        w_experience=weights.experience,
        w_skills=weights.skills,
        w_location=weights.location,
        w_education=weights.education,
        w_salary=weights.salary,
        resume=resume_text,
    )
