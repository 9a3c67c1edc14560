from fastapi import APIRouter

from recruit_ai.helpers.parsing import ParsedResume, decode_resume
from recruit_ai.models.models import CamelModel
from recruit_ai.utils.exceptions import RecruitAIBaseException, map_to_http_exception

router = APIRouter(prefix="/resumes", tags=["resumes"])


class ResumeFile(CamelModel):
    file_name: str
    data: str


@router.post("/parse", response_model=ParsedResume)
async def parse_resume(file: ResumeFile):
    """Extract plain text from a base64-encoded PDF, DOCX or text resume"""
    try:
        return decode_resume(file.file_name, file.data)
    except RecruitAIBaseException as e:
        raise map_to_http_exception(e) from e
