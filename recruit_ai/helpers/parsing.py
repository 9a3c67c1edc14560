import base64
import binascii
import io
import logging
import re
from pathlib import Path

from docx import Document
from pdfminer.high_level import extract_text as pdf_extract
from pdfminer.pdfpage import PDFPage

from recruit_ai.models.models import CamelModel
from recruit_ai.utils.exceptions import ProcessingError, ValidationError

logging.getLogger("pdfminer").setLevel(logging.ERROR)


class ParsedResume(CamelModel):
    file_name: str
    text: str
    page_count: int = 1


def clean_text(x: str) -> str:
    return re.sub(r"\s+", " ", x).strip()


def decode_base64(data: str) -> bytes:
    # data URLs arrive as "data:application/pdf;base64,...."
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid base64 resume content", field="data", cause=e) from e


def read_pdf(raw: bytes) -> ParsedResume:
    with io.BytesIO(raw) as fh:
        text = pdf_extract(fh)
        fh.seek(0)
        pages = sum(1 for _ in PDFPage.get_pages(fh))
    return ParsedResume(file_name="", text=text, page_count=pages)


def read_docx(raw: bytes) -> ParsedResume:
    doc = Document(io.BytesIO(raw))
    return ParsedResume(file_name="", text="\n".join([p.text for p in doc.paragraphs]))


def read_txt(raw: bytes) -> ParsedResume:
    return ParsedResume(file_name="", text=raw.decode("utf-8", errors="ignore"))


def decode_resume(file_name: str, data: str) -> ParsedResume:
    """Decode an uploaded resume (base64) into plain text."""
    raw = decode_base64(data)
    ext = Path(file_name).suffix.lower()
    try:
        if ext == ".pdf":
            parsed = read_pdf(raw)
        elif ext == ".docx":
            parsed = read_docx(raw)
        else:
            parsed = read_txt(raw)
    except Exception as e:
        raise ProcessingError(f"Could not extract text from {file_name}: {e}", file_name=file_name, cause=e) from e
    return parsed.model_copy(update={"file_name": file_name, "text": clean_text(parsed.text)})
