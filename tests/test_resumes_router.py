import base64
import io

import pytest
from docx import Document
from fastapi.testclient import TestClient

from recruit_ai.helpers.parsing import clean_text, decode_resume
from recruit_ai.utils.exceptions import ValidationError


def b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def docx_bytes(*paragraphs):
    doc = Document()
    for p in paragraphs:
        doc.add_paragraph(p)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def test_app():
    from fastapi import FastAPI
    from recruit_ai.routers import resumes

    app = FastAPI()
    app.include_router(resumes.router)
    return app


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


class TestDecodeResume:
    """Test cases for resume text extraction"""

    def test_plain_text(self):
        parsed = decode_resume("cv.txt", b64(b"Jane Doe\n\n  Python   developer"))
        assert parsed.file_name == "cv.txt"
        assert parsed.text == "Jane Doe Python developer"
        assert parsed.page_count == 1

    def test_data_url(self):
        parsed = decode_resume("cv.txt", "data:text/plain;base64," + b64(b"hello"))
        assert parsed.text == "hello"

    def test_docx(self):
        parsed = decode_resume("cv.DOCX", b64(docx_bytes("Jane Doe", "Senior Engineer")))
        assert parsed.text == "Jane Doe Senior Engineer"

    def test_invalid_base64(self):
        with pytest.raises(ValidationError):
            decode_resume("cv.txt", "not base64!!")

    def test_clean_text(self):
        assert clean_text("  a\tb\n\nc  ") == "a b c"


class TestResumesRouter:
    """Test cases for the resumes router"""

    def test_parse_resume(self, client):
        response = client.post("/resumes/parse", json={"fileName": "cv.txt", "data": b64(b"Jane Doe, Python")})

        assert response.status_code == 200
        assert response.json() == {"fileName": "cv.txt", "text": "Jane Doe, Python", "pageCount": 1}

    def test_parse_invalid_base64(self, client):
        response = client.post("/resumes/parse", json={"fileName": "cv.txt", "data": "%%%"})

        assert response.status_code == 400
        assert response.json()["detail"]["error"]["details"]["field"] == "data"

    def test_parse_corrupt_docx(self, client):
        response = client.post("/resumes/parse", json={"fileName": "cv.docx", "data": b64(b"not a zip file")})

        assert response.status_code == 500
        assert response.json()["detail"]["error"]["error_code"] == "PROCESSING_ERROR"
