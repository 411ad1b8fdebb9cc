import os
import tempfile

# Point the app at a throwaway database and no LLM keys before resume_api is imported
_TEST_DB_DIR = tempfile.mkdtemp(prefix="resume_api_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/test.db"
os.environ["GEMINI_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["LLM_PROVIDER"] = "auto"

import httpx
import pytest

from resume_api.config import Settings
from resume_api.services.structured_extractor import StructuredExtractor


SAMPLE_PDF = (
    b"%PDF-1.4\n"
    b"1 0 obj\n<< /Length 60 >>\nstream\n"
    b"BT /F1 12 Tf (John Doe) Tj (john@example.com) Tj ET\n"
    b"endstream\nendobj\n"
    b"%%EOF\n"
)

SAMPLE_DOCX = (
    b"PK\x03\x04\x14\x00\x00\x00word/document.xml"
    b'<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"><w:body>'
    b"<w:p><w:r><w:t>Jane Smith</w:t></w:r></w:p>"
    b"<w:p><w:r><w:t>jane.smith@example.com</w:t></w:r></w:p>"
    b"<w:p><w:r><w:t>Senior backend engineer with Python &amp; PostgreSQL experience.</w:t></w:r></w:p>"
    b"</w:body></w:document>"
)

LLM_RESULT = {
    "full_name": "John Doe",
    "email": "john@example.com",
    "phone": "+1 555 123 4567",
    "skills": ["Python", "SQL"],
    "experience_years": "4",
    "education": [
        {"degree": "B.Sc. Computer Science", "institution": "MIT", "year": "2015", "grade": "3.8 GPA"}
    ],
    "summary": "Backend engineer.",
    "certifications": [],
    "experience": [],
}


class FakeExtractor(StructuredExtractor):
    """Records calls and replays a canned result or error."""

    provider = "fake"

    def __init__(self, result=None, error=None):
        super().__init__()
        self.result = LLM_RESULT if result is None else result
        self.error = error
        self.pdf_calls = []
        self.text_calls = []

    async def extract_from_pdf(self, pdf_bytes):
        self.pdf_calls.append(pdf_bytes)
        if self.error:
            raise self.error
        return self.result

    async def extract_from_text(self, text):
        self.text_calls.append(text)
        if self.error:
            raise self.error
        return self.result


def make_http_client(content=SAMPLE_PDF, status_code=200):
    def handler(request):
        return httpx.Response(status_code, content=content)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def settings():
    return Settings(_env_file=None, gemini_api_key="", openai_api_key="")


@pytest.fixture
def fake_extractor():
    return FakeExtractor()
