import pytest

from resume_api.schemas.candidate import FileType, RawDocument
from resume_api.services.error_handler import (
    DOWNLOAD_FAILED_MESSAGE,
    INSUFFICIENT_CONTENT_MESSAGE,
    RATE_LIMITED_MESSAGE,
    UNREADABLE_TEXT_MESSAGE,
    ExternalServiceError,
)
from resume_api.services.resume_parser import ResumeParsingPipeline

from conftest import SAMPLE_DOCX, SAMPLE_PDF, FakeExtractor, make_http_client


RESUME_URL = "https://files.example.com/resumes/john-doe.pdf"


async def test_pdf_goes_through_multimodal_path(settings, fake_extractor):
    pipeline = ResumeParsingPipeline(fake_extractor, settings, http_client=make_http_client(SAMPLE_PDF))

    outcome = await pipeline.parse_with_details(RESUME_URL)

    assert not outcome.failed
    assert outcome.detected_type == FileType.PDF
    assert outcome.provider == "fake"
    assert fake_extractor.pdf_calls == [SAMPLE_PDF]
    assert fake_extractor.text_calls == []

    candidate = outcome.response.candidateInfo
    assert candidate.full_name == "John Doe"
    assert candidate.email == "john@example.com"
    assert candidate.skills == ["Python", "SQL"]
    assert candidate.experience_years == "4"
    assert candidate.education == "B.Sc. Computer Science, MIT (2015 3.8 GPA)"
    assert "error" not in outcome.response.to_body()


async def test_docx_goes_through_text_path(settings, fake_extractor):
    pipeline = ResumeParsingPipeline(fake_extractor, settings)

    outcome = await pipeline.parse_document(RawDocument(data=SAMPLE_DOCX))

    assert not outcome.failed
    assert outcome.detected_type == FileType.DOCX
    assert fake_extractor.pdf_calls == []
    assert len(fake_extractor.text_calls) == 1
    assert "jane.smith@example.com" in fake_extractor.text_calls[0]
    assert "Python & PostgreSQL" in fake_extractor.text_calls[0]


async def test_text_analysis_mode_skips_pdf_upload(settings, fake_extractor):
    settings.analysis_mode = "text"
    pdf = SAMPLE_PDF + b"BT (Backend engineer building payment APIs in Python for ten years) Tj ET\n"
    pipeline = ResumeParsingPipeline(fake_extractor, settings)

    outcome = await pipeline.parse_document(RawDocument(data=pdf))

    assert not outcome.failed
    assert fake_extractor.pdf_calls == []
    assert len(fake_extractor.text_calls) == 1


async def test_unreadable_buffer_returns_sentinel(settings, fake_extractor):
    pipeline = ResumeParsingPipeline(fake_extractor, settings)

    response = (await pipeline.parse_document(RawDocument(data=b"\x00\x01\x02\x03\x04"))).response

    assert response.error == UNREADABLE_TEXT_MESSAGE
    assert response.candidateInfo.full_name == "Processing Failed"
    assert response.candidateInfo.summary == f"Error: {UNREADABLE_TEXT_MESSAGE}"
    assert response.candidateInfo.experience_years == "0"
    assert fake_extractor.pdf_calls == []
    assert fake_extractor.text_calls == []


async def test_short_text_is_insufficient_content(settings, fake_extractor):
    data = b"PK\x03\x04word/document.xml<w:document><w:t>Jane Smith CV</w:t></w:document>"
    pipeline = ResumeParsingPipeline(fake_extractor, settings)

    response = (await pipeline.parse_document(RawDocument(data=data))).response

    assert response.error == INSUFFICIENT_CONTENT_MESSAGE
    assert fake_extractor.text_calls == []


async def test_download_failure(settings, fake_extractor):
    pipeline = ResumeParsingPipeline(fake_extractor, settings, http_client=make_http_client(b"", 404))

    outcome = await pipeline.parse_with_details(RESUME_URL)

    assert outcome.failed
    assert outcome.detected_type is None
    assert outcome.response.error == DOWNLOAD_FAILED_MESSAGE


async def test_provider_failure_is_classified(settings):
    extractor = FakeExtractor(error=ExternalServiceError("OpenAI rate limit reached: slow down", "openai"))
    pipeline = ResumeParsingPipeline(extractor, settings, http_client=make_http_client(SAMPLE_PDF))

    response = await pipeline.parse(RESUME_URL)

    assert response.error == RATE_LIMITED_MESSAGE
    assert response.candidateInfo.full_name == "Processing Failed"


async def test_unexpected_failure_message_passes_through(settings):
    pipeline = ResumeParsingPipeline(
        FakeExtractor(error=RuntimeError("model exploded")),
        settings,
        http_client=make_http_client(SAMPLE_PDF),
    )

    response = await pipeline.parse(RESUME_URL)

    assert response.error == "model exploded"
    assert response.candidateInfo.summary == "Error: model exploded"


async def test_malformed_llm_output_falls_back_to_defaults(settings):
    pipeline = ResumeParsingPipeline(FakeExtractor(result={}), settings)

    response = (await pipeline.parse_document(RawDocument(data=SAMPLE_PDF))).response

    assert response.error is None
    assert response.candidateInfo.full_name == "Unknown Candidate"
    assert response.candidateInfo.summary == "Professional summary not available"


async def test_same_document_same_result(settings, fake_extractor):
    pipeline = ResumeParsingPipeline(fake_extractor, settings)
    document = RawDocument(data=SAMPLE_PDF)

    first = await pipeline.parse_document(document)
    second = await pipeline.parse_document(document)

    assert first.response.model_dump() == second.response.model_dump()


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"%PDF",
        b"PK",
        b"PK\x03\x04\x14\x00\x00\x00",
        b"\xff\xfe\xfd" * 100,
        b"plain text that is not a resume at all",
        SAMPLE_PDF[:20],
    ],
)
async def test_parse_document_never_raises(settings, fake_extractor, data):
    outcome = await ResumeParsingPipeline(fake_extractor, settings).parse_document(RawDocument(data=data))

    body = outcome.response.to_body()
    assert set(body) <= {"candidateInfo", "error"}
    assert body["candidateInfo"]["experience_years"] in ("0", "2", "4", "7", "10")
    if "error" in body:
        assert body["candidateInfo"]["full_name"] == "Processing Failed"


async def test_short_pdf_text_still_goes_to_the_model(settings, fake_extractor):
    # Local extraction is thin but the model reads the PDF itself
    data = b"%PDF-1.4\nBT (Jane Smith CV) Tj ET"
    pipeline = ResumeParsingPipeline(fake_extractor, settings)

    outcome = await pipeline.parse_document(RawDocument(data=data))

    assert not outcome.failed
    assert fake_extractor.pdf_calls == [data]
    assert fake_extractor.text_calls == []
