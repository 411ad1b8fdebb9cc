import pytest

from resume_api.schemas.candidate import FileType
from resume_api.services.error_handler import TextExtractionError
from resume_api.services.text_extractor import (
    DocumentTextExtractor,
    DocxHeuristicExtractor,
    DocxLibraryExtractor,
    ExtractorChain,
    PdfHeuristicExtractor,
    PdfLibraryExtractor,
    build_extractor_chain,
    extract_text_from_document,
    validate_extracted_text,
)

from conftest import SAMPLE_DOCX, SAMPLE_PDF


class StaticExtractor(DocumentTextExtractor):
    def __init__(self, name, text):
        self.name = name
        self.text = text
        self.calls = 0

    def extract(self, data):
        self.calls += 1
        return self.text


def test_chain_stops_at_first_usable_result():
    first = StaticExtractor("first", "short")
    second = StaticExtractor("second", "long enough to count as text")
    third = StaticExtractor("third", "never consulted")

    text = ExtractorChain([first, second, third]).extract(b"")

    assert text == "long enough to count as text"
    assert third.calls == 0


def test_chain_keeps_longest_partial_result():
    chain = ExtractorChain([StaticExtractor("a", "abc"), StaticExtractor("b", "abcdef")])

    assert chain.extract(b"") == "abcdef"


def test_build_chain_orders_library_before_heuristic():
    pdf_chain = build_extractor_chain(FileType.PDF)
    docx_chain = build_extractor_chain(FileType.DOCX)

    assert [type(e) for e in pdf_chain.extractors] == [PdfLibraryExtractor, PdfHeuristicExtractor]
    assert [type(e) for e in docx_chain.extractors] == [DocxLibraryExtractor, DocxHeuristicExtractor]


def test_build_chain_without_library_extractors():
    chain = build_extractor_chain(FileType.PDF, use_library=False)

    assert [type(e) for e in chain.extractors] == [PdfHeuristicExtractor]


def test_build_chain_rejects_unknown_type():
    with pytest.raises(ValueError):
        build_extractor_chain(FileType.UNKNOWN)


def test_pdf_document():
    result = extract_text_from_document(SAMPLE_PDF)

    assert result.file_type == FileType.PDF
    assert result.detected_type == FileType.PDF
    assert "John Doe" in result.text


def test_docx_document():
    result = extract_text_from_document(SAMPLE_DOCX)

    assert result.file_type == FileType.DOCX
    assert result.detected_type == FileType.DOCX
    assert result.text.startswith("Jane Smith jane.smith@example.com")


def test_unknown_document_recovered_by_pdf_fallback():
    data = b"\x00\x00 BT (Jane Smith) Tj (Staff Engineer) Tj ET"

    result = extract_text_from_document(data)

    assert result.detected_type == FileType.UNKNOWN
    assert result.file_type == FileType.PDF
    assert "Jane Smith" in result.text


def test_zip_without_document_yields_no_text():
    result = extract_text_from_document(b"PK\x03\x04\x14\x00\x00\x00")

    assert result.detected_type == FileType.UNKNOWN
    assert result.file_type == FileType.UNKNOWN
    with pytest.raises(TextExtractionError, match="Could not extract readable text"):
        validate_extracted_text(result.text)


def test_validate_rejects_text_without_words():
    with pytest.raises(TextExtractionError, match="does not appear to contain readable text"):
        validate_extracted_text("12 34 56 78 90 12")


def test_validate_accepts_readable_text():
    validate_extracted_text("Jane Smith, Engineer")
