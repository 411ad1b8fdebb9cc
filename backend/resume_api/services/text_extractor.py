"""
Document text extraction: one capability interface, four variants, and the
per-file-type chains that combine them.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import List

from ..schemas.candidate import FileType, TextExtractionResult
from .docx_extractor import extract_text_from_docx, extract_text_with_python_docx
from .error_handler import TextExtractionError
from .file_detector import detect_file_type
from .pdf_extractor import extract_text_from_pdf, extract_text_with_pymupdf

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 10
_LETTER_RUN = re.compile(r"[a-zA-Z]{3,}")


class DocumentTextExtractor(ABC):
    """Turns document bytes into plain text. Implementations never raise."""

    name: str = "base"
    handles: FileType = FileType.UNKNOWN

    @abstractmethod
    def extract(self, data: bytes) -> str:
        pass


class PdfHeuristicExtractor(DocumentTextExtractor):
    name = "pdf-heuristic"
    handles = FileType.PDF

    def extract(self, data: bytes) -> str:
        return extract_text_from_pdf(data)


class PdfLibraryExtractor(DocumentTextExtractor):
    name = "pdf-pymupdf"
    handles = FileType.PDF

    def extract(self, data: bytes) -> str:
        return extract_text_with_pymupdf(data)


class DocxHeuristicExtractor(DocumentTextExtractor):
    name = "docx-heuristic"
    handles = FileType.DOCX

    def extract(self, data: bytes) -> str:
        return extract_text_from_docx(data)


class DocxLibraryExtractor(DocumentTextExtractor):
    name = "docx-python-docx"
    handles = FileType.DOCX

    def extract(self, data: bytes) -> str:
        return extract_text_with_python_docx(data)


class ExtractorChain:
    """Tries extractors in order and keeps the first usable result."""

    def __init__(self, extractors: List[DocumentTextExtractor]):
        self.extractors = extractors

    def extract(self, data: bytes) -> str:
        best = ""
        for extractor in self.extractors:
            text = extractor.extract(data)
            if len(text) > MIN_TEXT_LENGTH:
                logger.info(f"Text extracted with {extractor.name} ({len(text)} chars)")
                return text
            logger.info(f"{extractor.name} yielded {len(text)} chars, trying next extractor")
            if len(text) > len(best):
                best = text
        return best


def build_extractor_chain(file_type: FileType, use_library: bool = True) -> ExtractorChain:
    """Library variant first (when enabled), heuristic variant as fallback."""
    if file_type == FileType.PDF:
        library, heuristic = PdfLibraryExtractor(), PdfHeuristicExtractor()
    elif file_type == FileType.DOCX:
        library, heuristic = DocxLibraryExtractor(), DocxHeuristicExtractor()
    else:
        raise ValueError(f"No extractor chain for file type: {file_type}")

    return ExtractorChain([library, heuristic] if use_library else [heuristic])


def extract_text_from_document(data: bytes, use_library: bool = True) -> TextExtractionResult:
    """
    Extract text according to the detected file type.

    Unknown buffers are tried as PDF first and then as DOCX, since magic-byte
    detection misses some valid files (e.g. DOCX archives whose first entry is
    not under word/).
    """
    detected = detect_file_type(data)
    logger.info(f"Detected file type: {detected.value}")

    if detected in (FileType.PDF, FileType.DOCX):
        text = build_extractor_chain(detected, use_library).extract(data)
        return TextExtractionResult(text=text, file_type=detected, detected_type=detected)

    logger.info("Unknown file type, attempting PDF extraction as fallback...")
    text = build_extractor_chain(FileType.PDF, use_library).extract(data)
    if len(text) > MIN_TEXT_LENGTH:
        return TextExtractionResult(text=text, file_type=FileType.PDF, detected_type=detected)

    logger.info("PDF extraction failed, attempting DOCX extraction as fallback...")
    text = build_extractor_chain(FileType.DOCX, use_library).extract(data)
    return TextExtractionResult(text=text, file_type=FileType.UNKNOWN, detected_type=detected)


def validate_extracted_text(text: str) -> None:
    """Raise TextExtractionError unless the text looks like readable content."""
    if len(text) < MIN_TEXT_LENGTH:
        raise TextExtractionError(
            "Could not extract readable text from document - file may be image-based or corrupted. "
            "Please try uploading a text-based PDF or Word document."
        )

    if not _LETTER_RUN.search(text):
        raise TextExtractionError(
            "The document does not appear to contain readable text. Please ensure you are "
            "uploading a text-based document, not a scanned image."
        )
