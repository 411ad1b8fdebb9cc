"""
Resume Parser Service - end-to-end pipeline from a resume URL to CandidateInfo.

download -> detect -> extract text -> validate -> (PDF bytes | normalized text)
-> LLM structured extraction -> transform.

`parse` never raises: every failure becomes a sentinel CandidateInfo plus a
user-facing error message, so the HTTP layer can always answer 200.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import Settings, get_settings
from ..schemas.candidate import (
    CandidateInfo,
    FileType,
    RawDocument,
    ResumeParseResponse,
    TextExtractionResult,
)
from .candidate_transformer import transform_to_candidate_info
from .document_fetcher import download_document
from .error_handler import (
    InsufficientContentError,
    ResumeProcessingError,
    create_error_candidate_info,
    get_user_friendly_error_message,
)
from .structured_extractor import StructuredExtractor
from .text_extractor import extract_text_from_document, validate_extracted_text
from .text_normalizer import preprocess_resume_text

logger = logging.getLogger(__name__)

_HAS_PHONE = re.compile(r"\d{3,}")
_HAS_NAME = re.compile(r"[A-Z][a-z]+\s+[A-Z][a-z]+")
_HAS_SKILLS = re.compile(r"(?:HTML|CSS|JavaScript|React|Angular|Python|Java|Node)", re.I)


@dataclass
class ParseOutcome:
    response: ResumeParseResponse
    detected_type: Optional[FileType] = None
    provider: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.response.error is not None


def _log_text_quality(extraction: TextExtractionResult) -> None:
    text = extraction.text
    has_email = "@" in text
    has_phone = bool(_HAS_PHONE.search(text))
    has_name = bool(_HAS_NAME.search(text))
    has_skills = bool(_HAS_SKILLS.search(text))

    logger.info(
        f"Text analysis: length={len(text)}, has_email={has_email}, has_phone={has_phone}, "
        f"has_name={has_name}, has_skills={has_skills}, file_type={extraction.file_type.value}"
    )
    logger.debug(f"Extracted text (first 2000 chars): {text[:2000]}")

    if len(text) < 50:
        logger.warning("Short text extracted, may not contain sufficient content")
    if not has_email and not has_phone:
        logger.warning("No contact information found in extracted text")
    if not has_name:
        logger.warning("No clear name pattern detected in extracted text")


class ResumeParsingPipeline:
    """One pipeline per request; holds no state between documents."""

    def __init__(
        self,
        extractor: StructuredExtractor,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.extractor = extractor
        self.settings = settings or get_settings()
        self.http_client = http_client

    async def fetch(self, resume_url: str) -> RawDocument:
        if self.http_client is not None:
            return await download_document(resume_url, self.http_client, self.settings.max_document_bytes)

        async with httpx.AsyncClient(timeout=self.settings.download_timeout_seconds) as client:
            return await download_document(resume_url, client, self.settings.max_document_bytes)

    def _use_multimodal(self, extraction: TextExtractionResult) -> bool:
        # Only bytes that really carry the %PDF signature are uploaded as PDFs
        return (
            extraction.detected_type == FileType.PDF
            and self.settings.analysis_mode.lower() != "text"
        )

    async def analyze_document(
        self,
        document: RawDocument,
        extraction: Optional[TextExtractionResult] = None
    ) -> CandidateInfo:
        """
        Run extraction and LLM analysis. Raises on any failure.

        The min_content_length gate applies to the text path only. On the
        multimodal path the model reads the PDF itself, so a short local
        extraction (text in compressed streams the heuristic cannot see) is
        only logged as a warning and the file is still sent.
        """
        if extraction is None:
            extraction = await self.extract_text(document)

        validate_extracted_text(extraction.text)
        _log_text_quality(extraction)

        if self._use_multimodal(extraction):
            logger.info(f"Sending PDF to {self.extractor.provider} (multimodal path)")
            raw = await self.extractor.extract_from_pdf(document.data)
        else:
            normalized = preprocess_resume_text(extraction.text)
            if len(normalized.strip()) < self.settings.min_content_length:
                raise InsufficientContentError(
                    f"Insufficient text content for analysis ({len(normalized.strip())} characters)"
                )
            logger.info(f"Sending {len(normalized)} chars to {self.extractor.provider} (text path)")
            raw = await self.extractor.extract_from_text(normalized)

        return transform_to_candidate_info(raw)

    async def extract_text(self, document: RawDocument) -> TextExtractionResult:
        # PyMuPDF and the regex heuristics are CPU bound
        return await asyncio.to_thread(
            extract_text_from_document, document.data, self.settings.use_library_extractors
        )

    async def parse_document(self, document: RawDocument) -> ParseOutcome:
        """Analyze already downloaded bytes. Never raises."""
        outcome = ParseOutcome(
            response=ResumeParseResponse(candidateInfo=CandidateInfo()),
            provider=self.extractor.provider,
        )
        try:
            extraction = await self.extract_text(document)
            outcome.detected_type = extraction.detected_type
            candidate_info = await self.analyze_document(document, extraction)
            outcome.response = ResumeParseResponse(candidateInfo=candidate_info)
        except Exception as e:
            outcome.response = self._failure_response(e)
        return outcome

    async def parse_with_details(self, resume_url: str) -> ParseOutcome:
        """Download and analyze. Never raises."""
        logger.info(f"Processing resume from URL: {resume_url}")
        try:
            document = await self.fetch(resume_url)
        except Exception as e:
            return ParseOutcome(response=self._failure_response(e), provider=self.extractor.provider)
        return await self.parse_document(document)

    async def parse(self, resume_url: str) -> ResumeParseResponse:
        outcome = await self.parse_with_details(resume_url)
        return outcome.response

    def _failure_response(self, error: Exception) -> ResumeParseResponse:
        if isinstance(error, ResumeProcessingError):
            logger.warning(f"Resume processing failed: {error}")
        else:
            logger.exception(f"Unexpected error while processing resume: {error}")

        message = get_user_friendly_error_message(error)
        return ResumeParseResponse(
            candidateInfo=create_error_candidate_info(message),
            error=message,
        )
