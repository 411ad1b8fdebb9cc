"""
Error taxonomy for resume processing and mapping to user-facing messages.
"""
import logging
from typing import Optional

from ..schemas.candidate import CandidateInfo, FAILED_CANDIDATE_NAME

logger = logging.getLogger(__name__)


class ResumeProcessingError(Exception):
    """Base class for expected failures inside the parsing pipeline."""


class ConfigurationError(ResumeProcessingError):
    """No usable LLM provider is configured."""


class DocumentDownloadError(ResumeProcessingError):
    """The resume file could not be fetched."""


class TextExtractionError(ResumeProcessingError):
    """The document yielded no readable text."""


class InsufficientContentError(ResumeProcessingError):
    """Text was extracted but is too short to analyze."""


class ExternalServiceError(ResumeProcessingError):
    """An LLM provider call failed or returned nothing usable."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


DOWNLOAD_FAILED_MESSAGE = "Could not access the resume file. Please ensure the file was uploaded correctly."
UNREADABLE_TEXT_MESSAGE = "Unable to extract text from document. The file may be image-based or corrupted."
BILLING_LIMIT_MESSAGE = (
    "Resume analysis service is temporarily unavailable due to billing limits. "
    "Please contact support to resolve this issue."
)
SERVICE_UNAVAILABLE_MESSAGE = "Resume analysis service is temporarily unavailable. Please try again later."
INSUFFICIENT_CONTENT_MESSAGE = "Not enough readable content found in the resume file."
RATE_LIMITED_MESSAGE = "Resume analysis service is busy. Please try again in a few minutes."

# First match wins; patterns are compared against the lowercased error message
ERROR_MESSAGE_RULES = (
    (("failed to download document",), DOWNLOAD_FAILED_MESSAGE),
    (("could not extract readable text", "does not appear to contain readable text"), UNREADABLE_TEXT_MESSAGE),
    (("limit exceeded", "billing limit"), BILLING_LIMIT_MESSAGE),
    (("openai api", "gemini api", "authentication"), SERVICE_UNAVAILABLE_MESSAGE),
    (("insufficient text content",), INSUFFICIENT_CONTENT_MESSAGE),
    (("rate limit",), RATE_LIMITED_MESSAGE),
)


def get_user_friendly_error_message(error: object) -> str:
    """Translate an internal exception into a message safe to show users."""
    if not isinstance(error, BaseException):
        return "Unknown error occurred"

    original_message = str(error)
    logger.error(f"Processing error: {type(error).__name__}: {original_message}")

    lowered = original_message.lower()
    for patterns, message in ERROR_MESSAGE_RULES:
        if any(pattern in lowered for pattern in patterns):
            return message

    return original_message


def create_error_candidate_info(
    error_message: str,
    full_name: str = FAILED_CANDIDATE_NAME
) -> CandidateInfo:
    """Sentinel record returned in place of a parsed candidate."""
    return CandidateInfo(
        full_name=full_name,
        email="",
        phone="",
        skills=[],
        experience_years="0",
        education="",
        summary=f"Error: {error_message}",
    )
