from .candidate import (
    CandidateInfo,
    EducationItem,
    ExperienceItem,
    FileType,
    RawDocument,
    ResumeExtraction,
    ResumeParseRequest,
    ResumeParseResponse,
    TextExtractionResult,
    EXPERIENCE_BUCKETS,
    DEFAULT_CANDIDATE_NAME,
    DEFAULT_SUMMARY,
    FAILED_CANDIDATE_NAME,
)
from .job import ResumeParsingJobResponse

__all__ = [
    "CandidateInfo", "EducationItem", "ExperienceItem", "FileType", "RawDocument",
    "ResumeExtraction", "ResumeParseRequest", "ResumeParseResponse", "TextExtractionResult",
    "EXPERIENCE_BUCKETS", "DEFAULT_CANDIDATE_NAME", "DEFAULT_SUMMARY", "FAILED_CANDIDATE_NAME",
    "ResumeParsingJobResponse",
]
