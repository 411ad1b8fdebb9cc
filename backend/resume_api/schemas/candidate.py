"""
Candidate schemas - canonical parse output and the LLM response contract
"""
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, Field


EXPERIENCE_BUCKETS = ("0", "2", "4", "7", "10")

DEFAULT_CANDIDATE_NAME = "Unknown Candidate"
DEFAULT_SUMMARY = "Professional summary not available"
FAILED_CANDIDATE_NAME = "Processing Failed"

ExperienceBucket = Literal["0", "2", "4", "7", "10"]


class FileType(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    UNKNOWN = "unknown"


class RawDocument(BaseModel):
    """Downloaded resume bytes, alive for one parse request only."""
    data: bytes
    source_url: str = ""


class TextExtractionResult(BaseModel):
    text: str
    file_type: FileType
    detected_type: FileType = FileType.UNKNOWN


# ============================================================================
# Canonical Output
# ============================================================================

class CandidateInfo(BaseModel):
    full_name: str = DEFAULT_CANDIDATE_NAME
    email: str = ""
    phone: str = ""
    skills: List[str] = Field(default_factory=list)
    experience_years: ExperienceBucket = "0"
    education: str = ""
    summary: str = DEFAULT_SUMMARY


# ============================================================================
# LLM Response Contract
# ============================================================================

class EducationItem(BaseModel):
    degree: str
    institution: str
    year: str
    grade: str


class ExperienceItem(BaseModel):
    company: str
    position: str
    period: str
    duration: str


class ResumeExtraction(BaseModel):
    """Structured output requested from the LLM providers."""
    full_name: str
    email: str
    phone: str
    skills: List[str]
    experience_years: ExperienceBucket = Field(
        description=(
            "Experience level: 0=Entry Level (0-1 years), 2=Junior (2-3 years), "
            "4=Mid-level (4-6 years), 7=Senior (7-10 years), 10=Expert (10+ years)"
        )
    )
    education: List[EducationItem]
    summary: str
    certifications: List[str]
    experience: List[ExperienceItem]


# ============================================================================
# HTTP Request / Response
# ============================================================================

class ResumeParseRequest(BaseModel):
    resumeUrl: Optional[str] = None


class ResumeParseResponse(BaseModel):
    candidateInfo: CandidateInfo
    error: Optional[str] = None

    def to_body(self) -> dict:
        """JSON body with `error` omitted on success."""
        return self.model_dump(exclude_none=True)
