"""
Resume Parsing Job Model - Bookkeeping row for every parse request.
"""
from enum import Enum
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum as SQLEnum
from ..database import Base


class ResumeParsingStatus(str, Enum):
    """Status of a resume parsing job."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ResumeParsingJob(Base):
    """
    Tracks one parse request from download to final record.
    The parsed CandidateInfo itself is not stored here; callers own that.
    """
    __tablename__ = "resume_parsing_jobs"

    id = Column(Integer, primary_key=True, index=True)

    # Source document
    resume_url = Column(String(2048), nullable=False)
    detected_type = Column(String(16), nullable=True)
    provider = Column(String(32), nullable=True)

    # Status tracking
    status = Column(
        SQLEnum(ResumeParsingStatus),
        default=ResumeParsingStatus.PENDING,
        nullable=False
    )
    candidate_name = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
