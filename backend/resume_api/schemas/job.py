from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from ..models.resume_job import ResumeParsingStatus


class ResumeParsingJobResponse(BaseModel):
    id: int
    resume_url: str
    status: ResumeParsingStatus
    detected_type: Optional[str] = None
    provider: Optional[str] = None
    candidate_name: Optional[str] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
