from .resume_job import ResumeParsingJob, ResumeParsingStatus

__all__ = [
    # Resume parsing job
    "ResumeParsingJob", "ResumeParsingStatus"
]
