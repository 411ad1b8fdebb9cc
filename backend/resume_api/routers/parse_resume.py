"""
Parse Resume Router - resume URL in, CandidateInfo out, plus parse job status
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..database import get_db
from ..models import ResumeParsingJob, ResumeParsingStatus
from ..schemas.candidate import ResumeParseRequest, ResumeParseResponse, FAILED_CANDIDATE_NAME
from ..schemas.job import ResumeParsingJobResponse
from ..services.error_handler import ConfigurationError, create_error_candidate_info
from ..services.resume_parser import ParseOutcome, ResumeParsingPipeline
from ..services.structured_extractor import StructuredExtractor, build_structured_extractor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/parse-resume", tags=["Resume Parsing"])

STUCK_JOB_SECONDS = 300


# ============================================================================
# Dependencies
# ============================================================================

def get_structured_extractor(request: Request) -> StructuredExtractor:
    """The extractor built at start-up; built on demand if configuration arrived later."""
    extractor = getattr(request.app.state, "structured_extractor", None)
    if extractor is not None:
        return extractor

    try:
        extractor = build_structured_extractor(get_settings())
    except ConfigurationError as e:
        logger.error(f"Resume parsing is not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
    request.app.state.structured_extractor = extractor
    return extractor


def get_resume_pipeline(
    extractor: StructuredExtractor = Depends(get_structured_extractor)
) -> ResumeParsingPipeline:
    return ResumeParsingPipeline(extractor, get_settings())


# ============================================================================
# Helper Functions
# ============================================================================

def _error_response(error_message: str, candidate_name: str = FAILED_CANDIDATE_NAME) -> JSONResponse:
    response = ResumeParseResponse(
        candidateInfo=create_error_candidate_info(error_message, full_name=candidate_name),
        error=error_message,
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=response.to_body())


async def _start_job(db: AsyncSession, resume_url: str, provider: str) -> Optional[ResumeParsingJob]:
    try:
        job = ResumeParsingJob(
            resume_url=resume_url[:2048],
            provider=provider,
            status=ResumeParsingStatus.PROCESSING,
            started_at=datetime.now(timezone.utc),
        )
        db.add(job)
        await db.commit()
        await db.refresh(job)
        return job
    except SQLAlchemyError as e:
        # Bookkeeping must never block parsing
        logger.warning(f"Could not create resume parsing job: {e}")
        await db.rollback()
        return None


async def _finish_job(db: AsyncSession, job: Optional[ResumeParsingJob], outcome: ParseOutcome) -> None:
    if job is None:
        return
    try:
        job.detected_type = outcome.detected_type.value if outcome.detected_type else None
        job.completed_at = datetime.now(timezone.utc)
        if outcome.failed:
            job.status = ResumeParsingStatus.FAILED
            job.error_message = outcome.response.error
        else:
            job.status = ResumeParsingStatus.COMPLETED
            job.candidate_name = outcome.response.candidateInfo.full_name[:255]
        await db.commit()
    except SQLAlchemyError as e:
        logger.warning(f"Could not update resume parsing job {job.id}: {e}")
        await db.rollback()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============================================================================
# Endpoints
# ============================================================================

@router.post("")
async def parse_resume(
    request: Request,
    pipeline: ResumeParsingPipeline = Depends(get_resume_pipeline),
    db: AsyncSession = Depends(get_db)
):
    """
    Parse the resume at `resumeUrl` into a CandidateInfo record.

    Always answers 200 with `{candidateInfo, error?}`; on failure candidateInfo
    is a "Processing Failed" record and `error` carries a user-facing message.
    """
    try:
        body = await request.json()
        payload = ResumeParseRequest.model_validate(body)
    except (ValueError, ValidationError) as e:
        logger.error(f"Invalid JSON in request body: {e}")
        return _error_response("Invalid request format")

    resume_url = (payload.resumeUrl or "").strip()
    if not resume_url:
        logger.error("No resume URL provided")
        return _error_response("Resume URL is required", "Missing URL")

    job = await _start_job(db, resume_url, pipeline.extractor.provider)
    outcome = await pipeline.parse_with_details(resume_url)
    await _finish_job(db, job, outcome)

    return JSONResponse(status_code=status.HTTP_200_OK, content=outcome.response.to_body())


@router.get("/jobs", response_model=List[ResumeParsingJobResponse])
async def list_parse_jobs(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """Most recent parse jobs, newest first."""
    result = await db.execute(
        select(ResumeParsingJob)
        .order_by(ResumeParsingJob.created_at.desc(), ResumeParsingJob.id.desc())
        .limit(limit)
    )
    return result.scalars().all()


@router.get("/jobs/{job_id}", response_model=ResumeParsingJobResponse)
async def get_parse_job(
    job_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Status of one parse job. Jobs stuck in PROCESSING for over 5 minutes are marked failed."""
    job = await db.get(ResumeParsingJob, job_id)

    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found"
        )

    started_at = _as_utc(job.started_at)
    if job.status == ResumeParsingStatus.PROCESSING and started_at:
        elapsed = datetime.now(timezone.utc) - started_at
        if elapsed.total_seconds() > STUCK_JOB_SECONDS:
            job.status = ResumeParsingStatus.FAILED
            job.error_message = "Job timed out (stuck in processing)."
            job.completed_at = datetime.now(timezone.utc)
            await db.commit()

    return job
