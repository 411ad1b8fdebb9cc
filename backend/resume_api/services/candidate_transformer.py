"""
Maps raw LLM JSON onto the canonical CandidateInfo record.

Every function here is total: malformed input degrades to defaults instead of
raising.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from ..schemas.candidate import (
    CandidateInfo,
    EXPERIENCE_BUCKETS,
    DEFAULT_CANDIDATE_NAME,
    DEFAULT_SUMMARY,
)

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"\b[A-Z][a-z]+\s+[A-Z][a-z]+\b")
_EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_PHONE_PATTERN = re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))")


def extract_basic_contact_info(text: str) -> Dict[str, str]:
    """Regex fallback for name, email and phone anywhere in `text`."""
    contact_info: Dict[str, str] = {}

    name_match = _NAME_PATTERN.search(text)
    if name_match:
        contact_info["full_name"] = name_match.group(0)

    email_match = _EMAIL_PATTERN.search(text)
    if email_match:
        contact_info["email"] = email_match.group(0)

    phone_match = _PHONE_PATTERN.search(text)
    if phone_match:
        contact_info["phone"] = phone_match.group(0).strip()

    return contact_info


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        # Leading numeric prefix, so "5 years" reads as 5
        match = _LEADING_NUMBER.match(value)
        if match:
            return float(match.group(1))
    return None


def map_experience_to_bucket(experience: Any) -> str:
    """Band a years-of-experience value into one of "0", "2", "4", "7", "10"."""
    if isinstance(experience, str) and experience.strip() in EXPERIENCE_BUCKETS:
        return experience.strip()

    years = _to_number(experience)
    if years is None or years != years:  # NaN
        return "0"

    if years <= 1:
        return "0"   # Entry Level (0-1 years)
    if years <= 3:
        return "2"   # Junior (2-3 years)
    if years <= 6:
        return "4"   # Mid-level (4-6 years)
    if years <= 10:
        return "7"   # Senior (7-10 years)
    return "10"      # Expert (10+ years)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _education_entry(entry: Any) -> str:
    if isinstance(entry, str):
        return entry.strip()
    if isinstance(entry, dict):
        main = ", ".join(p for p in (_text(entry.get("degree")), _text(entry.get("institution"))) if p)
        tail = " ".join(p for p in (_text(entry.get("year")), _text(entry.get("grade"))) if p)
        if main and tail:
            return f"{main} ({tail})"
        if tail:
            return f"({tail})"
        return main
    return ""


def derive_education_string(education: Any) -> str:
    """Flatten education entries to "<degree>, <institution> (<year> <grade>)" joined by " | "."""
    if not education:
        return ""
    if isinstance(education, str):
        return education.strip()
    if isinstance(education, list):
        parts = [_education_entry(entry) for entry in education]
        return " | ".join(part for part in parts if part)
    return ""


def deduplicate_skills(skills: Any) -> List[str]:
    """Trimmed, non-empty skills; case-insensitive dedup keeping first-seen casing."""
    if not isinstance(skills, list):
        return []

    seen = set()
    result: List[str] = []
    for skill in skills:
        if not isinstance(skill, str):
            continue
        name = skill.strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        result.append(name)
    return result


def transform_to_candidate_info(final_data: Any) -> CandidateInfo:
    """Validate raw LLM output and fill defaults for anything missing."""
    if not isinstance(final_data, dict):
        final_data = {}

    basic_contact_info = extract_basic_contact_info(
        json.dumps(final_data, ensure_ascii=False, default=str)
    )

    raw_name = final_data.get("full_name")
    full_name = raw_name.strip() if isinstance(raw_name, str) else ""

    raw_email = final_data.get("email")
    email = raw_email.strip() if isinstance(raw_email, str) and "@" in raw_email else ""

    raw_phone = final_data.get("phone")
    phone = raw_phone.strip() if isinstance(raw_phone, str) else ""

    raw_summary = final_data.get("summary")
    summary = raw_summary.strip() if isinstance(raw_summary, str) else ""

    result = CandidateInfo(
        full_name=full_name or basic_contact_info.get("full_name") or DEFAULT_CANDIDATE_NAME,
        email=email or basic_contact_info.get("email", ""),
        phone=phone or basic_contact_info.get("phone", ""),
        skills=deduplicate_skills(final_data.get("skills")),
        experience_years=map_experience_to_bucket(final_data.get("experience_years")),
        education=derive_education_string(final_data.get("education")),
        summary=summary or DEFAULT_SUMMARY,
    )

    # Quality warnings only; a thin record is still a valid record
    if not result.skills:
        logger.warning("No skills extracted from resume")
    if result.full_name == DEFAULT_CANDIDATE_NAME:
        logger.warning("Could not extract candidate name")

    logger.info(
        f"Parsed candidate: name={result.full_name!r}, skills={len(result.skills)}, "
        f"experience={result.experience_years}"
    )
    return result
