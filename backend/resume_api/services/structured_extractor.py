"""
Structured extraction contract shared by the LLM providers.

A ``StructuredExtractor`` turns either raw PDF bytes (multimodal path) or
normalized resume text (text path) into the raw JSON object described by
``RESUME_RESPONSE_SCHEMA``. Provider strategies live in ``openai_extractor``
and ``gemini_extractor``; ``build_structured_extractor`` picks one from the
settings.
"""
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict

from ..config import Settings
from ..schemas.candidate import EXPERIENCE_BUCKETS
from .error_handler import ConfigurationError

logger = logging.getLogger(__name__)


# ============================================================================
# Prompt
# ============================================================================

RESUME_PARSER_PROMPT = """You will be given a resume as input. Extract structured information with high accuracy.

CRITICAL INSTRUCTIONS:
1. EXPERIENCE CALCULATION: Find ALL employment periods. Calculate total years excluding overlaps. Use month/year precision if available. Then map to experience level:
   - "0" = Entry Level (0-1 years of experience)
   - "2" = Junior (2-3 years of experience)
   - "4" = Mid-level (4-6 years of experience)
   - "7" = Senior (7-10 years of experience)
   - "10" = Expert (10+ years of experience)
   Return ONLY one of these exact string values: "0", "2", "4", "7", or "10"

2. SKILLS: Extract EVERY technical and professional skill mentioned anywhere in the document.
3. CONTACT INFO: Extract email and phone from header/footer/body.
4. EDUCATION: List ALL educational qualifications in order.
5. SUMMARY: Output the Professional Summary as three bullet points, each summarizing one of the last 3 job experiences from the resume. Start each bullet point with "• " (bullet character followed by space) and put each on its own line. If there are fewer than 3 job experiences, provide bullet points for however many are available. If there are no job experiences, provide a single bullet point summarizing the candidate's profile. For example:
• Point number 1
• Point number 2
• Point number 3

Return STRICT JSON matching the provided schema exactly."""

SYSTEM_PROMPT = "You are an expert resume parser. Extract structured information accurately."


def build_text_prompt(text: str, max_chars: int = 12000) -> str:
    """Prompt for the text path, with the resume text truncated to max_chars."""
    return f"{RESUME_PARSER_PROMPT}\n\nRESUME TEXT:\n{text[:max_chars]}"


# ============================================================================
# Response Schema (strict JSON Schema, OpenAI structured outputs compatible)
# ============================================================================

def _object_schema(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


RESUME_RESPONSE_SCHEMA: Dict[str, Any] = _object_schema({
    "full_name": {"type": "string"},
    "email": {"type": "string"},
    "phone": {"type": "string"},
    "skills": {"type": "array", "items": {"type": "string"}},
    "experience_years": {
        "type": "string",
        "enum": list(EXPERIENCE_BUCKETS),
        "description": (
            "Experience level: 0=Entry Level (0-1 years), 2=Junior (2-3 years), "
            "4=Mid-level (4-6 years), 7=Senior (7-10 years), 10=Expert (10+ years)"
        ),
    },
    "education": {
        "type": "array",
        "items": _object_schema({
            "degree": {"type": "string"},
            "institution": {"type": "string"},
            "year": {"type": "string"},
            "grade": {"type": "string"},
        }),
    },
    "summary": {"type": "string"},
    "certifications": {"type": "array", "items": {"type": "string"}},
    "experience": {
        "type": "array",
        "items": _object_schema({
            "company": {"type": "string"},
            "position": {"type": "string"},
            "period": {"type": "string"},
            "duration": {"type": "string"},
        }),
    },
})

RESUME_SCHEMA_NAME = "CandidateSchema"


# ============================================================================
# Tolerant JSON parsing
# ============================================================================

_CODE_FENCE = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```")


def _as_object(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_llm_json(text: str) -> Dict[str, Any]:
    """
    Parse a model reply into a dict.

    Tries, in order: strict JSON, a fenced ```json block, and the span between
    the first '{' and the last '}'. Returns {} when all three fail so the
    transformer can fill defaults.
    """
    text = (text or "").strip()
    try:
        return _as_object(json.loads(text))
    except json.JSONDecodeError:
        logger.warning("LLM reply is not strict JSON, looking for a fenced code block")

    fence = _CODE_FENCE.search(text)
    if fence:
        try:
            return _as_object(json.loads(fence.group(1)))
        except json.JSONDecodeError:
            logger.warning("Fenced code block is not valid JSON, trimming to outer braces")

    first = text.find("{")
    last = text.rfind("}")
    if first >= 0 and last > first:
        try:
            return _as_object(json.loads(text[first:last + 1]))
        except json.JSONDecodeError:
            logger.error("Failed to parse JSON from LLM reply")

    logger.error(f"Giving up on LLM reply, using empty result. Raw reply: {text[:500]}")
    return {}


# ============================================================================
# Strategy interface
# ============================================================================

class StructuredExtractor(ABC):
    """LLM-backed extraction of the resume JSON contract."""

    provider: str = "base"

    def __init__(self, max_text_chars: int = 12000):
        self.max_text_chars = max_text_chars

    @abstractmethod
    async def extract_from_pdf(self, pdf_bytes: bytes) -> Dict[str, Any]:
        """Send the PDF itself to the model (multimodal path)."""

    @abstractmethod
    async def extract_from_text(self, text: str) -> Dict[str, Any]:
        """Send already extracted, normalized text to the model."""

    async def aclose(self) -> None:
        """Release provider client resources."""


def build_structured_extractor(settings: Settings) -> StructuredExtractor:
    """
    Construct the provider strategy selected by settings.llm_provider.

    "auto" prefers Gemini and falls back to OpenAI. Raises ConfigurationError
    when the selected provider has no API key.
    """
    provider = (settings.llm_provider or "auto").strip().lower()

    if provider == "auto":
        if settings.gemini_api_key:
            provider = "gemini"
        elif settings.openai_api_key:
            provider = "openai"
        else:
            raise ConfigurationError(
                "An LLM API key is required for resume parsing (set GEMINI_API_KEY or OPENAI_API_KEY)"
            )

    if provider == "gemini":
        if not settings.gemini_api_key:
            raise ConfigurationError("Gemini API key is required for resume parsing")
        from .gemini_extractor import GeminiStructuredExtractor
        return GeminiStructuredExtractor.from_settings(settings)

    if provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OpenAI API key is required for resume parsing")
        from .openai_extractor import OpenAIStructuredExtractor
        return OpenAIStructuredExtractor.from_settings(settings)

    raise ConfigurationError(f"Unsupported LLM provider: {settings.llm_provider}")
