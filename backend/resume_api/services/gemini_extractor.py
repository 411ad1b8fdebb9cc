"""
Gemini strategy using the google-genai SDK.

PDFs go through the Files API: upload, wait for the file to become ACTIVE,
then generate against the file reference. Text goes straight into the prompt.
"""
import asyncio
import io
import logging
import time
from typing import Any, Dict, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import Settings
from ..schemas.candidate import ResumeExtraction
from .error_handler import ExternalServiceError
from .structured_extractor import (
    RESUME_PARSER_PROMPT,
    StructuredExtractor,
    build_text_prompt,
    parse_llm_json,
)

logger = logging.getLogger(__name__)

PROVIDER = "gemini"


def translate_gemini_error(error: Exception) -> ExternalServiceError:
    """Map SDK/transport exceptions onto messages the error classifier understands."""
    detail = str(error)
    if isinstance(error, genai_errors.APIError):
        code = getattr(error, "code", None)
        if "billing" in detail.lower():
            return ExternalServiceError(f"Gemini billing limit exceeded: {detail}", PROVIDER)
        if code == 429:
            return ExternalServiceError(f"Gemini rate limit reached: {detail}", PROVIDER)
        if code in (401, 403):
            return ExternalServiceError(f"Gemini authentication failed: {detail}", PROVIDER)
        return ExternalServiceError(f"Gemini API request failed: {code} - {detail}", PROVIDER)
    return ExternalServiceError(f"Gemini API connection failed: {detail}", PROVIDER)


def _enum_name(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "value", value)).upper()


def _state_name(file: Any) -> str:
    return _enum_name(getattr(file, "state", None))


class GeminiStructuredExtractor(StructuredExtractor):
    provider = PROVIDER

    def __init__(
        self,
        client: genai.Client,
        model: str = "gemini-2.5-flash",
        max_text_chars: int = 12000,
        poll_interval: float = 1.0,
        poll_timeout: float = 30.0,
        cleanup_uploaded_files: bool = True,
    ):
        super().__init__(max_text_chars=max_text_chars)
        self.client = client
        self.model = model
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.cleanup_uploaded_files = cleanup_uploaded_files

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiStructuredExtractor":
        client = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=int(settings.llm_timeout_seconds * 1000)),
        )
        return cls(
            client=client,
            model=settings.gemini_model,
            max_text_chars=settings.max_text_chars,
            poll_interval=settings.gemini_file_poll_interval_seconds,
            poll_timeout=settings.gemini_file_poll_timeout_seconds,
            cleanup_uploaded_files=settings.cleanup_uploaded_files,
        )

    def _generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=0.1,
            top_k=40,
            top_p=0.95,
            max_output_tokens=8192,  # 2.5 models spend part of this on thinking
            response_mime_type="application/json",
            response_schema=ResumeExtraction,
        )

    async def _wait_until_active(self, file: Any) -> Any:
        """Poll the uploaded file until the Files API reports it ACTIVE."""
        deadline = time.monotonic() + self.poll_timeout
        while _state_name(file) != "ACTIVE":
            if _state_name(file) == "FAILED":
                raise ExternalServiceError("Gemini file processing failed", PROVIDER)
            if time.monotonic() >= deadline:
                raise ExternalServiceError(
                    f"Gemini file processing timed out after {self.poll_timeout:.0f}s", PROVIDER
                )
            await asyncio.sleep(self.poll_interval)
            file = await self.client.aio.files.get(name=file.name)
        return file

    async def extract_from_pdf(self, pdf_bytes: bytes) -> Dict[str, Any]:
        uploaded: Optional[Any] = None
        try:
            uploaded = await self.client.aio.files.upload(
                file=io.BytesIO(pdf_bytes),
                config=types.UploadFileConfig(mime_type="application/pdf", display_name="resume.pdf"),
            )
            if not getattr(uploaded, "name", None):
                raise ExternalServiceError("No file returned from Gemini File API", PROVIDER)
            logger.info(f"Uploaded resume to Gemini File API: {uploaded.name}")

            active = await self._wait_until_active(uploaded)
            if not getattr(active, "uri", None):
                raise ExternalServiceError("No file URI returned from Gemini File API", PROVIDER)

            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_uri(
                        file_uri=active.uri,
                        mime_type=getattr(active, "mime_type", None) or "application/pdf",
                    ),
                    RESUME_PARSER_PROMPT,
                ],
                config=self._generation_config(),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise translate_gemini_error(e) from e
        finally:
            if uploaded is not None and getattr(uploaded, "name", None) and self.cleanup_uploaded_files:
                await self._delete_file(uploaded.name)

        return parse_llm_json(self._response_text(response))

    async def extract_from_text(self, text: str) -> Dict[str, Any]:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=build_text_prompt(text, self.max_text_chars),
                config=self._generation_config(),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise translate_gemini_error(e) from e

        return parse_llm_json(self._response_text(response))

    def _response_text(self, response: Any) -> str:
        """Reply text, raising on safety blocks and empty output."""
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            raise ExternalServiceError(f"Gemini blocked the request: {block_reason}", PROVIDER)

        try:
            content = response.text
        except ValueError:
            content = None

        if not content:
            candidates = getattr(response, "candidates", None) or []
            finish_reason = getattr(candidates[0], "finish_reason", None) if candidates else None
            logger.error(f"Empty response from Gemini API (finish_reason={finish_reason})")
            if finish_reason and _enum_name(finish_reason) != "STOP":
                raise ExternalServiceError(f"Content generation blocked: {finish_reason}", PROVIDER)
            raise ExternalServiceError("Empty response from Gemini API", PROVIDER)
        return content

    async def _delete_file(self, name: str) -> None:
        try:
            await self.client.aio.files.delete(name=name)
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.warning(f"Could not delete Gemini file {name}: {e}")
