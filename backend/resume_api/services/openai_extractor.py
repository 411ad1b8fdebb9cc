"""
OpenAI strategy: Files + Responses API for PDFs, Chat Completions for text.
"""
import logging
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from ..config import Settings
from .error_handler import ExternalServiceError
from .structured_extractor import (
    RESUME_PARSER_PROMPT,
    RESUME_RESPONSE_SCHEMA,
    RESUME_SCHEMA_NAME,
    SYSTEM_PROMPT,
    StructuredExtractor,
    build_text_prompt,
    parse_llm_json,
)

logger = logging.getLogger(__name__)

PROVIDER = "openai"


def translate_openai_error(error: Exception) -> ExternalServiceError:
    """Map SDK exceptions onto messages the error classifier understands."""
    detail = str(error)
    if isinstance(error, openai.RateLimitError):
        if getattr(error, "code", None) == "insufficient_quota" or "billing" in detail.lower():
            return ExternalServiceError(f"OpenAI billing limit exceeded: {detail}", PROVIDER)
        return ExternalServiceError(f"OpenAI rate limit reached: {detail}", PROVIDER)
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ExternalServiceError(f"OpenAI authentication failed: {detail}", PROVIDER)
    if isinstance(error, openai.APIConnectionError):
        return ExternalServiceError(f"OpenAI API connection failed: {detail}", PROVIDER)
    if isinstance(error, openai.APIStatusError):
        return ExternalServiceError(
            f"OpenAI API request failed: {error.status_code} - {detail}", PROVIDER
        )
    return ExternalServiceError(f"OpenAI API request failed: {detail}", PROVIDER)


class OpenAIStructuredExtractor(StructuredExtractor):
    provider = PROVIDER

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4o",
        text_model: str = "gpt-4o-mini",
        max_text_chars: int = 12000,
        cleanup_uploaded_files: bool = True,
    ):
        super().__init__(max_text_chars=max_text_chars)
        self.client = client
        self.model = model
        self.text_model = text_model
        self.cleanup_uploaded_files = cleanup_uploaded_files

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIStructuredExtractor":
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.llm_timeout_seconds,
        )
        return cls(
            client=client,
            model=settings.openai_model,
            text_model=settings.openai_text_model,
            max_text_chars=settings.max_text_chars,
            cleanup_uploaded_files=settings.cleanup_uploaded_files,
        )

    async def extract_from_pdf(self, pdf_bytes: bytes) -> Dict[str, Any]:
        file_id: Optional[str] = None
        try:
            uploaded = await self.client.files.create(
                file=("resume.pdf", pdf_bytes, "application/pdf"),
                purpose="user_data",
            )
            file_id = getattr(uploaded, "id", None)
            if not file_id:
                raise ExternalServiceError("OpenAI file upload did not return a file id", PROVIDER)
            logger.info(f"Uploaded resume to OpenAI Files API: {file_id}")

            response = await self.client.responses.create(
                model=self.model,
                input=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "input_text", "text": RESUME_PARSER_PROMPT},
                            {"type": "input_file", "file_id": file_id},
                        ],
                    }
                ],
                text={
                    "format": {
                        "type": "json_schema",
                        "name": RESUME_SCHEMA_NAME,
                        "schema": RESUME_RESPONSE_SCHEMA,
                        "strict": True,
                    }
                },
                temperature=0.1,
            )
        except openai.APIError as e:
            raise translate_openai_error(e) from e
        finally:
            if file_id and self.cleanup_uploaded_files:
                await self._delete_file(file_id)

        content = getattr(response, "output_text", None)
        if not content:
            raise ExternalServiceError("Empty response from OpenAI", PROVIDER)
        return parse_llm_json(content)

    async def extract_from_text(self, text: str) -> Dict[str, Any]:
        try:
            response = await self.client.chat.completions.create(
                model=self.text_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_text_prompt(text, self.max_text_chars)},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": RESUME_SCHEMA_NAME,
                        "schema": RESUME_RESPONSE_SCHEMA,
                        "strict": True,
                    },
                },
                temperature=0.1,
                max_tokens=2048,
            )
        except openai.APIError as e:
            raise translate_openai_error(e) from e

        choice = response.choices[0] if response.choices else None
        content = choice.message.content if choice and choice.message else None
        if not content:
            raise ExternalServiceError("Empty response from OpenAI", PROVIDER)
        return parse_llm_json(content)

    async def _delete_file(self, file_id: str) -> None:
        try:
            await self.client.files.delete(file_id)
        except openai.APIError as e:
            logger.warning(f"Could not delete OpenAI file {file_id}: {e}")

    async def aclose(self) -> None:
        await self.client.close()
