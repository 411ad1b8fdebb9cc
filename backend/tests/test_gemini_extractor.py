import json
from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors
from google.genai import types

from resume_api.services.error_handler import (
    RATE_LIMITED_MESSAGE,
    SERVICE_UNAVAILABLE_MESSAGE,
    ExternalServiceError,
    get_user_friendly_error_message,
)
from resume_api.services.gemini_extractor import GeminiStructuredExtractor, translate_gemini_error

from conftest import LLM_RESULT


FILE_URI = "https://generativelanguage.googleapis.com/v1beta/files/resume-1"


def _file(state):
    return SimpleNamespace(name="files/resume-1", uri=FILE_URI, mime_type="application/pdf", state=state)


class FakeFiles:
    def __init__(self, states):
        # First state is the upload result, the rest are returned by successive get() calls
        self.states = list(states)
        self.uploads = []
        self.gets = []
        self.deleted = []

    async def upload(self, file, config=None):
        self.uploads.append((file.read(), config))
        return _file(self.states.pop(0))

    async def get(self, name):
        self.gets.append(name)
        return _file(self.states.pop(0))

    async def delete(self, name):
        self.deleted.append(name)


class FakeModels:
    def __init__(self, response):
        self.response = response
        self.calls = []

    async def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def _response(text=None, block_reason=None, finish_reason=None):
    feedback = SimpleNamespace(block_reason=block_reason) if block_reason else None
    candidates = [SimpleNamespace(finish_reason=finish_reason)] if finish_reason else []
    return SimpleNamespace(text=text, prompt_feedback=feedback, candidates=candidates)


def _extractor(states=(types.FileState.ACTIVE,), response=None, **kwargs):
    if response is None:
        response = _response(text=json.dumps(LLM_RESULT))
    client = SimpleNamespace(aio=SimpleNamespace(files=FakeFiles(states), models=FakeModels(response)))
    kwargs.setdefault("poll_interval", 0)
    return GeminiStructuredExtractor(client, model="gemini-2.5-flash", **kwargs), client


async def test_pdf_waits_for_active_file():
    extractor, client = _extractor(
        states=[types.FileState.PROCESSING, types.FileState.PROCESSING, types.FileState.ACTIVE]
    )

    result = await extractor.extract_from_pdf(b"%PDF-1.4 resume")

    assert result == LLM_RESULT
    assert client.aio.files.uploads[0][0] == b"%PDF-1.4 resume"
    assert client.aio.files.uploads[0][1].mime_type == "application/pdf"
    assert client.aio.files.gets == ["files/resume-1", "files/resume-1"]
    assert client.aio.files.deleted == ["files/resume-1"]

    call = client.aio.models.calls[0]
    assert call["model"] == "gemini-2.5-flash"
    assert call["contents"][0].file_data.file_uri == FILE_URI
    assert call["config"].response_mime_type == "application/json"


async def test_failed_file_processing():
    extractor, client = _extractor(states=[types.FileState.PROCESSING, types.FileState.FAILED])

    with pytest.raises(ExternalServiceError, match="file processing failed"):
        await extractor.extract_from_pdf(b"%PDF-1.4 resume")

    assert client.aio.files.deleted == ["files/resume-1"]
    assert client.aio.models.calls == []


async def test_file_processing_timeout():
    extractor, _ = _extractor(states=[types.FileState.PROCESSING], poll_timeout=0)

    with pytest.raises(ExternalServiceError, match="timed out"):
        await extractor.extract_from_pdf(b"%PDF-1.4 resume")


async def test_text_path_sends_truncated_prompt():
    extractor, client = _extractor(max_text_chars=15)

    result = await extractor.extract_from_text("Jane Smith, staff engineer, Python")

    assert result == LLM_RESULT
    assert client.aio.files.uploads == []
    assert client.aio.models.calls[0]["contents"].endswith("RESUME TEXT:\nJane Smith, sta")


async def test_blocked_prompt():
    extractor, _ = _extractor(response=_response(block_reason="SAFETY"))

    with pytest.raises(ExternalServiceError, match="blocked"):
        await extractor.extract_from_text("Jane Smith, staff engineer")


async def test_empty_reply_with_non_stop_finish_reason():
    extractor, _ = _extractor(response=_response(text="", finish_reason=types.FinishReason.MAX_TOKENS))

    with pytest.raises(ExternalServiceError, match="Content generation blocked"):
        await extractor.extract_from_text("Jane Smith, staff engineer")


async def test_empty_reply():
    extractor, _ = _extractor(response=_response(text="", finish_reason=types.FinishReason.STOP))

    with pytest.raises(ExternalServiceError, match="Empty response from Gemini API"):
        await extractor.extract_from_text("Jane Smith, staff engineer")


async def test_api_errors_are_translated():
    error = genai_errors.ClientError(429, {"error": {"message": "Resource exhausted", "status": "RESOURCE_EXHAUSTED"}})
    extractor, _ = _extractor(response=error)

    with pytest.raises(ExternalServiceError) as excinfo:
        await extractor.extract_from_text("Jane Smith, staff engineer")

    assert get_user_friendly_error_message(excinfo.value) == RATE_LIMITED_MESSAGE


def test_translate_authentication_error():
    error = genai_errors.ClientError(403, {"error": {"message": "API key not valid", "status": "PERMISSION_DENIED"}})

    assert get_user_friendly_error_message(translate_gemini_error(error)) == SERVICE_UNAVAILABLE_MESSAGE


def test_translate_server_error():
    error = genai_errors.ServerError(503, {"error": {"message": "Overloaded", "status": "UNAVAILABLE"}})

    translated = translate_gemini_error(error)

    assert str(translated).startswith("Gemini API request failed: 503")
    assert get_user_friendly_error_message(translated) == SERVICE_UNAVAILABLE_MESSAGE


def test_translate_transport_error():
    translated = translate_gemini_error(httpx.ConnectError("connection refused"))

    assert str(translated).startswith("Gemini API connection failed")
    assert get_user_friendly_error_message(translated) == SERVICE_UNAVAILABLE_MESSAGE
