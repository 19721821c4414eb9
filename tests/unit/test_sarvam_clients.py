"""Unit tests for Sarvam HTTP clients and provider error mapping."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import pytest
import requests

from docpod.digitization.client import SarvamDigitizationClient
from docpod.errors import DigitizationServiceError
from docpod.llm.sarvam_client import SarvamChatClient, SarvamSpeechClient
from docpod.models.datatypes import JobState


def _response(status_code: int, body: object = None, content: bytes | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if content is not None:
        response._content = content
    elif body is None:
        response._content = b""
    else:
        response._content = json.dumps(body).encode("utf-8")
    return response


class RecordingSession:
    """`requests.Session` stand-in replaying queued responses or exceptions."""

    def __init__(self, *outcomes: requests.Response | Exception) -> None:
        self._outcomes = list(outcomes)
        self.requests: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.requests.append({"method": method, "url": url, **kwargs})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_chat_client_sends_authenticated_request_and_returns_content() -> None:
    session = RecordingSession(
        _response(200, {"choices": [{"message": {"content": "script json"}}]})
    )
    client = SarvamChatClient(api_key=" key-123 ", base_url="https://api.example/", session=session)

    content = client.chat_completion_text(
        model="sarvam-m", system_prompt="sys", user_prompt="user", temperature=0.8, max_tokens=10
    )

    assert content == "script json"
    request = session.requests[0]
    assert request["url"] == "https://api.example/v1/chat/completions"
    assert request["headers"]["api-subscription-key"] == "key-123"
    assert request["json"]["messages"][1] == {"role": "user", "content": "user"}


def test_client_requires_api_key_before_any_request() -> None:
    session = RecordingSession()
    client = SarvamChatClient(api_key=None, session=session)

    with pytest.raises(DigitizationServiceError, match="Missing Sarvam API key") as exc_info:
        client.chat_completion_text(model="m", system_prompt="s", user_prompt="u")

    assert exc_info.value.failure_kind == "invalid_api_key"
    assert session.requests == []


@pytest.mark.parametrize(
    ("status_code", "body", "failure_kind", "headline"),
    [
        (401, {"error": {"message": "Invalid subscription key"}}, "invalid_api_key", "authentication failed"),
        (429, {"error": "Too many requests"}, "rate_limited", "rate limit reached"),
        (504, None, "timeout", "request timed out"),
        (422, {"error": {"message": "bad field"}}, "bad_request", "rejected the request"),
        (500, {"detail": "oops"}, "http_error", "request failed"),
    ],
)
def test_http_errors_map_to_provider_failure_kinds(
    status_code: int, body: object, failure_kind: str, headline: str
) -> None:
    client = SarvamChatClient(api_key="key", session=RecordingSession(_response(status_code, body)))

    with pytest.raises(DigitizationServiceError, match=headline) as exc_info:
        client.chat_completion_text(model="m", system_prompt="s", user_prompt="u")

    assert exc_info.value.failure_kind == failure_kind
    assert exc_info.value.status_code == status_code
    assert f"HTTP {status_code}" in str(exc_info.value)


def test_http_error_messages_redact_subscription_keys() -> None:
    body = "denied api-subscription-key: abcdef1234567890"
    client = SarvamChatClient(
        api_key="key", session=RecordingSession(_response(403, content=body.encode("utf-8")))
    )

    with pytest.raises(DigitizationServiceError) as exc_info:
        client.chat_completion_text(model="m", system_prompt="s", user_prompt="u")

    assert "abcdef1234567890" not in str(exc_info.value)
    assert "[redacted-key]" in str(exc_info.value)


def test_transport_errors_map_to_timeout_and_transport_kinds() -> None:
    client = SarvamChatClient(
        api_key="key",
        session=RecordingSession(
            requests.Timeout("slow"), requests.ConnectionError("refused")
        ),
    )

    with pytest.raises(DigitizationServiceError, match="timed out") as timeout_info:
        client.chat_completion_text(model="m", system_prompt="s", user_prompt="u")
    with pytest.raises(DigitizationServiceError, match="transport error") as transport_info:
        client.chat_completion_text(model="m", system_prompt="s", user_prompt="u")

    assert timeout_info.value.failure_kind == "timeout"
    assert transport_info.value.failure_kind == "transport"


def test_chat_client_rejects_malformed_responses() -> None:
    client = SarvamChatClient(
        api_key="key",
        session=RecordingSession(
            _response(200, {"choices": []}),
            _response(200, content=b"not json"),
        ),
    )

    with pytest.raises(DigitizationServiceError, match="choices"):
        client.chat_completion_text(model="m", system_prompt="s", user_prompt="u")
    with pytest.raises(DigitizationServiceError, match="invalid JSON"):
        client.chat_completion_text(model="m", system_prompt="s", user_prompt="u")


def test_speech_client_decodes_first_base64_audio() -> None:
    session = RecordingSession(
        _response(200, {"audios": [base64.b64encode(b"RIFFDATA").decode("ascii")]})
    )
    client = SarvamSpeechClient(api_key="key", session=session)

    audio = client.synthesize_speech(text="Hi", language_code="hi-IN", speaker="aditya")

    assert audio == b"RIFFDATA"
    assert session.requests[0]["url"] == "https://api.sarvam.ai/text-to-speech"
    assert session.requests[0]["json"]["target_language_code"] == "hi-IN"
    assert session.requests[0]["json"]["model"] == "bulbul:v3"


def test_speech_client_rejects_missing_or_invalid_audio() -> None:
    client = SarvamSpeechClient(
        api_key="key",
        session=RecordingSession(
            _response(200, {"audios": []}),
            _response(200, {"audios": ["***not-base64***"]}),
        ),
    )

    with pytest.raises(DigitizationServiceError, match="missing `audios`"):
        client.synthesize_speech(text="Hi", language_code="en-IN", speaker="aditya")
    with pytest.raises(DigitizationServiceError, match="not valid base64"):
        client.synthesize_speech(text="Hi", language_code="en-IN", speaker="aditya")


def test_digitization_client_runs_job_endpoints(tmp_path: Path) -> None:
    document = tmp_path / "chunk_001.pdf"
    document.write_bytes(b"%PDF-1.4")
    session = RecordingSession(
        _response(200, {"job_id": " job-42 "}),
        _response(200, {"upload_urls": {"chunk_001.pdf": {"file_url": "https://blob/up"}}}),
        _response(201),
        _response(200, {"job_state": "Running"}),
        _response(200, {"job_state": "Failed", "error_message": "Unreadable scan"}),
        _response(200),
        _response(200, {"download_urls": {"out.zip": {"file_url": "https://blob/down"}}}),
        _response(200, content=b"PK-archive"),
    )
    client = SarvamDigitizationClient(api_key="key", session=session)

    job_id = client.create_job("hi-IN", "md")
    client.upload_file(job_id, document)
    running = client.get_status(job_id)
    failed = client.get_status(job_id)
    client.start_job(job_id)
    archive = client.download_output(job_id)

    assert job_id == "job-42"
    assert session.requests[0]["json"] == {
        "job_parameters": {"language": "hi-IN", "output_format": "md"}
    }
    assert session.requests[2]["method"] == "PUT"
    assert session.requests[2]["url"] == "https://blob/up"
    assert session.requests[2]["data"] == b"%PDF-1.4"
    assert running.state is JobState.POLLING
    assert failed.state is JobState.FAILED
    assert failed.error_message == "Unreadable scan"
    assert session.requests[5]["url"].endswith("/doc-digitization/job/v1/job-42/start")
    assert archive == b"PK-archive"
    assert session.requests[7]["url"] == "https://blob/down"


def test_digitization_client_rejects_missing_job_id() -> None:
    client = SarvamDigitizationClient(
        api_key="key", session=RecordingSession(_response(200, {"status": "ok"}))
    )

    with pytest.raises(DigitizationServiceError, match="job_id"):
        client.create_job("en-IN", "md")
