"""Integration-test fixtures for deterministic provider and credential behavior."""

from __future__ import annotations

import io
import itertools
import json
import wave
import zipfile
from pathlib import Path

import pytest
from pypdf import PdfReader

from docpod.digitization.client import SarvamDigitizationClient
from docpod.llm.sarvam_client import SarvamChatClient, SarvamSpeechClient
from docpod.models.datatypes import JobState, JobStatus

MOCK_SCRIPT = {
    "title": "Mocked Episode",
    "introduction": "Welcome to the mocked episode.",
    "segments": [
        {"speaker": "Host", "speakerRole": "Podcast Host", "text": "Let's dive in."},
        {"speaker": "Expert", "speakerRole": "Subject Matter Expert", "text": "Gladly."},
        {"speaker": "Guest", "speakerRole": "Special Guest", "text": "I have questions."},
    ],
    "conclusion": "Thanks for listening.",
}


class InMemoryCredentialStore:
    """Simple in-memory credential store used for CLI tests."""

    def __init__(self, initial_api_key: str | None = None) -> None:
        self._api_key = initial_api_key

    def is_available(self) -> bool:
        return True

    def get_api_key(self) -> str | None:
        return self._api_key

    def set_api_key(self, api_key: str) -> None:
        self._api_key = api_key.strip()

    def clear_api_key(self) -> bool:
        existed = self._api_key is not None
        self._api_key = None
        return existed


def mock_wav_bytes(frame_count: int = 2400) -> bytes:
    """Return deterministic placeholder WAV payload for the TTS stage."""

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(24000)
        wav_file.writeframes(b"\x00\x00" * frame_count)
    return buffer.getvalue()


@pytest.fixture
def provider_calls() -> dict[str, list[str]]:
    """Collect provider calls made by mocked clients, keyed by operation."""

    return {"upload": [], "speaker": [], "chat": []}


@pytest.fixture
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Replace secure credential storage with an in-memory store."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("docpod.cli.create_credential_store", lambda: store)
    return store


@pytest.fixture(autouse=True)
def _mock_sarvam_calls(
    monkeypatch: pytest.MonkeyPatch,
    provider_calls: dict[str, list[str]],
    credential_store: InMemoryCredentialStore,
) -> None:
    """Mock Sarvam job, chat, and speech calls to avoid network/key requirements."""

    page_counts: dict[str, int] = {}
    job_numbers = itertools.count(1)

    def _create_job(self, language: str, output_format: str) -> str:
        _ = self
        return f"job-{language}-{output_format}-{next(job_numbers)}"

    def _upload_file(self, job_id: str, path: Path) -> None:
        _ = self
        provider_calls["upload"].append(path.name)
        page_counts[job_id] = len(PdfReader(io.BytesIO(path.read_bytes())).pages)

    def _start_job(self, job_id: str) -> None:
        _ = self

    def _get_status(self, job_id: str) -> JobStatus:
        _ = self
        return JobStatus(state=JobState.COMPLETED)

    def _download_output(self, job_id: str) -> bytes:
        _ = self
        output_format = job_id.split("-")[-2]
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as bundle:
            bundle.writestr(
                f"output/document.{output_format}",
                f"Digitized {page_counts[job_id]} page(s) of a document about rivers.",
            )
        return buffer.getvalue()

    def _chat_completion_text(self, **kwargs: object) -> str:
        _ = self
        provider_calls["chat"].append(str(kwargs["model"]))
        return f"```json\n{json.dumps(MOCK_SCRIPT)}\n```"

    def _synthesize_speech(self, **kwargs: object) -> bytes:
        _ = self
        provider_calls["speaker"].append(str(kwargs["speaker"]))
        return mock_wav_bytes()

    monkeypatch.setattr(SarvamDigitizationClient, "create_job", _create_job)
    monkeypatch.setattr(SarvamDigitizationClient, "upload_file", _upload_file)
    monkeypatch.setattr(SarvamDigitizationClient, "start_job", _start_job)
    monkeypatch.setattr(SarvamDigitizationClient, "get_status", _get_status)
    monkeypatch.setattr(SarvamDigitizationClient, "download_output", _download_output)
    monkeypatch.setattr(SarvamChatClient, "chat_completion_text", _chat_completion_text)
    monkeypatch.setattr(SarvamSpeechClient, "synthesize_speech", _synthesize_speech)
