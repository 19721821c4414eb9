"""Unit tests for ordered speech synthesis and voice resolution."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from docpod.audio.wav_header import WavHeader
from docpod.errors import DigitizationServiceError, SegmentSynthesisError
from docpod.models.datatypes import PodcastScript, ScriptSegment
from docpod.tts.synthesizer import SpeechSegmentSynthesizer
from docpod.tts.voices import (
    DEFAULT_VOICE_ID,
    ROLE_VOICE_SUGGESTIONS,
    VOICE_CATALOGUE,
    is_known_voice,
    normalize_voice_id,
    resolve_voice,
)


class RecordingSpeechClient:
    """Speech client stub returning a fixed WAV and recording each request."""

    def __init__(self, audio: bytes, fail_on_call: int | None = None) -> None:
        self._audio = audio
        self._fail_on_call = fail_on_call
        self.requests: list[dict[str, object]] = []

    def synthesize_speech(self, **kwargs: object) -> bytes:
        self.requests.append(kwargs)
        if self._fail_on_call is not None and len(self.requests) == self._fail_on_call:
            raise DigitizationServiceError("Sarvam rate limit reached (HTTP 429).")
        return self._audio


def _script() -> PodcastScript:
    return PodcastScript(
        title="Rivers",
        introduction="Welcome to the show about rivers.",
        segments=(
            ScriptSegment(speaker="Expert", speaker_role="Subject Matter Expert", text="Rivers carve valleys."),
            ScriptSegment(speaker="Guest", speaker_role="Special Guest", text="How long does that take?"),
        ),
        conclusion="Thanks for listening.",
    )


def test_resolve_voice_uses_role_defaults_and_overrides() -> None:
    assert resolve_voice("Host") == "aditya"
    assert resolve_voice("Expert") == "dev"
    assert resolve_voice("Guest") == "rahul"
    assert resolve_voice("Guest", {"Guest": "Pooja"}) == "pooja"
    assert resolve_voice("Narrator") == DEFAULT_VOICE_ID


def test_normalize_voice_id_falls_back_for_unknown_speakers() -> None:
    assert normalize_voice_id("  VIDYA ") == "vidya"
    assert normalize_voice_id("nobody") == DEFAULT_VOICE_ID
    assert normalize_voice_id(None) == DEFAULT_VOICE_ID


def test_role_suggestions_reference_catalogue_voices() -> None:
    catalogue = {profile.provider_voice_id for profile in VOICE_CATALOGUE}

    for suggestions in ROLE_VOICE_SUGGESTIONS.values():
        assert set(suggestions) <= catalogue
    assert is_known_voice("Kabir")
    assert not is_known_voice("alloy")


def test_synthesize_rejects_blank_text(wav_factory: Callable[..., bytes]) -> None:
    synthesizer = SpeechSegmentSynthesizer(RecordingSpeechClient(wav_factory(10)))

    with pytest.raises(ValueError, match="No text provided"):
        synthesizer.synthesize("   ", "en-IN", "aditya")


def test_synthesize_maps_language_and_voice_for_provider(
    wav_factory: Callable[..., bytes],
) -> None:
    client = RecordingSpeechClient(wav_factory(10))
    synthesizer = SpeechSegmentSynthesizer(client, model="bulbul:v3")

    payload = synthesizer.synthesize("Hello", "sat-IN", "unknown-voice", pace=1.2)

    assert len(payload.header) == 44
    assert client.requests == [
        {
            "text": "Hello",
            "language_code": "en-IN",
            "speaker": "aditya",
            "model": "bulbul:v3",
            "pace": 1.2,
            "temperature": 0.6,
        }
    ]


def test_synthesize_script_runs_in_narration_order_with_role_voices(
    wav_factory: Callable[..., bytes],
) -> None:
    """Introduction, body, and conclusion should be synthesized in sequence."""

    client = RecordingSpeechClient(wav_factory(10))
    progress: list[tuple[int, int, str]] = []
    synthesizer = SpeechSegmentSynthesizer(client)

    segments = synthesizer.synthesize_script(
        _script(),
        "hi-IN",
        {"Guest": "simran"},
        progress_callback=lambda number, total, segment: progress.append(
            (number, total, segment.speaker)
        ),
    )

    assert [segment.text for segment in segments] == [
        "Welcome to the show about rivers.",
        "Rivers carve valleys.",
        "How long does that take?",
        "Thanks for listening.",
    ]
    assert [request["speaker"] for request in client.requests] == [
        "aditya",
        "dev",
        "simran",
        "aditya",
    ]
    assert {request["language_code"] for request in client.requests} == {"hi-IN"}
    assert progress == [(1, 4, "Host"), (2, 4, "Expert"), (3, 4, "Guest"), (4, 4, "Host")]


def test_synthesize_script_stops_at_first_failing_segment(
    wav_factory: Callable[..., bytes],
) -> None:
    """The first failure should abort with its 1-based segment number."""

    client = RecordingSpeechClient(wav_factory(10), fail_on_call=3)
    synthesizer = SpeechSegmentSynthesizer(client)

    with pytest.raises(SegmentSynthesisError) as exc_info:
        synthesizer.synthesize_script(_script(), "en-IN")

    assert exc_info.value.segment_number == 3
    assert exc_info.value.segment_total == 4
    assert "Failed to generate audio for segment 3/4" in str(exc_info.value)
    assert "rate limit" in str(exc_info.value)
    assert len(client.requests) == 3


def test_synthesize_script_splits_each_wav_into_header_and_data(
    wav_factory: Callable[..., bytes],
) -> None:
    client = RecordingSpeechClient(wav_factory(100))

    segments = SpeechSegmentSynthesizer(client).synthesize_script(_script(), "en-IN")

    assert len(segments) == 4
    for segment in segments:
        assert WavHeader.unpack(segment.payload.header).data_size == 200
        assert len(segment.payload.data) == 200
