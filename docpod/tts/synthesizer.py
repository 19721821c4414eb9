"""Speech synthesis for podcast script segments.

Responsibilities:
- Define the protocol for provider speech clients.
- Synthesize one text segment into an `AudioPayload`.
- Synthesize a whole script strictly in narration order.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Protocol

from ..audio.merger import AudioContainerMerger
from ..errors import SegmentSynthesisError
from ..languages import tts_language
from ..models.datatypes import (
    AudioPayload,
    PodcastScript,
    ScriptSegment,
    SynthesizedSegment,
)
from ..telemetry.logger import RunLogger
from .voices import normalize_voice_id, resolve_voice


ProgressCallback = Callable[[int, int, ScriptSegment], None]


class SpeechClient(Protocol):
    """Protocol for text-to-speech provider clients."""

    def synthesize_speech(
        self,
        *,
        text: str,
        language_code: str,
        speaker: str,
        model: str,
        pace: float,
        temperature: float,
    ) -> bytes:
        """Return encoded audio bytes for `text`."""


class SpeechSegmentSynthesizer:
    """Turn script segments into ordered audio payloads."""

    def __init__(
        self,
        client: SpeechClient,
        *,
        model: str = "bulbul:v3",
        merger: AudioContainerMerger | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self.client = client
        self.model = model
        self.merger = merger or AudioContainerMerger()
        self.run_logger = run_logger

    def synthesize(
        self,
        text: str,
        language: str,
        voice_id: str,
        pace: float = 1.0,
        temperature: float = 0.6,
    ) -> AudioPayload:
        """Synthesize one segment; no retry is attempted.

        Raises:
            ValueError: If `text` is blank.
            DigitizationServiceError: If the provider request fails.
        """

        if not text or not text.strip():
            raise ValueError("No text provided for speech synthesis.")
        audio_bytes = self.client.synthesize_speech(
            text=text,
            language_code=tts_language(language),
            speaker=normalize_voice_id(voice_id),
            model=self.model,
            pace=pace,
            temperature=temperature,
        )
        return self.merger.split_payload(audio_bytes)

    def synthesize_script(
        self,
        script: PodcastScript,
        language: str,
        voices: Mapping[str, str] | None = None,
        pace: float = 1.0,
        temperature: float = 0.6,
        progress_callback: ProgressCallback | None = None,
    ) -> list[SynthesizedSegment]:
        """Synthesize introduction, body, and conclusion one segment at a time.

        The first failing segment aborts the whole script.

        Raises:
            SegmentSynthesisError: With the 1-based number of the failing segment.
        """

        ordered = script.narration_order()
        total = len(ordered)
        synthesized: list[SynthesizedSegment] = []
        for index, segment in enumerate(ordered):
            voice_id = resolve_voice(segment.speaker, voices)
            try:
                payload = self.synthesize(segment.text, language, voice_id, pace, temperature)
            except Exception as exc:
                raise SegmentSynthesisError(
                    segment_number=index + 1,
                    segment_total=total,
                    detail=str(exc) or type(exc).__name__,
                ) from exc

            synthesized.append(
                SynthesizedSegment(
                    index=index,
                    speaker=segment.speaker,
                    voice_id=voice_id,
                    text=segment.text,
                    payload=payload,
                )
            )
            if self.run_logger is not None:
                self.run_logger.log_segment_complete(index + 1, total, segment.speaker)
            if progress_callback is not None:
                progress_callback(index + 1, total, segment)
        return synthesized
