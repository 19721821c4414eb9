"""Podcast script generation from extracted document text.

Responsibilities:
- Ask the chat model for a multi-speaker podcast script in strict JSON.
- Recover the JSON object from fenced or chatty model output.
- Build a deterministic fallback script when the model output cannot be parsed.
- Convert scripts to and from their JSON artifact payloads.
"""

from __future__ import annotations

import json
import re
from typing import Any, Protocol

from loguru import logger

from ..languages import language_name
from ..models.datatypes import PodcastScript, ScriptSegment
from .prompts import PromptLibrary


_FENCED_JSON_PATTERN = re.compile(r"```json\s*([\s\S]*?)```")
_SCRIPT_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\"title\"[\s\S]*\"conclusion\"[\s\S]*\}")
_SENTENCE_BOUNDARY_PATTERN = re.compile(r"[.!?]+")

FALLBACK_SPEAKERS = (
    ("Host", "Podcast Host", "enthusiastic"),
    ("Expert", "Subject Matter Expert", "knowledgeable"),
    ("Guest", "Special Guest", "curious"),
)
FALLBACK_MAX_SEGMENTS = 6
FALLBACK_SENTENCES_PER_SEGMENT = 3
FALLBACK_MIN_SENTENCE_CHARS = 20
FALLBACK_INTRODUCTION = (
    "Welcome to today's episode where we explore an interesting topic together."
)
FALLBACK_CONCLUSION = (
    "Thank you for listening to today's episode. "
    "Join us next time for more insightful discussions!"
)


class ChatClient(Protocol):
    """Protocol for chat-completions provider clients."""

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return assistant text for one chat request."""


def extract_json_text(content: str) -> str:
    """Return the most likely JSON document inside model output."""

    fenced = _FENCED_JSON_PATTERN.search(content)
    if fenced:
        candidate = fenced.group(1)
    else:
        matched = _SCRIPT_OBJECT_PATTERN.search(content)
        candidate = matched.group(0) if matched else content
    return candidate.strip().lstrip("\ufeff")


def _require_text(payload: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str):
            return value
    raise ValueError(f"Script field `{keys[0]}` must be a string.")


def script_from_payload(payload: object) -> PodcastScript:
    """Build a `PodcastScript` from a decoded JSON object.

    Accepts both `speakerRole` and `speaker_role` segment keys.

    Raises:
        ValueError: If required fields are missing or have the wrong type.
    """

    if not isinstance(payload, dict):
        raise ValueError("Script payload must be a JSON object.")
    raw_segments = payload.get("segments")
    if not isinstance(raw_segments, list):
        raise ValueError("Script field `segments` must be a list.")

    segments: list[ScriptSegment] = []
    for raw_segment in raw_segments:
        if not isinstance(raw_segment, dict):
            raise ValueError("Script segments must be JSON objects.")
        role = raw_segment.get("speakerRole", raw_segment.get("speaker_role", ""))
        tone = raw_segment.get("tone")
        segments.append(
            ScriptSegment(
                speaker=_require_text(raw_segment, "speaker"),
                text=_require_text(raw_segment, "text"),
                speaker_role=role if isinstance(role, str) else "",
                tone=tone if isinstance(tone, str) else None,
            )
        )
    return PodcastScript(
        title=_require_text(payload, "title"),
        introduction=_require_text(payload, "introduction"),
        segments=tuple(segments),
        conclusion=_require_text(payload, "conclusion"),
    )


def script_to_payload(script: PodcastScript) -> dict[str, object]:
    """Serialize a script into its JSON artifact shape."""

    return {
        "title": script.title,
        "introduction": script.introduction,
        "segments": [
            {
                "speaker": segment.speaker,
                "speakerRole": segment.speaker_role,
                "text": segment.text,
                "tone": segment.tone,
            }
            for segment in script.segments
        ],
        "conclusion": script.conclusion,
    }


def parse_script_json(content: str) -> PodcastScript:
    """Parse model output into a script.

    Raises:
        ValueError: If no valid script JSON can be recovered.
    """

    try:
        payload = json.loads(extract_json_text(content))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Script response is not valid JSON: {exc}") from exc
    return script_from_payload(payload)


def build_fallback_script(source_text: str, language_label: str) -> PodcastScript:
    """Build a rotating three-speaker script directly from source sentences."""

    sentences = [
        sentence.strip()
        for sentence in _SENTENCE_BOUNDARY_PATTERN.split(source_text)
        if len(sentence.strip()) > FALLBACK_MIN_SENTENCE_CHARS
    ]
    groups = [
        sentences[start : start + FALLBACK_SENTENCES_PER_SEGMENT]
        for start in range(0, len(sentences), FALLBACK_SENTENCES_PER_SEGMENT)
    ]
    segments = []
    for position, group in enumerate(groups[:FALLBACK_MAX_SEGMENTS]):
        speaker, role, tone = FALLBACK_SPEAKERS[position % len(FALLBACK_SPEAKERS)]
        segments.append(
            ScriptSegment(
                speaker=speaker,
                speaker_role=role,
                text=". ".join(group) + ".",
                tone=tone,
            )
        )
    return PodcastScript(
        title=f"Podcast Episode on {language_label} Topic",
        introduction=FALLBACK_INTRODUCTION,
        segments=tuple(segments),
        conclusion=FALLBACK_CONCLUSION,
    )


class ScriptGenerator:
    """Chat-model-backed podcast script writer."""

    def __init__(
        self,
        client: ChatClient,
        model: str = "sarvam-m",
        temperature: float = 0.8,
        max_tokens: int = 4000,
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.prompts = PromptLibrary()
        self.used_fallback = False

    def generate(self, document_text: str, language: str) -> PodcastScript:
        """Generate a podcast script for `document_text` in `language`.

        Unparseable model output yields the fallback script; provider failures
        propagate to the caller.

        Raises:
            ValueError: If `document_text` is blank.
        """

        if not document_text or not document_text.strip():
            raise ValueError("No extracted text provided for script generation.")

        label = language_name(language)
        content = self.client.chat_completion_text(
            model=self.model,
            system_prompt=self.prompts.script_system_prompt(language, label),
            user_prompt=self.prompts.script_user_prompt(document_text, label),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        try:
            script = parse_script_json(content)
        except ValueError as exc:
            logger.warning("Falling back to sentence-based script: {}", exc)
            self.used_fallback = True
            return build_fallback_script(document_text, label)
        self.used_fallback = False
        return script
