"""Speaker catalogue and role-to-voice resolution for synthesis.

Responsibilities:
- Represent the TTS provider's speaker identities and descriptive metadata.
- Resolve script speaker roles to provider voice ids with deterministic fallbacks.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


DEFAULT_VOICE_ID = "aditya"


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative speaker profile offered by the TTS provider.

    Attributes:
        provider_voice_id: Provider-native speaker identifier.
        name: Human-readable speaker name.
        gender: `male` or `female`.
        style: Short description of the delivery style.
    """

    provider_voice_id: str
    name: str
    gender: str
    style: str


VOICE_CATALOGUE: tuple[VoiceProfile, ...] = (
    VoiceProfile("aditya", "Aditya", "male", "professional"),
    VoiceProfile("shubh", "Shubh", "male", "warm"),
    VoiceProfile("ritu", "Ritu", "female", "friendly"),
    VoiceProfile("priya", "Priya", "female", "professional"),
    VoiceProfile("neha", "Neha", "female", "energetic"),
    VoiceProfile("rahul", "Rahul", "male", "casual"),
    VoiceProfile("anushka", "Anushka", "female", "calm"),
    VoiceProfile("abhilash", "Abhilash", "male", "authoritative"),
    VoiceProfile("manisha", "Manisha", "female", "professional"),
    VoiceProfile("vidya", "Vidya", "female", "knowledgeable"),
    VoiceProfile("arya", "Arya", "female", "youthful"),
    VoiceProfile("karun", "Karun", "male", "deep"),
    VoiceProfile("hitesh", "Hitesh", "male", "friendly"),
    VoiceProfile("pooja", "Pooja", "female", "warm"),
    VoiceProfile("rohan", "Rohan", "male", "casual"),
    VoiceProfile("simran", "Simran", "female", "cheerful"),
    VoiceProfile("kavya", "Kavya", "female", "youthful"),
    VoiceProfile("amit", "Amit", "male", "professional"),
    VoiceProfile("dev", "Dev", "male", "authoritative"),
    VoiceProfile("ishita", "Ishita", "female", "calm"),
    VoiceProfile("shreya", "Shreya", "female", "expressive"),
    VoiceProfile("ratan", "Ratan", "male", "mature"),
    VoiceProfile("varun", "Varun", "male", "friendly"),
    VoiceProfile("manan", "Manan", "male", "professional"),
    VoiceProfile("sumit", "Sumit", "male", "casual"),
    VoiceProfile("roopa", "Roopa", "female", "mature"),
    VoiceProfile("kabir", "Kabir", "male", "authoritative"),
    VoiceProfile("aayan", "Aayan", "male", "youthful"),
    VoiceProfile("ashutosh", "Ashutosh", "male", "professional"),
    VoiceProfile("advait", "Advait", "male", "calm"),
    VoiceProfile("amelia", "Amelia", "female", "warm"),
    VoiceProfile("sophia", "Sophia", "female", "friendly"),
    VoiceProfile("anand", "Anand", "male", "mature"),
    VoiceProfile("tanya", "Tanya", "female", "professional"),
    VoiceProfile("tarun", "Tarun", "male", "casual"),
    VoiceProfile("sunny", "Sunny", "male", "energetic"),
    VoiceProfile("mani", "Mani", "male", "friendly"),
    VoiceProfile("gokul", "Gokul", "male", "traditional"),
    VoiceProfile("vijay", "Vijay", "male", "authoritative"),
    VoiceProfile("shruti", "Shruti", "female", "calm"),
    VoiceProfile("suhani", "Suhani", "female", "cheerful"),
    VoiceProfile("mohit", "Mohit", "male", "casual"),
    VoiceProfile("kavitha", "Kavitha", "female", "knowledgeable"),
    VoiceProfile("rehan", "Rehan", "male", "expressive"),
    VoiceProfile("soham", "Soham", "male", "youthful"),
    VoiceProfile("rupali", "Rupali", "female", "warm"),
)

ROLE_VOICE_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "Host": ("aditya", "shubh", "neha", "ritu", "priya"),
    "Expert": ("dev", "abhilash", "vidya", "manisha", "kabir"),
    "Guest": ("rahul", "pooja", "simran", "rohan", "kavya"),
}

DEFAULT_ROLE_VOICES: dict[str, str] = {
    "Host": "aditya",
    "Expert": "dev",
    "Guest": "rahul",
}

_VOICES_BY_ID = {profile.provider_voice_id: profile for profile in VOICE_CATALOGUE}


def is_known_voice(voice_id: str) -> bool:
    return voice_id.strip().lower() in _VOICES_BY_ID


def normalize_voice_id(voice_id: str | None) -> str:
    """Return a catalogue voice id, falling back to the default speaker."""

    normalized = (voice_id or "").strip().lower()
    return normalized if normalized in _VOICES_BY_ID else DEFAULT_VOICE_ID


def resolve_voice(speaker: str, voices: Mapping[str, str] | None = None) -> str:
    """Resolve a script speaker role to a provider voice id.

    Explicit assignments win over built-in role defaults; unknown roles and
    unknown voice ids fall back to `aditya`.
    """

    assignments = {**DEFAULT_ROLE_VOICES, **(voices or {})}
    return normalize_voice_id(assignments.get(speaker))
