"""Text-to-speech stage components."""

from .synthesizer import SpeechClient, SpeechSegmentSynthesizer
from .voices import DEFAULT_ROLE_VOICES, VOICE_CATALOGUE, VoiceProfile, resolve_voice

__all__ = [
    "DEFAULT_ROLE_VOICES",
    "SpeechClient",
    "SpeechSegmentSynthesizer",
    "VOICE_CATALOGUE",
    "VoiceProfile",
    "resolve_voice",
]
