"""Provider factory helpers for digitization, script, and speech stages.

Responsibilities:
- Resolve provider identifiers to concrete stage implementations.
- Keep orchestration independent from concrete provider class construction.
"""

from __future__ import annotations

from .config import ProviderRuntimeConfig
from .digitization.client import DigitizationService, SarvamDigitizationClient
from .llm.sarvam_client import SarvamChatClient, SarvamSpeechClient
from .llm.script_generator import ChatClient
from .tts.synthesizer import SpeechClient


class ProviderFactory:
    """Factory for provider-backed stage clients used by the pipeline."""

    @staticmethod
    def create_digitization_service(runtime: ProviderRuntimeConfig) -> DigitizationService:
        """Create a document-digitization job client for the configured provider."""

        if runtime.provider == "sarvam":
            return SarvamDigitizationClient(api_key=runtime.api_key, base_url=runtime.base_url)
        raise ValueError(f"Unsupported digitization provider `{runtime.provider}`.")

    @staticmethod
    def create_chat_client(runtime: ProviderRuntimeConfig) -> ChatClient:
        if runtime.provider == "sarvam":
            return SarvamChatClient(api_key=runtime.api_key, base_url=runtime.base_url)
        raise ValueError(f"Unsupported script provider `{runtime.provider}`.")

    @staticmethod
    def create_speech_client(runtime: ProviderRuntimeConfig) -> SpeechClient:
        if runtime.provider == "sarvam":
            return SarvamSpeechClient(api_key=runtime.api_key, base_url=runtime.base_url)
        raise ValueError(f"Unsupported TTS provider `{runtime.provider}`.")
