"""Language-model and provider HTTP integrations."""

from .prompts import PromptLibrary
from .sarvam_client import SarvamBaseClient, SarvamChatClient, SarvamSpeechClient
from .script_generator import ScriptGenerator

__all__ = [
    "PromptLibrary",
    "SarvamBaseClient",
    "SarvamChatClient",
    "SarvamSpeechClient",
    "ScriptGenerator",
]
