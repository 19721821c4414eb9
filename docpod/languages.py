"""Language and output-format tables for provider requests.

Unknown codes fall back to English (`en-IN`) and unknown output formats to
Markdown, matching provider defaults.
"""

from __future__ import annotations


DEFAULT_LANGUAGE = "en-IN"
DEFAULT_OUTPUT_FORMAT = "md"
SUPPORTED_OUTPUT_FORMATS = ("md", "html", "json")

DIGITIZATION_LANGUAGES = frozenset(
    {
        "hi-IN",
        "en-IN",
        "bn-IN",
        "gu-IN",
        "kn-IN",
        "ml-IN",
        "mr-IN",
        "or-IN",
        "pa-IN",
        "ta-IN",
        "te-IN",
        "ur-IN",
        "as-IN",
        "bodo-IN",
        "doi-IN",
        "ks-IN",
        "kok-IN",
        "mai-IN",
        "mni-IN",
        "ne-IN",
        "sa-IN",
        "sat-IN",
        "sd-IN",
    }
)

TTS_LANGUAGE_NAMES = {
    "hi-IN": "Hindi",
    "en-IN": "English",
    "bn-IN": "Bengali",
    "gu-IN": "Gujarati",
    "kn-IN": "Kannada",
    "ml-IN": "Malayalam",
    "mr-IN": "Marathi",
    "od-IN": "Odia",
    "pa-IN": "Punjabi",
    "ta-IN": "Tamil",
    "te-IN": "Telugu",
}


def digitization_language(code: str) -> str:
    """Return a supported digitization language code for `code`."""

    return code if code in DIGITIZATION_LANGUAGES else DEFAULT_LANGUAGE


def digitization_output_format(output_format: str) -> str:
    """Return a supported digitization output format for `output_format`."""

    normalized = output_format.strip().lower()
    return normalized if normalized in SUPPORTED_OUTPUT_FORMATS else DEFAULT_OUTPUT_FORMAT


def tts_language(code: str) -> str:
    """Return a supported text-to-speech language code for `code`."""

    return code if code in TTS_LANGUAGE_NAMES else DEFAULT_LANGUAGE


def language_name(code: str) -> str:
    return TTS_LANGUAGE_NAMES.get(code, "English")
