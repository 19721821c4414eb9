"""Prompt template library for podcast script generation.

Responsibilities:
- Centralize prompt construction for the script-writing LLM call.
- Keep prompts deterministic for a given language and document text.
"""

from __future__ import annotations


SCRIPT_SOURCE_CHAR_LIMIT = 8000


class PromptLibrary:
    """Build prompt strings for supported LLM tasks."""

    def script_system_prompt(self, language_code: str, language_name: str) -> str:
        """Return the system prompt asking for a strict-JSON multi-speaker script."""

        return (
            "You are an expert podcast script writer who creates engaging, conversational "
            f"episodes in {language_name} ({language_code}).\n\n"
            "Turn the provided document content into a podcast script where 2-3 speakers "
            "discuss the topic naturally.\n\n"
            "Guidelines:\n"
            "1. Give the episode a compelling title.\n"
            "2. Open with an introduction that hooks the listener.\n"
            "3. Structure the discussion into 4-6 conversational segments.\n"
            "4. Use the speakers Host, Expert, and Guest, each with a distinct personality.\n"
            "5. Include questions, reactions, transitions, and occasional humor.\n"
            "6. Explain complex ideas with analogies and examples.\n"
            f"7. Write naturally in {language_name}.\n"
            "8. Close with a memorable conclusion and call-to-action.\n\n"
            "JSON requirements:\n"
            "- Output MUST be valid JSON using double quotes for all strings.\n"
            "- Escape quotes inside text with a backslash and newlines as \\n.\n"
            "- No trailing commas.\n\n"
            "Output format:\n"
            "{\n"
            '  "title": "Episode Title",\n'
            '  "introduction": "Host opening monologue...",\n'
            '  "segments": [\n'
            '    {"speaker": "Host", "speakerRole": "Podcast Host", '
            '"text": "...", "tone": "enthusiastic"},\n'
            '    {"speaker": "Expert", "speakerRole": "Subject Matter Expert", '
            '"text": "...", "tone": "knowledgeable"}\n'
            "  ],\n"
            '  "conclusion": "Final thoughts and outro..."\n'
            "}\n\n"
            "Keep each segment between 50 and 150 words."
        )

    def script_user_prompt(self, document_text: str, language_name: str) -> str:
        """Return the user prompt carrying truncated document content."""

        return (
            "Based on the following document content, create an engaging podcast script "
            f"in {language_name}:\n\n"
            "DOCUMENT CONTENT:\n"
            f"{document_text[:SCRIPT_SOURCE_CHAR_LIMIT]}\n\n"
            "Create a conversational, informative script with multiple speakers "
            "discussing this topic."
        )
