"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level and chunk-level runtime logs.
- Route all records through `loguru` with a plain single-line format.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic phase logs for CLI-observable pipeline activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stdout
        logger.remove()
        logger.add(self._sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        logger.log(level, line)

    def log_stage_start(self, stage: str) -> None:
        """Emit a stage-start runtime event."""

        self._emit("INFO", "start", stage)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete runtime event."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure runtime event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)

    def log_chunk_start(self, chunk_index: int, pages: str) -> None:
        self._emit("INFO", "chunk_start", "extract", chunk=chunk_index + 1, pages=pages)

    def log_chunk_complete(self, chunk_index: int, chars: int) -> None:
        self._emit("INFO", "chunk_complete", "extract", chunk=chunk_index + 1, chars=chars)

    def log_chunk_failure(self, chunk_index: int, error_type: str) -> None:
        """Emit a chunk-failure event; the batch keeps running."""

        self._emit("WARNING", "chunk_failure", "extract", chunk=chunk_index + 1, error_type=error_type)

    def log_segment_complete(self, segment_number: int, segment_total: int, speaker: str) -> None:
        self._emit(
            "INFO",
            "segment_complete",
            "tts",
            segment=f"{segment_number}/{segment_total}",
            speaker=speaker,
        )

    def log_poll_retry(self, chunk_index: int, attempt: int, error_type: str) -> None:
        """Emit a transient status-poll failure; polling continues."""

        self._emit(
            "INFO",
            "poll_retry",
            "extract",
            chunk=chunk_index + 1,
            attempt=attempt,
            error_type=error_type,
        )

    def log_poll_progress(self, chunk_index: int, attempt: int) -> None:
        self._emit("INFO", "poll_progress", "extract", chunk=chunk_index + 1, attempt=attempt)
