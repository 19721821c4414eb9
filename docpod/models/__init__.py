"""Shared typed data models for docpod.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    AudioGenerationResult,
    AudioPayload,
    BatchResult,
    Chunk,
    ChunkResult,
    Document,
    ExtractionResult,
    JobState,
    JobStatus,
    PageRange,
    PodcastScript,
    RunManifest,
    ScriptSegment,
    SynthesizedSegment,
)

__all__ = [
    "AudioGenerationResult",
    "AudioPayload",
    "BatchResult",
    "Chunk",
    "ChunkResult",
    "Document",
    "ExtractionResult",
    "JobState",
    "JobStatus",
    "PageRange",
    "PodcastScript",
    "RunManifest",
    "ScriptSegment",
    "SynthesizedSegment",
]
