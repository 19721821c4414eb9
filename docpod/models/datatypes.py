"""Core datatypes shared across docpod modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Encode the digitization job state machine vocabulary.

Key types:
- `Document`, `PageRange`, `Chunk`, `JobState`, `JobStatus`, `ChunkResult`,
  `BatchResult`, `ExtractionResult`, `ScriptSegment`, `PodcastScript`,
  `AudioPayload`, `SynthesizedSegment`, `AudioGenerationResult`, and `RunManifest`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping


@dataclass(frozen=True, slots=True)
class Document:
    """Raw source document bytes with their authoritative page count."""

    data: bytes
    page_count: int


@dataclass(frozen=True, slots=True)
class PageRange:
    """Half-open 0-based page interval `[start, end)`."""

    start: int
    end: int

    @property
    def page_count(self) -> int:
        return self.end - self.start

    def label(self) -> str:
        """Return a human-readable 1-based inclusive label such as `pages 6-10`."""

        return f"pages {self.start + 1}-{self.end}"


@dataclass(frozen=True, slots=True)
class Chunk:
    """A contiguous page-range sub-document processed as one digitization job.

    Attributes:
        index: 0-based chunk ordinal, contiguous across the parent document.
        page_range: Parent-document pages contained in this chunk.
        data: Serialized sub-document containing only `page_range`.
    """

    index: int
    page_range: PageRange
    data: bytes

    @property
    def filename(self) -> str:
        """Return the deterministic 1-based chunk filename."""

        return f"chunk_{self.index + 1:03d}.pdf"


class JobState(str, Enum):
    """Lifecycle states of one digitization job."""

    CREATED = "Created"
    UPLOADED = "Uploaded"
    STARTED = "Started"
    POLLING = "Polling"
    COMPLETED = "Completed"
    PARTIALLY_COMPLETED = "PartiallyCompleted"
    FAILED = "Failed"
    TIMED_OUT = "TimedOut"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES

    @property
    def is_success(self) -> bool:
        return self in _SUCCESS_STATES

    @classmethod
    def from_service(cls, raw_state: str | None) -> JobState:
        """Map a provider-reported state string onto a polling-side state.

        Unknown or in-progress provider states (`Pending`, `Running`, ...) map to
        `POLLING` so the caller keeps waiting.
        """

        normalized = (raw_state or "").strip()
        for state in (cls.COMPLETED, cls.PARTIALLY_COMPLETED, cls.FAILED):
            if normalized.lower() == state.value.lower():
                return state
        return cls.POLLING


_TERMINAL_STATES = frozenset(
    {
        JobState.COMPLETED,
        JobState.PARTIALLY_COMPLETED,
        JobState.FAILED,
        JobState.TIMED_OUT,
    }
)
_SUCCESS_STATES = frozenset({JobState.COMPLETED, JobState.PARTIALLY_COMPLETED})


@dataclass(frozen=True, slots=True)
class JobStatus:
    """One status observation returned by the digitization service."""

    state: JobState
    error_message: str | None = None


@dataclass(frozen=True, slots=True)
class ChunkResult:
    """Tagged outcome of one chunk job; ordered by `chunk_index`."""

    chunk_index: int
    text: str
    success: bool
    error: str | None = None

    @classmethod
    def succeeded(cls, chunk_index: int, text: str) -> ChunkResult:
        return cls(chunk_index=chunk_index, text=text, success=True)

    @classmethod
    def failed(cls, chunk_index: int, error: str) -> ChunkResult:
        return cls(chunk_index=chunk_index, text="", success=False, error=error)


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Merged text and outcome counts for one fan-out/fan-in batch."""

    merged_text: str
    succeeded_count: int
    total_count: int
    results: tuple[ChunkResult, ...] = field(default_factory=tuple)

    @property
    def failed_count(self) -> int:
        return self.total_count - self.succeeded_count


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Response contract for one document extraction request.

    Attributes:
        page_count: Authoritative source page count.
        used_batch_processing: Whether the document was split into chunk jobs.
        merged_text: Ordered extracted text.
        chunks_processed: Number of successful jobs contributing text.
        language: Requested language code.
        output_format: Requested output format (`md`, `html`, or `json`).
    """

    page_count: int
    used_batch_processing: bool
    merged_text: str
    chunks_processed: int
    language: str
    output_format: str


@dataclass(frozen=True, slots=True)
class ScriptSegment:
    """One spoken turn of a podcast script."""

    speaker: str
    text: str
    speaker_role: str = ""
    tone: str | None = None


@dataclass(frozen=True, slots=True)
class PodcastScript:
    """Generated podcast script with fixed introduction and conclusion."""

    title: str
    introduction: str
    segments: tuple[ScriptSegment, ...]
    conclusion: str

    def narration_order(self) -> list[ScriptSegment]:
        """Return segments in synthesis order: introduction, body, conclusion."""

        return [
            ScriptSegment(speaker="Host", speaker_role="Podcast Host", text=self.introduction),
            *self.segments,
            ScriptSegment(speaker="Host", speaker_role="Podcast Host", text=self.conclusion),
        ]


@dataclass(frozen=True, slots=True)
class AudioPayload:
    """Encoded audio split into container header and raw sample data.

    Headerless payloads carry an empty `header`; their bytes are all data.
    """

    header: bytes = b""
    data: bytes = b""

    def to_bytes(self) -> bytes:
        return self.header + self.data

    def __len__(self) -> int:
        return len(self.header) + len(self.data)


@dataclass(frozen=True, slots=True)
class SynthesizedSegment:
    """One synthesized narration segment kept for playback and inspection."""

    index: int
    speaker: str
    voice_id: str
    text: str
    payload: AudioPayload


@dataclass(frozen=True, slots=True)
class AudioGenerationResult:
    """Merged podcast audio together with its ordered source segments."""

    audio: AudioPayload
    segments: tuple[SynthesizedSegment, ...]


@dataclass(frozen=True, slots=True)
class RunManifest:
    """Deterministic record of a docpod CLI run.

    Attributes:
        run_id: Stable run identifier.
        config_hash: Hash of canonical run configuration.
        source_path: Input document or script path.
        language: Requested language code.
        artifacts: Written artifact paths keyed by artifact name.
        extra: Additional run metadata.
    """

    run_id: str
    config_hash: str
    source_path: Path
    language: str
    artifacts: Mapping[str, str] = field(default_factory=dict)
    extra: Mapping[str, str] = field(default_factory=dict)
