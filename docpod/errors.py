"""Domain exceptions for pipeline, provider, and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class PdfSplitError(RuntimeError):
    """Raised when a source document cannot be parsed for page splitting."""


class DigitizationServiceError(RuntimeError):
    """Raised when a digitization or speech provider request fails."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
    ) -> None:
        """Initialize provider error metadata for stage-aware diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code


class DigitizationJobError(RuntimeError):
    """Raised when one digitization job ends unsuccessfully.

    Attributes:
        kind: One of `failed`, `timeout`, `archive`, or `lifecycle`.
        chunk_index: 0-based chunk index the job was processing, when known.
    """

    def __init__(self, message: str, *, kind: str, chunk_index: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.chunk_index = chunk_index


class JobLifecycleError(DigitizationJobError):
    """Raised when a job step is invoked from a state that does not allow it."""

    def __init__(self, message: str, *, chunk_index: int | None = None) -> None:
        super().__init__(message, kind="lifecycle", chunk_index=chunk_index)


class SegmentSynthesisError(RuntimeError):
    """Raised when one narration segment cannot be synthesized."""

    def __init__(self, *, segment_number: int, segment_total: int, detail: str) -> None:
        """Initialize a segment-scoped failure with its 1-based position."""

        super().__init__(
            f"Failed to generate audio for segment {segment_number}/{segment_total}: {detail}"
        )
        self.segment_number = segment_number
        self.segment_total = segment_total
        self.detail = detail


class AudioFormatMismatchError(ValueError):
    """Raised when audio payloads with different sample formats are merged."""
