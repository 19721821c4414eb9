"""Parallel fan-out/fan-in processing of document chunks.

Responsibilities:
- Materialize chunk documents inside a request-scoped `ChunkWorkspace`.
- Launch every chunk job concurrently and collect tagged `ChunkResult`s.
- Restore chunk order and merge successful texts with format-specific separators.
- Remove transient chunk files on every exit path.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from loguru import logger

from ..io.workspace import ChunkWorkspace
from ..models.datatypes import BatchResult, Chunk, ChunkResult
from ..telemetry.logger import RunLogger


JobLauncher = Callable[[Path, int], Awaitable[str]]

MARKDOWN_SEPARATOR = "\n\n---\n\n"
PAGE_BREAK_SEPARATOR = "\n\n<!-- Page Break -->\n\n"


def chunk_separator(output_format: str) -> str:
    """Return the separator placed between merged chunk texts."""

    return MARKDOWN_SEPARATOR if output_format == "md" else PAGE_BREAK_SEPARATOR


def merge_chunk_texts(results: Sequence[ChunkResult], output_format: str) -> str:
    """Merge successful chunk texts in `chunk_index` order.

    Each text is prefixed with a 1-based `<!-- Chunk N -->` marker so readers can
    see which chunk contributed it and which chunks are missing.
    """

    ordered = sorted(
        (result for result in results if result.success),
        key=lambda result: result.chunk_index,
    )
    return chunk_separator(output_format).join(
        f"<!-- Chunk {result.chunk_index + 1} -->\n\n{result.text}" for result in ordered
    )


class BatchOrchestrator:
    """Run chunk jobs concurrently and merge their ordered outputs."""

    def __init__(
        self,
        output_format: str,
        *,
        max_concurrency: int | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        if max_concurrency is not None and max_concurrency <= 0:
            raise ValueError("`max_concurrency` must be a positive integer when set.")
        self.output_format = output_format
        self.max_concurrency = max_concurrency
        self.run_logger = run_logger

    async def process_batch(
        self,
        chunks: Sequence[Chunk],
        job_launcher: JobLauncher,
        *,
        workspace: ChunkWorkspace | None = None,
    ) -> BatchResult:
        """Process all chunks and return the merged result.

        A failing chunk never aborts its siblings; it is recorded as a failed
        `ChunkResult` and left out of the merged text. Chunk files are deleted
        once every job has settled, whatever the outcome.
        """

        owned_workspace = workspace is None
        active_workspace = workspace if workspace is not None else ChunkWorkspace()
        active_workspace.open()
        try:
            chunk_paths = [(chunk, active_workspace.write_chunk(chunk)) for chunk in chunks]
            semaphore = (
                asyncio.Semaphore(self.max_concurrency)
                if self.max_concurrency is not None
                else None
            )
            results = await asyncio.gather(
                *(
                    self._run_chunk(chunk, path, job_launcher, semaphore)
                    for chunk, path in chunk_paths
                )
            )
        finally:
            if owned_workspace:
                active_workspace.cleanup()

        succeeded = sum(1 for result in results if result.success)
        logger.debug("Batch finished: {}/{} chunks succeeded", succeeded, len(results))
        return BatchResult(
            merged_text=merge_chunk_texts(results, self.output_format),
            succeeded_count=succeeded,
            total_count=len(results),
            results=tuple(sorted(results, key=lambda result: result.chunk_index)),
        )

    async def _run_chunk(
        self,
        chunk: Chunk,
        path: Path,
        job_launcher: JobLauncher,
        semaphore: asyncio.Semaphore | None,
    ) -> ChunkResult:
        """Run one chunk job and convert its outcome into a tagged result."""

        if semaphore is None:
            return await self._launch(chunk, path, job_launcher)
        async with semaphore:
            return await self._launch(chunk, path, job_launcher)

    async def _launch(self, chunk: Chunk, path: Path, job_launcher: JobLauncher) -> ChunkResult:
        if self.run_logger is not None:
            self.run_logger.log_chunk_start(chunk.index, chunk.page_range.label())
        try:
            text = await job_launcher(path, chunk.index)
        except Exception as exc:
            logger.warning("Chunk {} failed: {}", chunk.index + 1, exc)
            if self.run_logger is not None:
                self.run_logger.log_chunk_failure(chunk.index, type(exc).__name__)
            return ChunkResult.failed(chunk.index, str(exc))

        if self.run_logger is not None:
            self.run_logger.log_chunk_complete(chunk.index, len(text))
        return ChunkResult.succeeded(chunk.index, text)
