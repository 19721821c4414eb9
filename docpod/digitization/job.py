"""Digitization job lifecycle state machine and async runner.

Responsibilities:
- Model one remote job as an explicit `JobState` machine with a `poll()` transition.
- Drive the fixed lifecycle create -> upload -> start -> poll -> download -> unpack.
- Bound polling per job by attempt count and interval.

Key types:
- `DigitizationJob`: synchronous state machine over a `DigitizationService`.
- `DigitizationJobRunner`: async driver used as the batch job launcher.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

from loguru import logger

from ..errors import DigitizationJobError, JobLifecycleError
from ..models.datatypes import JobState
from ..telemetry.logger import RunLogger
from .archive import extract_text_from_archive
from .client import DigitizationService


DEFAULT_POLL_MAX_ATTEMPTS = 300
DEFAULT_POLL_INTERVAL_SECONDS = 2.0
_PROGRESS_LOG_EVERY_SECONDS = 60.0


class DigitizationJob:
    """One remote digitization job and its lifecycle state.

    Every lifecycle step checks the current state first and raises
    `JobLifecycleError` when invoked out of order.
    """

    def __init__(
        self,
        service: DigitizationService,
        job_id: str,
        *,
        chunk_index: int = 0,
        max_poll_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
    ) -> None:
        if max_poll_attempts <= 0:
            raise ValueError("`max_poll_attempts` must be a positive integer.")
        self.service = service
        self.job_id = job_id
        self.chunk_index = chunk_index
        self.max_poll_attempts = max_poll_attempts
        self.state = JobState.CREATED
        self.poll_attempts = 0
        self.error_message: str | None = None

    @classmethod
    def create(
        cls,
        service: DigitizationService,
        *,
        language: str,
        output_format: str,
        chunk_index: int = 0,
        max_poll_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
    ) -> DigitizationJob:
        """Create a remote job bound to language and output format."""

        job_id = service.create_job(language, output_format)
        return cls(
            service,
            job_id,
            chunk_index=chunk_index,
            max_poll_attempts=max_poll_attempts,
        )

    def upload(self, path: Path) -> None:
        self._require(JobState.CREATED, step="upload")
        self.service.upload_file(self.job_id, path)
        self.state = JobState.UPLOADED

    def start(self) -> None:
        self._require(JobState.UPLOADED, step="start")
        self.service.start_job(self.job_id)
        self.state = JobState.STARTED

    def poll(self) -> JobState:
        """Advance the state machine by one status observation.

        Terminal states are sticky. Once the attempt budget is spent the job
        moves to `TIMED_OUT` without another service call. A raising status
        call consumes an attempt but leaves the state unchanged.
        """

        if self.state.is_terminal:
            return self.state
        self._require(JobState.STARTED, JobState.POLLING, step="poll")
        if self.poll_attempts >= self.max_poll_attempts:
            self.state = JobState.TIMED_OUT
            return self.state

        self.poll_attempts += 1
        status = self.service.get_status(self.job_id)
        self.state = status.state
        self.error_message = status.error_message
        return self.state

    def download_output(self) -> bytes:
        if not self.state.is_success:
            raise JobLifecycleError(
                f"Job {self.job_id} cannot download output from state `{self.state.value}`.",
                chunk_index=self.chunk_index,
            )
        return self.service.download_output(self.job_id)

    def _require(self, *allowed: JobState, step: str) -> None:
        if self.state not in allowed:
            raise JobLifecycleError(
                f"Job {self.job_id} cannot {step} from state `{self.state.value}`.",
                chunk_index=self.chunk_index,
            )


class DigitizationJobRunner:
    """Run one document through a complete digitization job, asynchronously."""

    def __init__(
        self,
        service: DigitizationService,
        *,
        language: str,
        output_format: str,
        poll_max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        run_logger: RunLogger | None = None,
    ) -> None:
        self.service = service
        self.language = language
        self.output_format = output_format
        self.poll_max_attempts = poll_max_attempts
        self.poll_interval_seconds = poll_interval_seconds
        self._sleep = sleep
        self.run_logger = run_logger

    @property
    def ceiling_minutes(self) -> int:
        return round(self.poll_max_attempts * self.poll_interval_seconds / 60)

    async def run(self, document_path: Path, chunk_index: int = 0) -> str:
        """Digitize one document file and return the unpacked output text.

        Raises:
            DigitizationServiceError: If create, upload, start, or download fails.
            DigitizationJobError: If the job fails, times out, or returns a bad archive.
        """

        job = await asyncio.to_thread(
            DigitizationJob.create,
            self.service,
            language=self.language,
            output_format=self.output_format,
            chunk_index=chunk_index,
            max_poll_attempts=self.poll_max_attempts,
        )
        logger.debug("Chunk {}: job created ({})", chunk_index + 1, job.job_id)
        await asyncio.to_thread(job.upload, document_path)
        await asyncio.to_thread(job.start)

        state = await self.wait_until_terminal(job)
        if state is JobState.FAILED:
            raise DigitizationJobError(
                f"Job failed: {job.error_message or 'Unknown error'}",
                kind="failed",
                chunk_index=chunk_index,
            )
        if state is JobState.TIMED_OUT:
            raise DigitizationJobError(
                f"Timeout waiting for chunk {chunk_index + 1} after "
                f"{self.ceiling_minutes} minutes",
                kind="timeout",
                chunk_index=chunk_index,
            )
        if state is JobState.PARTIALLY_COMPLETED:
            logger.warning(
                "Chunk {}: job {} partially completed; using available output",
                chunk_index + 1,
                job.job_id,
            )

        archive = await asyncio.to_thread(job.download_output)
        return extract_text_from_archive(archive, self.output_format, chunk_index=chunk_index)

    async def wait_until_terminal(self, job: DigitizationJob) -> JobState:
        """Poll `job` at a fixed interval until it reaches a terminal state."""

        log_every = max(1, round(_PROGRESS_LOG_EVERY_SECONDS / max(self.poll_interval_seconds, 1e-9)))
        while True:
            try:
                state = await asyncio.to_thread(job.poll)
            except JobLifecycleError:
                raise
            except Exception as exc:
                logger.debug(
                    "Chunk {}: transient status error on attempt {}: {}",
                    job.chunk_index + 1,
                    job.poll_attempts,
                    exc,
                )
                if self.run_logger is not None:
                    self.run_logger.log_poll_retry(
                        job.chunk_index, job.poll_attempts, type(exc).__name__
                    )
                state = job.state
            if state.is_terminal:
                return state
            if job.poll_attempts % log_every == 0:
                if self.run_logger is not None:
                    self.run_logger.log_poll_progress(job.chunk_index, job.poll_attempts)
                else:
                    logger.info(
                        "Chunk {}: still processing after {} status checks",
                        job.chunk_index + 1,
                        job.poll_attempts,
                    )
            await self._sleep(self.poll_interval_seconds)
