"""Sarvam document-digitization job API client.

Responsibilities:
- Wrap the remote job endpoints: create, upload, start, status, and download.
- Normalize provider job states into `JobStatus` observations.

All methods are blocking; async callers run them through `asyncio.to_thread`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from ..errors import DigitizationServiceError
from ..llm.sarvam_client import SarvamBaseClient
from ..models.datatypes import JobState, JobStatus


_JOB_ROOT = "/doc-digitization/job/v1"


class DigitizationService(Protocol):
    """Protocol for the remote digitization job service."""

    def create_job(self, language: str, output_format: str) -> str:
        """Create a job bound to language and output format and return its id."""

    def upload_file(self, job_id: str, path: Path) -> None:
        """Upload the job input document."""

    def start_job(self, job_id: str) -> None:
        """Start processing an uploaded job."""

    def get_status(self, job_id: str) -> JobStatus:
        """Return the current job status."""

    def download_output(self, job_id: str) -> bytes:
        """Return the job result archive bytes."""


class SarvamDigitizationClient(SarvamBaseClient):
    """requests-based client for Sarvam document-intelligence jobs."""

    def create_job(self, language: str, output_format: str) -> str:
        payload = self._request_json(
            "POST",
            _JOB_ROOT,
            payload={
                "job_parameters": {
                    "language": language,
                    "output_format": output_format,
                }
            },
        )
        job_id = payload.get("job_id")
        if not isinstance(job_id, str) or not job_id.strip():
            raise DigitizationServiceError(
                "Sarvam job creation response is missing `job_id`.",
                failure_kind="malformed_response",
            )
        return job_id.strip()

    def upload_file(self, job_id: str, path: Path) -> None:
        """Request a pre-signed upload URL for `path` and PUT the file bytes to it."""

        payload = self._request_json(
            "POST",
            f"{_JOB_ROOT}/upload-files",
            payload={"job_id": job_id, "files": [path.name]},
        )
        upload_url = self._file_url(payload, "upload_urls", path.name)
        self._send(
            "PUT",
            upload_url,
            headers={"x-ms-blob-type": "BlockBlob", "Content-Type": "application/pdf"},
            data=path.read_bytes(),
        )

    def start_job(self, job_id: str) -> None:
        self._request_json("POST", f"{_JOB_ROOT}/{job_id}/start")

    def get_status(self, job_id: str) -> JobStatus:
        payload = self._request_json("GET", f"{_JOB_ROOT}/{job_id}/status")
        raw_state = payload.get("job_state") or payload.get("jobState")
        error_message = payload.get("error_message")
        return JobStatus(
            state=JobState.from_service(raw_state if isinstance(raw_state, str) else None),
            error_message=error_message if isinstance(error_message, str) else None,
        )

    def download_output(self, job_id: str) -> bytes:
        """Resolve the result archive download URL and fetch its bytes."""

        payload = self._request_json("POST", f"{_JOB_ROOT}/{job_id}/download-files")
        download_url = self._file_url(payload, "download_urls", None)
        response = self._send("GET", download_url)
        return bytes(response.content)

    @staticmethod
    def _file_url(payload: dict[str, Any], key: str, file_name: str | None) -> str:
        """Pick a pre-signed file URL from an `upload_urls`/`download_urls` mapping."""

        urls = payload.get(key)
        if not isinstance(urls, dict) or not urls:
            raise DigitizationServiceError(
                f"Sarvam job response is missing `{key}`.",
                failure_kind="malformed_response",
            )
        entry = urls.get(file_name) if file_name is not None else None
        if entry is None:
            entry = next(iter(urls.values()))
        url = entry.get("file_url") if isinstance(entry, dict) else entry
        if not isinstance(url, str) or not url.strip():
            raise DigitizationServiceError(
                f"Sarvam job response has no usable URL in `{key}`.",
                failure_kind="malformed_response",
            )
        return url
