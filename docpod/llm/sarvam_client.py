"""Sarvam HTTP client utilities for script generation, speech, and job stages.

Responsibilities:
- Send minimal chat-completions and text-to-speech requests to Sarvam's REST API.
- Provide shared request/response helpers reused by the digitization job client.
- Raise actionable provider exceptions for pipeline-level error mapping.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
import socket
from typing import Any

import requests

from ..errors import DigitizationServiceError


DEFAULT_BASE_URL = "https://api.sarvam.ai"


class SarvamBaseClient:
    """Shared Sarvam HTTP settings and helpers used by stage-specific clients."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 60.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize Sarvam HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session if session is not None else requests.Session()

    def _require_api_key(self) -> None:
        """Require API key presence before issuing Sarvam requests."""

        if not self.api_key:
            raise DigitizationServiceError(
                "Missing Sarvam API key. Set `SARVAM_API_KEY`, use `--api-key`, or "
                "`--prompt-api-key`.",
                failure_kind="invalid_api_key",
            )

    def _auth_headers(self) -> dict[str, str]:
        return {"api-subscription-key": self.api_key}

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Send one HTTP request and map transport/HTTP failures consistently."""

        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                timeout=self.timeout_seconds,
                **kwargs,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = "Sarvam request timed out."
            else:
                detail = f"Sarvam request transport error: {self._short_message(str(exc))}"
            raise DigitizationServiceError(detail, failure_kind=failure_kind) from exc
        return response

    def _request_json(
        self,
        method: str,
        endpoint_path: str,
        *,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send an authenticated API request and decode a JSON object response."""

        self._require_api_key()
        response = self._send(
            method,
            f"{self.base_url}{endpoint_path}",
            headers={**self._auth_headers(), "Content-Type": "application/json"},
            json=payload,
        )
        if not response.content:
            return {}
        try:
            decoded = json.loads(bytes(response.content).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DigitizationServiceError(
                f"Sarvam returned invalid JSON for `{endpoint_path}`.",
                failure_kind="malformed_response",
            ) from exc
        if not isinstance(decoded, dict):
            raise DigitizationServiceError(
                f"Sarvam response for `{endpoint_path}` is not a JSON object.",
                failure_kind="malformed_response",
            )
        return decoded

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        return bytes(response.content or b"").decode("utf-8", errors="replace").strip()

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact subscription-key-like tokens from provider error content."""

        return re.sub(
            r"(?i)(api-subscription-key[\"':\s=]+)[A-Za-z0-9._-]{8,}",
            r"\1[redacted-key]",
            text,
        )

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> str:
        """Extract a concise provider-facing message from an error body."""

        if not body:
            return ""
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact_sensitive_tokens(body))

        message: str | None = None
        if isinstance(payload, dict):
            error_payload = payload.get("error")
            if isinstance(error_payload, dict):
                message_value = error_payload.get("message")
                if isinstance(message_value, str) and message_value.strip():
                    message = message_value.strip()
            elif isinstance(error_payload, str) and error_payload.strip():
                message = error_payload.strip()
        if message is None:
            message = body
        return cls._short_message(cls._redact_sensitive_tokens(message))

    @staticmethod
    def _classify_http_failure(status_code: int, provider_message: str) -> str:
        """Classify Sarvam HTTP errors into deterministic diagnostic kinds."""

        message_lower = provider_message.lower()
        if status_code in {401, 403} or "subscription key" in message_lower:
            return "invalid_api_key"
        if status_code == 429:
            return "rate_limited"
        if status_code in {408, 504} or "timeout" in message_lower or "timed out" in message_lower:
            return "timeout"
        if 400 <= status_code < 500:
            return "bad_request"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    @classmethod
    def _http_error_to_provider_error(cls, exc: requests.HTTPError) -> DigitizationServiceError:
        """Convert HTTP errors into normalized provider exceptions with metadata."""

        status_code = exc.response.status_code if exc.response is not None else 0
        provider_message = cls._extract_provider_message(cls._decode_error_body(exc))
        failure_kind = cls._classify_http_failure(status_code, provider_message)

        headline = {
            "invalid_api_key": "Sarvam authentication failed",
            "rate_limited": "Sarvam rate limit reached",
            "timeout": "Sarvam request timed out",
            "bad_request": "Sarvam rejected the request",
        }.get(failure_kind, "Sarvam request failed")

        if provider_message:
            detail = f"{headline} (HTTP {status_code}): {provider_message}"
        else:
            detail = f"{headline} (HTTP {status_code})."
        return DigitizationServiceError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
        )


class SarvamChatClient(SarvamBaseClient):
    """Minimal requests-based Sarvam chat-completions HTTP client."""

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.8,
        max_tokens: int = 4000,
    ) -> str:
        """Return the first assistant text response from a chat-completions request."""

        payload = self._request_json(
            "POST",
            "/v1/chat/completions",
            payload={
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise DigitizationServiceError(
                "Sarvam response missing non-empty `choices` list.",
                failure_kind="malformed_response",
            )
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise DigitizationServiceError(
                "Sarvam response message content is empty.",
                failure_kind="malformed_response",
            )
        return content


class SarvamSpeechClient(SarvamBaseClient):
    """Minimal requests-based Sarvam text-to-speech HTTP client."""

    def synthesize_speech(
        self,
        *,
        text: str,
        language_code: str,
        speaker: str,
        model: str = "bulbul:v3",
        pace: float = 1.0,
        temperature: float = 0.6,
    ) -> bytes:
        """Return decoded WAV bytes for the first synthesized audio clip."""

        payload = self._request_json(
            "POST",
            "/text-to-speech",
            payload={
                "text": text,
                "target_language_code": language_code,
                "speaker": speaker,
                "pace": pace,
                "temperature": temperature,
                "model": model,
            },
        )
        audios = payload.get("audios")
        if not isinstance(audios, list) or not audios or not isinstance(audios[0], str):
            raise DigitizationServiceError(
                "Sarvam speech response missing `audios` payload.",
                failure_kind="malformed_response",
            )
        try:
            audio_bytes = base64.b64decode(audios[0], validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DigitizationServiceError(
                "Sarvam speech response is not valid base64 audio.",
                failure_kind="malformed_response",
            ) from exc
        if not audio_bytes:
            raise DigitizationServiceError(
                "Sarvam speech response is empty.",
                failure_kind="malformed_response",
            )
        return audio_bytes
