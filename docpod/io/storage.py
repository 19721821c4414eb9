"""Artifact storage abstraction.

Responsibilities:
- Provide deterministic filesystem storage for extracted text, scripts, and audio.
- Resolve artifact paths under one run root.
"""

from __future__ import annotations

import json
from pathlib import Path

from ..models.datatypes import AudioPayload


class ArtifactStore:
    """Filesystem-backed run artifact store."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a run root directory."""

        self.root = root

    def _prepare(self, relative_path: Path) -> Path:
        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def save_text(self, relative_path: Path, content: str) -> Path:
        """Save text content and return final path."""

        path = self._prepare(relative_path)
        path.write_text(content, encoding="utf-8")
        return path

    def save_json(self, relative_path: Path, payload: dict[str, object]) -> Path:
        """Save JSON-serializable payload and return final path."""

        path = self._prepare(relative_path)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        return path

    def save_audio(self, relative_path: Path, payload: AudioPayload | bytes) -> Path:
        """Save an audio payload (header and data) and return final path."""

        path = self._prepare(relative_path)
        data = payload.to_bytes() if isinstance(payload, AudioPayload) else payload
        path.write_bytes(data)
        return path
