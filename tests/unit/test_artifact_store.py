"""Unit tests for run artifact persistence."""

from __future__ import annotations

import json
from pathlib import Path

from docpod.io.storage import ArtifactStore
from docpod.models.datatypes import AudioPayload


def test_artifact_store_writes_nested_text_json_and_audio(tmp_path: Path) -> None:
    store = ArtifactStore(tmp_path / "run-abc")

    text_path = store.save_text(Path("text/extracted.md"), "Résumé")
    json_path = store.save_json(Path("script.json"), {"title": "Ünïcode", "a": 1})
    audio_path = store.save_audio(
        Path("audio/podcast.wav"), AudioPayload(header=b"HEAD", data=b"DATA")
    )
    raw_path = store.save_audio(Path("audio/raw.bin"), b"\x01\x02")

    assert text_path == tmp_path / "run-abc" / "text" / "extracted.md"
    assert text_path.read_text(encoding="utf-8") == "Résumé"
    json_text = json_path.read_text(encoding="utf-8")
    assert "Ünïcode" in json_text
    assert json_text.index('"a"') < json_text.index('"title"')
    assert json.loads(json_text) == {"title": "Ünïcode", "a": 1}
    assert audio_path.read_bytes() == b"HEADDATA"
    assert raw_path.read_bytes() == b"\x01\x02"
