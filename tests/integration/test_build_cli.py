"""Integration tests for the end-to-end `build` command."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

from typer.testing import CliRunner

from docpod.audio.wav_header import WavHeader
from docpod.cli import app


def test_build_command_writes_all_artifacts_for_batched_document(
    tmp_path: Path,
    pdf_factory: Callable[[int], bytes],
    provider_calls: dict[str, list[str]],
) -> None:
    """Build should extract in chunks, write a script, and merge podcast audio."""

    source = tmp_path / "report.pdf"
    source.write_bytes(pdf_factory(7))
    out_dir = tmp_path / "out"

    result = CliRunner().invoke(
        app,
        ["build", str(source), "--out", str(out_dir), "--chunk-size", "5", "--language", "hi-IN"],
    )

    assert result.exit_code == 0, result.output
    assert "[progress] command=build | 1/5 stage=extract" in result.output
    assert "[progress] command=build / 2/5 stage=script" in result.output
    assert "Extraction mode: batch" in result.output
    assert "Chunks processed: 2" in result.output
    assert "Script title: Mocked Episode" in result.output
    assert sorted(provider_calls["upload"]) == ["chunk_001.pdf", "chunk_002.pdf"]
    assert provider_calls["speaker"] == ["aditya", "aditya", "dev", "rahul", "aditya"]

    run_dirs = list(out_dir.iterdir())
    assert len(run_dirs) == 1
    run_dir = run_dirs[0]
    assert run_dir.name.startswith("run-")

    extracted = (run_dir / "text" / "extracted.md").read_text(encoding="utf-8")
    assert extracted == (
        "<!-- Chunk 1 -->\n\nDigitized 5 page(s) of a document about rivers."
        "\n\n---\n\n"
        "<!-- Chunk 2 -->\n\nDigitized 2 page(s) of a document about rivers."
    )
    script = json.loads((run_dir / "script.json").read_text(encoding="utf-8"))
    assert script["title"] == "Mocked Episode"

    audio = (run_dir / "audio" / "podcast.wav").read_bytes()
    header = WavHeader.unpack(audio)
    assert header.data_size == 5 * 4800
    assert len(audio) == 44 + 5 * 4800

    manifest = json.loads((run_dir / "run_manifest.json").read_text(encoding="utf-8"))
    assert manifest["run_id"] == run_dir.name
    assert manifest["language"] == "hi-IN"
    assert manifest["extra"]["page_count"] == "7"
    assert manifest["extra"]["script_fallback"] == "false"
    assert manifest["extra"]["provider"] == "sarvam"
    assert set(manifest["artifacts"]) == {
        "extracted_text",
        "script",
        "podcast_audio",
        "segments",
    }


def test_build_command_uses_yaml_config_and_cli_overrides(
    tmp_path: Path,
    pdf_factory: Callable[[int], bytes],
    provider_calls: dict[str, list[str]],
) -> None:
    source = tmp_path / "report.pdf"
    source.write_bytes(pdf_factory(3))
    out_dir = tmp_path / "out"
    config_path = tmp_path / "docpod.yaml"
    config_path.write_text(
        "\n".join(
            [
                f"input_path: {source}",
                f"output_dir: {out_dir}",
                "script_model: config-script-model",
                "voices:",
                "  Host: priya",
                "  Expert: kabir",
            ]
        ),
        encoding="utf-8",
    )

    result = CliRunner().invoke(
        app,
        ["build", "--config", str(config_path), "--voice", "Guest=simran"],
    )

    assert result.exit_code == 0, result.output
    assert "Extraction mode: single-shot" in result.output
    assert provider_calls["upload"] == ["document.pdf"]
    assert provider_calls["chat"] == ["config-script-model"]
    assert provider_calls["speaker"] == ["priya", "priya", "kabir", "simran", "priya"]


def test_build_command_is_deterministic_for_identical_inputs(
    tmp_path: Path, pdf_factory: Callable[[int], bytes]
) -> None:
    source = tmp_path / "report.pdf"
    source.write_bytes(pdf_factory(2))
    args = ["build", str(source), "--out", str(tmp_path / "out")]

    first = CliRunner().invoke(app, args)
    second = CliRunner().invoke(app, args)

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert len(list((tmp_path / "out").iterdir())) == 1
