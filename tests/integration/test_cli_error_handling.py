"""Integration tests for CLI diagnostics on configuration and stage failures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from docpod.cli import app
from docpod.digitization.client import SarvamDigitizationClient
from docpod.models.datatypes import JobState, JobStatus
from docpod.pipeline import PodcastPipeline


@pytest.fixture
def source_pdf(tmp_path: Path, pdf_factory: Callable[[int], bytes]) -> Path:
    path = tmp_path / "report.pdf"
    path.write_bytes(pdf_factory(2))
    return path


def test_missing_config_file_is_reported_at_config_stage(tmp_path: Path) -> None:
    missing = tmp_path / "missing.yaml"

    result = CliRunner().invoke(app, ["build", "--config", str(missing)])

    assert result.exit_code == 1
    assert "build failed at stage `config`: Config file not found" in result.output
    assert "Hint: Provide an existing path" in result.output


def test_unknown_config_key_is_rejected(tmp_path: Path, source_pdf: Path) -> None:
    config_path = tmp_path / "docpod.yaml"
    config_path.write_text("narrator_mood: cheerful\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["extract", str(source_pdf), "--config", str(config_path)])

    assert result.exit_code == 1
    assert "extract failed at stage `config`: Invalid config file" in result.output
    assert "narrator_mood" in result.output


def test_missing_input_path_is_reported() -> None:
    result = CliRunner().invoke(app, ["extract"])

    assert result.exit_code == 1
    assert "Input path is required" in result.output


@pytest.mark.parametrize(
    ("voice_option", "expected"),
    [
        ("Host", "must use the `Role=voice` form"),
        ("Host=alloy", "Unknown voice `alloy`"),
    ],
)
def test_invalid_voice_assignment_is_rejected(
    tmp_path: Path,
    source_pdf: Path,
    provider_calls: dict[str, list[str]],
    voice_option: str,
    expected: str,
) -> None:
    result = CliRunner().invoke(
        app,
        ["build", str(source_pdf), "--out", str(tmp_path / "out"), "--voice", voice_option],
    )

    assert result.exit_code == 1
    assert "build failed at stage `config`" in result.output
    assert expected in result.output
    assert "docpod voices" in result.output
    assert provider_calls["upload"] == []


def test_unreadable_input_document_fails_extract_stage(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        app, ["extract", str(tmp_path / "absent.pdf"), "--out", str(tmp_path / "out")]
    )

    assert result.exit_code == 1
    assert "Cannot read input document" in result.output


def test_page_count_reports_unreadable_document(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["page-count", str(tmp_path / "absent.pdf")])

    assert result.exit_code == 1
    assert "page-count failed at stage `extract`: Cannot read input document" in result.output


def test_failed_digitization_job_is_reported_at_extract_stage(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, source_pdf: Path
) -> None:
    monkeypatch.setattr(
        SarvamDigitizationClient,
        "get_status",
        lambda self, job_id: JobStatus(state=JobState.FAILED, error_message="Corrupt upload"),
    )

    result = CliRunner().invoke(
        app, ["extract", str(source_pdf), "--out", str(tmp_path / "out")]
    )

    assert result.exit_code == 1
    assert "extract failed at stage `extract`" in result.output


def test_unexpected_error_is_rendered_without_stage(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, source_pdf: Path
) -> None:
    def _explode(self: PodcastPipeline, config: object) -> None:
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(PodcastPipeline, "run", _explode)

    result = CliRunner().invoke(app, ["build", str(source_pdf), "--out", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "build failed: disk on fire" in result.output


def test_credentials_flags_are_mutually_exclusive() -> None:
    result = CliRunner().invoke(app, ["credentials", "--set-api-key", "--clear-api-key"])

    assert result.exit_code == 1
    assert "cannot be used together" in result.output
