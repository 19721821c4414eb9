"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics
and run summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import RunManifest
from .tts.voices import ROLE_VOICE_SUGGESTIONS, VOICE_CATALOGUE


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_run_summary(manifest: RunManifest) -> None:
    """Print run id, written artifacts, and manifest location."""

    typer.echo(f"Run id: {manifest.run_id}")
    for name in sorted(manifest.artifacts):
        if name == "manifest":
            continue
        typer.echo(f"Artifact {name}: {manifest.artifacts[name]}")
    typer.echo(f"Manifest: {manifest.artifacts.get('manifest', '(not written)')}")


def echo_extraction_summary(manifest: RunManifest) -> None:
    """Print page count and batch processing metadata."""

    extra = manifest.extra
    mode = "batch" if extra.get("used_batch_processing") == "true" else "single-shot"
    typer.echo(f"Pages: {extra.get('page_count', 'unknown')}")
    typer.echo(f"Extraction mode: {mode}")
    typer.echo(f"Chunks processed: {extra.get('chunks_processed', '0')}")


def echo_voice_catalogue() -> None:
    """Print provider voices with role suggestions marked."""

    suggested = {
        voice_id: role
        for role, voice_ids in ROLE_VOICE_SUGGESTIONS.items()
        for voice_id in voice_ids
    }
    for profile in VOICE_CATALOGUE:
        role = suggested.get(profile.provider_voice_id)
        suffix = f" (suggested: {role})" if role else ""
        typer.echo(
            f"{profile.provider_voice_id}: {profile.name}, {profile.gender}, "
            f"{profile.style}{suffix}"
        )
