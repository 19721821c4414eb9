"""Command-line interface for docpod.

Responsibilities:
- Expose user-facing commands for extraction, scripting, synthesis, and full builds.
- Convert CLI arguments into `DocpodConfig` and run the pipeline.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
import yaml

from .cli_rendering import (
    echo_extraction_summary,
    echo_run_summary,
    echo_voice_catalogue,
    exit_with_command_error,
)
from .cli_runtime import resolve_provider_runtime_sources
from .config import ConfigLoader, DocpodConfig, RuntimeConfigSources
from .credentials import create_credential_store
from .errors import PipelineStageError
from .io.page_counter import PdfPageCounter
from .parsing import normalize_optional_string, parse_voice_assignments
from .pipeline import PodcastPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="docpod",
    no_args_is_help=True,
    help="Turn documents into multi-speaker podcast audio.",
)


OutOption = Annotated[
    Path | None,
    typer.Option("--out", help="Output directory (overrides config file value)."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]
LanguageOption = Annotated[
    str | None,
    typer.Option("--language", help="Language code such as `en-IN` or `hi-IN`."),
]
OutputFormatOption = Annotated[
    str | None,
    typer.Option("--output-format", help="Digitization output format: `md`, `html`, or `json`."),
]
ChunkSizeOption = Annotated[
    int | None,
    typer.Option("--chunk-size", min=1, help="Pages per chunk job for large documents."),
]
MaxConcurrencyOption = Annotated[
    int | None,
    typer.Option("--max-concurrency", min=1, help="Cap on simultaneously running chunk jobs."),
]
VoiceOption = Annotated[
    list[str] | None,
    typer.Option("--voice", help="Speaker voice assignment `Role=voice`; repeatable."),
]
BaseUrlOption = Annotated[
    str | None, typer.Option("--base-url", help="Provider API base URL override.")
]
ScriptModelOption = Annotated[
    str | None, typer.Option("--script-model", help="Script generation model override.")
]
TtsModelOption = Annotated[
    str | None, typer.Option("--tts-model", help="Speech synthesis model override.")
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="Provider API key override. Prefer `--prompt-api-key` to avoid shell history.",
    ),
]
PromptApiKeyOption = Annotated[
    bool,
    typer.Option("--prompt-api-key", help="Prompt for API key with hidden input (never echoed)."),
]
StoreApiKeyOption = Annotated[
    bool,
    typer.Option(
        "--store-api-key/--no-store-api-key",
        help="Persist CLI-entered API key to secure credential storage.",
    ),
]


class BuildProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_yaml_config(config_path: Path | None) -> DocpodConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except yaml.YAMLError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to parse config file `{config_path}`: {exc}",
            hint="Verify YAML syntax.",
        ) from exc


def _resolve_command_config(
    *,
    config_file: Path | None,
    input_path: Path | None,
    out: Path | None,
    language: str | None = None,
    output_format: str | None = None,
    chunk_size: int | None = None,
    max_concurrency: int | None = None,
    voices: list[str] | None = None,
    runtime_cli_values: dict[str, str] | None = None,
    runtime_secure_values: dict[str, str] | None = None,
) -> DocpodConfig:
    """Resolve effective command config from YAML defaults and explicit CLI overrides."""

    base = _load_yaml_config(config_file) or DocpodConfig()
    resolved_input = input_path if input_path is not None else base.input_path
    if resolved_input is None:
        raise PipelineStageError(
            stage="config",
            detail="Input path is required when `--config` does not set `input_path`.",
            hint="Pass the input file argument or use `--config <path.yaml>` with `input_path`.",
        )
    try:
        voice_overrides = parse_voice_assignments(voices)
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Use `--voice Host=aditya`; run `docpod voices` to list voice ids.",
        ) from exc

    config = replace(
        base,
        input_path=resolved_input,
        output_dir=out if out is not None else base.output_dir,
        language=normalize_optional_string(language) or base.language,
        output_format=(normalize_optional_string(output_format) or base.output_format).lower(),
        chunk_size_pages=chunk_size if chunk_size is not None else base.chunk_size_pages,
        max_concurrency=max_concurrency if max_concurrency is not None else base.max_concurrency,
        voices={**base.voices, **voice_overrides},
        runtime_sources=RuntimeConfigSources(
            cli=runtime_cli_values or {},
            secure=runtime_secure_values or {},
            env=os.environ,
        ),
        extra=dict(base.extra),
    )
    return config


def _runtime_sources(
    base_url: str | None,
    script_model: str | None,
    tts_model: str | None,
    api_key: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
) -> tuple[dict[str, str], dict[str, str]]:
    return resolve_provider_runtime_sources(
        base_url=base_url,
        script_model=script_model,
        tts_model=tts_model,
        api_key=api_key,
        prompt_api_key=prompt_api_key,
        store_api_key=store_api_key,
        credential_store_factory=create_credential_store,
    )


def _create_pipeline(command_name: str) -> PodcastPipeline:
    progress = BuildProgressIndicator(command_name=command_name)
    return PodcastPipeline(
        run_logger=RunLogger(),
        stage_progress_callback=progress.on_stage_start,
    )


@app.command("extract")
def extract_command(
    input_pdf: Annotated[
        Path | None,
        typer.Argument(help="Path to source PDF. Required unless provided by `--config`."),
    ] = None,
    out: OutOption = None,
    config_file: ConfigOption = None,
    language: LanguageOption = None,
    output_format: OutputFormatOption = None,
    chunk_size: ChunkSizeOption = None,
    max_concurrency: MaxConcurrencyOption = None,
    base_url: BaseUrlOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Digitize a document into text, splitting large documents into parallel jobs."""

    try:
        cli_values, secure_values = _runtime_sources(
            base_url, None, None, api_key, prompt_api_key, store_api_key
        )
        config = _resolve_command_config(
            config_file=config_file,
            input_path=input_pdf,
            out=out,
            language=language,
            output_format=output_format,
            chunk_size=chunk_size,
            max_concurrency=max_concurrency,
            runtime_cli_values=cli_values,
            runtime_secure_values=secure_values,
        )
        manifest = _create_pipeline("extract").run_extract(config)
    except Exception as exc:
        exit_with_command_error("extract", exc)

    echo_run_summary(manifest)
    echo_extraction_summary(manifest)


@app.command("script")
def script_command(
    input_text: Annotated[
        Path | None,
        typer.Argument(help="Path to extracted text. Required unless provided by `--config`."),
    ] = None,
    out: OutOption = None,
    config_file: ConfigOption = None,
    language: LanguageOption = None,
    base_url: BaseUrlOption = None,
    script_model: ScriptModelOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Generate a multi-speaker podcast script from extracted text."""

    try:
        cli_values, secure_values = _runtime_sources(
            base_url, script_model, None, api_key, prompt_api_key, store_api_key
        )
        config = _resolve_command_config(
            config_file=config_file,
            input_path=input_text,
            out=out,
            language=language,
            runtime_cli_values=cli_values,
            runtime_secure_values=secure_values,
        )
        manifest = _create_pipeline("script").run_script(config)
    except Exception as exc:
        exit_with_command_error("script", exc)

    echo_run_summary(manifest)
    typer.echo(f"Script title: {manifest.extra.get('script_title', '')}")
    if manifest.extra.get("script_fallback") == "true":
        typer.echo("Script source: fallback (model output was not valid JSON)")


@app.command("synthesize")
def synthesize_command(
    script_json: Annotated[
        Path | None,
        typer.Argument(help="Path to `script.json`. Required unless provided by `--config`."),
    ] = None,
    out: OutOption = None,
    config_file: ConfigOption = None,
    language: LanguageOption = None,
    voices: VoiceOption = None,
    base_url: BaseUrlOption = None,
    tts_model: TtsModelOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Synthesize every script segment in order and merge them into one WAV file."""

    try:
        cli_values, secure_values = _runtime_sources(
            base_url, None, tts_model, api_key, prompt_api_key, store_api_key
        )
        config = _resolve_command_config(
            config_file=config_file,
            input_path=script_json,
            out=out,
            language=language,
            voices=voices,
            runtime_cli_values=cli_values,
            runtime_secure_values=secure_values,
        )
        manifest = _create_pipeline("synthesize").run_synthesize(config)
    except Exception as exc:
        exit_with_command_error("synthesize", exc)

    echo_run_summary(manifest)
    typer.echo(f"Audio segments: {manifest.extra.get('audio_segments', '0')}")


@app.command("build")
def build_command(
    input_pdf: Annotated[
        Path | None,
        typer.Argument(help="Path to source PDF. Required unless provided by `--config`."),
    ] = None,
    out: OutOption = None,
    config_file: ConfigOption = None,
    language: LanguageOption = None,
    output_format: OutputFormatOption = None,
    chunk_size: ChunkSizeOption = None,
    max_concurrency: MaxConcurrencyOption = None,
    voices: VoiceOption = None,
    base_url: BaseUrlOption = None,
    script_model: ScriptModelOption = None,
    tts_model: TtsModelOption = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Run the full pipeline: extract, script, synthesize, and merge."""

    try:
        cli_values, secure_values = _runtime_sources(
            base_url, script_model, tts_model, api_key, prompt_api_key, store_api_key
        )
        config = _resolve_command_config(
            config_file=config_file,
            input_path=input_pdf,
            out=out,
            language=language,
            output_format=output_format,
            chunk_size=chunk_size,
            max_concurrency=max_concurrency,
            voices=voices,
            runtime_cli_values=cli_values,
            runtime_secure_values=secure_values,
        )
        manifest = _create_pipeline("build").run(config)
    except Exception as exc:
        exit_with_command_error("build", exc)

    echo_run_summary(manifest)
    echo_extraction_summary(manifest)
    typer.echo(f"Script title: {manifest.extra.get('script_title', '')}")


@app.command("page-count")
def page_count_command(
    input_pdf: Annotated[Path, typer.Argument(help="Path to source PDF.")],
    chunk_size: Annotated[
        int, typer.Option("--chunk-size", min=1, help="Pages per chunk job.")
    ] = 5,
) -> None:
    """Print the document page count and the planned chunk jobs."""

    try:
        data = input_pdf.read_bytes()
    except OSError as exc:
        exit_with_command_error(
            "page-count",
            PipelineStageError(
                stage="extract",
                detail=f"Cannot read input document `{input_pdf}`: {exc}",
                hint="Pass an existing, readable PDF path.",
            ),
        )

    page_count = PdfPageCounter().count(data)
    typer.echo(f"Pages: {page_count}")
    if page_count <= chunk_size:
        typer.echo("Extraction mode: single-shot")
        return
    chunk_total = -(-page_count // chunk_size)
    typer.echo(f"Extraction mode: batch ({chunk_total} chunks of up to {chunk_size} pages)")


@app.command("voices")
def voices_command() -> None:
    """List the available speaker voices."""

    echo_voice_catalogue()


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored CLI credentials."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "Sarvam API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        if credential_store.clear_api_key():
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    status = "present" if credential_store.get_api_key() is not None else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored Sarvam API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
