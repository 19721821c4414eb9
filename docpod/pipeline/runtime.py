"""Runtime configuration and run-identity helpers for the docpod pipeline.

Responsibilities:
- Validate pipeline configuration before execution.
- Resolve provider runtime values with precedence rules.
- Compute deterministic configuration hashes and run identifiers.
"""

from __future__ import annotations

import json
import os
from hashlib import sha256

from ..config import DocpodConfig, ProviderRuntimeConfig, RuntimeConfigSources
from ..errors import PipelineStageError
from ..io.storage import ArtifactStore


class PipelineRuntimeMixin:
    """Provide runtime/config helper methods for pipeline orchestration."""

    def _prepare_run(
        self, config: DocpodConfig, command: str
    ) -> tuple[str, str, ArtifactStore]:
        """Create deterministic run identifiers and artifact storage for a config."""

        self._validate_config(config)
        if config.input_path is None:
            raise PipelineStageError(
                stage="config",
                detail="Input path is required.",
                hint="Pass an input file argument or set `input_path` in `--config`.",
            )
        config_hash = self._config_hash(config, command)
        run_id = f"run-{config_hash[:12]}"
        store = ArtifactStore(config.output_dir / run_id)
        return run_id, config_hash, store

    def _validate_config(self, config: DocpodConfig) -> None:
        """Validate top-level configuration and map failures to stage-aware error."""

        try:
            config.validate()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Update command options or config values and rerun the command.",
            ) from exc

    def _resolve_runtime_config(self, config: DocpodConfig) -> ProviderRuntimeConfig:
        """Resolve runtime provider settings with deterministic source precedence."""

        try:
            env_source = config.runtime_sources.env or os.environ
            runtime_sources = RuntimeConfigSources(
                cli=config.runtime_sources.cli,
                secure=config.runtime_sources.secure,
                env=env_source,
            )
            return config.resolved_provider_runtime(runtime_sources)
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint=(
                    "Set a supported provider and non-empty model values in CLI, "
                    "secure storage, environment, or config defaults."
                ),
            ) from exc

    def _config_hash(self, config: DocpodConfig, command: str) -> str:
        """Compute deterministic hash for run-defining configuration fields."""

        payload = {
            "command": command,
            "input_path": str(config.input_path),
            "output_dir": str(config.output_dir),
            "language": config.language,
            "output_format": config.output_format,
            "chunk_size_pages": config.chunk_size_pages,
            "provider": config.provider,
            "tts_model": config.tts_model,
            "tts_pace": config.tts_pace,
            "tts_temperature": config.tts_temperature,
            "script_model": config.script_model,
            "script_temperature": config.script_temperature,
            "voices": dict(config.voices),
            "extra": dict(config.extra),
        }
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return sha256(canonical.encode("utf-8")).hexdigest()
