"""Configuration model and loaders for docpod.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide deterministic precedence resolution for provider runtime settings.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `DocpodConfig`: normalized runtime settings for one run.
- `ProviderRuntimeConfig`: resolved provider/model runtime values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `DocpodConfig`.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .languages import DEFAULT_LANGUAGE, DEFAULT_OUTPUT_FORMAT, SUPPORTED_OUTPUT_FORMATS
from .llm.sarvam_client import DEFAULT_BASE_URL
from .parsing import (
    normalize_optional_string,
    normalize_string_map,
    parse_positive_float,
    parse_voice_assignments,
)
from .tts.voices import DEFAULT_ROLE_VOICES, is_known_voice


_DEFAULT_TTS_MODEL = "bulbul:v3"
_DEFAULT_SCRIPT_MODEL = "sarvam-m"
_SUPPORTED_PROVIDER_IDS = frozenset({"sarvam"})


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved provider endpoint, models, and credentials for one run."""

    provider: str
    base_url: str
    script_model: str
    tts_model: str
    api_key: str | None = None

    def as_manifest_metadata(self) -> dict[str, str]:
        """Return non-secret runtime metadata safe to persist in the manifest."""

        return {
            "provider": self.provider,
            "base_url": self.base_url,
            "model_script": self.script_model,
            "model_tts": self.tts_model,
        }


@dataclass(slots=True)
class DocpodConfig:
    """Runtime configuration for one docpod run.

    Attributes:
        input_path: Source document, text file, or script, depending on command.
        output_dir: Output directory for run artifacts.
        language: Requested language code, defaulting to `en-IN`.
        output_format: Digitization output format: `md`, `html`, or `json`.
        chunk_size_pages: Pages per chunk job for batch extraction.
        poll_max_attempts: Status checks allowed per digitization job.
        poll_interval_seconds: Delay between status checks.
        max_concurrency: Optional cap on simultaneously running chunk jobs.
        provider: Provider identifier.
        base_url: Provider REST API base URL.
        tts_model: Speech model identifier.
        tts_pace: Speech pace multiplier.
        tts_temperature: Speech sampling temperature.
        script_model: Chat model identifier for script generation.
        script_temperature: Chat sampling temperature.
        voices: Script speaker role to provider voice assignments.
        api_key: Optional provider API key.
        runtime_sources: Optional runtime source overrides injected by CLI.
        extra: Additional metadata for future extensions.
    """

    input_path: Path | None = None
    output_dir: Path = Path("out")
    language: str = DEFAULT_LANGUAGE
    output_format: str = DEFAULT_OUTPUT_FORMAT
    chunk_size_pages: int = 5
    poll_max_attempts: int = 300
    poll_interval_seconds: float = 2.0
    max_concurrency: int | None = None
    provider: str = "sarvam"
    base_url: str = DEFAULT_BASE_URL
    tts_model: str = _DEFAULT_TTS_MODEL
    tts_pace: float = 1.0
    tts_temperature: float = 0.6
    script_model: str = _DEFAULT_SCRIPT_MODEL
    script_temperature: float = 0.8
    voices: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ROLE_VOICES))
    api_key: str | None = None
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)
    extra: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate runtime configuration values before pipeline execution."""

        self._validate_provider_id(self.provider)
        self._require_non_empty(self.language, "language")
        self._require_non_empty(self.base_url, "base_url")
        self._require_non_empty(self.tts_model, "tts_model")
        self._require_non_empty(self.script_model, "script_model")
        if self.output_format not in SUPPORTED_OUTPUT_FORMATS:
            supported = ", ".join(SUPPORTED_OUTPUT_FORMATS)
            raise ValueError(
                f"Unsupported `output_format` value `{self.output_format}`; supported: {supported}."
            )
        if self.chunk_size_pages <= 0:
            raise ValueError("`chunk_size_pages` must be a positive integer.")
        if self.poll_max_attempts <= 0:
            raise ValueError("`poll_max_attempts` must be a positive integer.")
        if self.poll_interval_seconds <= 0:
            raise ValueError("`poll_interval_seconds` must be a positive number.")
        if self.max_concurrency is not None and self.max_concurrency <= 0:
            raise ValueError("`max_concurrency` must be a positive integer when set.")
        if self.tts_pace <= 0:
            raise ValueError("`tts_pace` must be a positive number.")
        if self.tts_temperature < 0 or self.script_temperature < 0:
            raise ValueError("Temperatures must not be negative.")
        for role, voice_id in sorted(self.voices.items()):
            if not is_known_voice(voice_id):
                raise ValueError(
                    f"Unknown voice `{voice_id}` for speaker `{role}`; run `docpod voices`."
                )

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider settings with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field value.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources
        resolved = ProviderRuntimeConfig(
            provider=self._resolve_runtime_value(
                "provider", "DOCPOD_PROVIDER", self.provider, resolved_sources
            ),
            base_url=self._resolve_runtime_value(
                "base_url", "DOCPOD_BASE_URL", self.base_url, resolved_sources
            ),
            script_model=self._resolve_runtime_value(
                "script_model", "DOCPOD_SCRIPT_MODEL", self.script_model, resolved_sources
            ),
            tts_model=self._resolve_runtime_value(
                "tts_model", "DOCPOD_TTS_MODEL", self.tts_model, resolved_sources
            ),
            api_key=self._lookup_runtime_value(
                "api_key", "SARVAM_API_KEY", self.api_key, resolved_sources
            ),
        )
        self._validate_provider_id(resolved.provider)
        return resolved

    def _resolve_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str:
        """Resolve a required runtime value from sources in precedence order."""

        value = self._lookup_runtime_value(key, env_key, default_value, sources)
        if value is None:
            raise ValueError(
                f"`{key}` could not be resolved from CLI, secure storage, env, or config."
            )
        return value

    @staticmethod
    def _lookup_runtime_value(
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, env_key),
        ):
            if lookup_key in mapping:
                value = normalize_optional_string(mapping.get(lookup_key))
                if value is not None:
                    return value
        return normalize_optional_string(default_value)

    @staticmethod
    def _validate_provider_id(provider_id: str) -> None:
        """Validate provider identifiers against currently supported providers."""

        if provider_id not in _SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(_SUPPORTED_PROVIDER_IDS))
            raise ValueError(f"Unsupported `provider` value `{provider_id}`; supported: {supported}.")

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


def _parse_positive_int(value: object, label: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{label} must be a positive integer.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        try:
            parsed = int(normalized) if normalized is not None else 0
        except ValueError as exc:
            raise ValueError(f"{label} must be a positive integer.") from exc
    if parsed <= 0:
        raise ValueError(f"{label} must be a positive integer.")
    return parsed


def _parse_non_negative_float(value: object, label: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{label} must be a non-negative number.")
    normalized = normalize_optional_string(value)
    try:
        parsed = float(normalized) if normalized is not None else -1.0
    except ValueError as exc:
        raise ValueError(f"{label} must be a non-negative number.") from exc
    if parsed < 0:
        raise ValueError(f"{label} must be a non-negative number.")
    return parsed


class ConfigLoader:
    """Factory methods for creating `DocpodConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "input_path",
            "output_dir",
            "language",
            "output_format",
            "chunk_size_pages",
            "poll_max_attempts",
            "poll_interval_seconds",
            "max_concurrency",
            "provider",
            "base_url",
            "tts_model",
            "tts_pace",
            "tts_temperature",
            "script_model",
            "script_temperature",
            "voices",
            "api_key",
            "extra",
        }
    )
    _ENV_KEYS = {
        "input_path": "DOCPOD_INPUT_PATH",
        "output_dir": "DOCPOD_OUTPUT_DIR",
        "language": "DOCPOD_LANGUAGE",
        "output_format": "DOCPOD_OUTPUT_FORMAT",
        "chunk_size_pages": "DOCPOD_CHUNK_SIZE_PAGES",
        "poll_max_attempts": "DOCPOD_POLL_MAX_ATTEMPTS",
        "poll_interval_seconds": "DOCPOD_POLL_INTERVAL_SECONDS",
        "max_concurrency": "DOCPOD_MAX_CONCURRENCY",
        "provider": "DOCPOD_PROVIDER",
        "base_url": "DOCPOD_BASE_URL",
        "tts_model": "DOCPOD_TTS_MODEL",
        "tts_pace": "DOCPOD_TTS_PACE",
        "tts_temperature": "DOCPOD_TTS_TEMPERATURE",
        "script_model": "DOCPOD_SCRIPT_MODEL",
        "script_temperature": "DOCPOD_SCRIPT_TEMPERATURE",
        "voices": "DOCPOD_VOICES",
        "api_key": "SARVAM_API_KEY",
    }
    _RUNTIME_ENV_KEYS = frozenset(
        {
            "DOCPOD_PROVIDER",
            "DOCPOD_BASE_URL",
            "DOCPOD_SCRIPT_MODEL",
            "DOCPOD_TTS_MODEL",
            "SARVAM_API_KEY",
        }
    )
    _FIELD_PARSERS: dict[str, Callable[[object, str], object]] = {
        "input_path": lambda value, label: Path(str(value).strip()),
        "output_dir": lambda value, label: Path(str(value).strip()),
        "output_format": lambda value, label: str(value).strip().lower(),
        "chunk_size_pages": _parse_positive_int,
        "poll_max_attempts": _parse_positive_int,
        "max_concurrency": _parse_positive_int,
        "poll_interval_seconds": parse_positive_float,
        "tts_pace": parse_positive_float,
        "tts_temperature": _parse_non_negative_float,
        "script_temperature": _parse_non_negative_float,
    }

    @staticmethod
    def from_yaml(path: Path) -> DocpodConfig:
        """Create a validated config from a YAML file.

        Raises:
            FileNotFoundError: If `path` does not exist.
            ValueError: If the payload has unsupported keys or invalid values.
            yaml.YAMLError: If the file is not valid YAML.
        """

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> DocpodConfig:
        """Create a validated config from `DOCPOD_*` and `SARVAM_API_KEY` variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload = {
            key: env_map[env_key]
            for key, env_key in ConfigLoader._ENV_KEYS.items()
            if env_key in env_map and normalize_optional_string(env_map[env_key]) is not None
        }
        config = ConfigLoader._build_config_from_mapping(payload, source_label="Environment")
        config.runtime_sources = RuntimeConfigSources(
            env={
                key: value
                for key, value in env_map.items()
                if key in ConfigLoader._RUNTIME_ENV_KEYS
                and normalize_optional_string(value) is not None
            }
        )
        return config

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> DocpodConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        values: dict[str, Any] = {}
        for key, raw_value in payload.items():
            if key in {"voices", "extra"}:
                continue
            if normalize_optional_string(raw_value) is None:
                continue
            parser = ConfigLoader._FIELD_PARSERS.get(key)
            label = f"{source_label} field `{key}`"
            values[key] = parser(raw_value, label) if parser else str(raw_value).strip()

        config = DocpodConfig(**values)
        config.voices = {
            **DEFAULT_ROLE_VOICES,
            **ConfigLoader._voice_map(payload.get("voices"), source_label),
        }
        config.extra = ConfigLoader._optional_string_map(
            payload.get("extra"), f"{source_label} field `extra`"
        )
        config.validate()
        return config

    @staticmethod
    def _voice_map(raw: object, source_label: str) -> dict[str, str]:
        """Read voice assignments from a mapping or `Role=voice` list/string."""

        if raw is None:
            return {}
        if isinstance(raw, Mapping):
            return {
                role: voice.lower()
                for role, voice in ConfigLoader._optional_string_map(
                    raw, f"{source_label} field `voices`"
                ).items()
            }
        if isinstance(raw, str | list | tuple):
            try:
                return parse_voice_assignments(
                    raw if isinstance(raw, str) else [str(entry) for entry in raw]
                )
            except ValueError as exc:
                raise ValueError(f"{source_label} field `voices`: {exc}") from exc
        raise ValueError(f"{source_label} field `voices` must be a mapping or list.")

    @staticmethod
    def _optional_string_map(raw: object, source_label: str) -> dict[str, str]:
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} must be a mapping/object.")
        try:
            return normalize_string_map(raw, "mapping")
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc
