"""Manifest-writing helpers for the docpod pipeline.

Responsibilities:
- Build the typed `RunManifest` record for a completed run.
- Persist manifest payload to a deterministic artifact path.
- Map unexpected failures to stage-aware manifest errors.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from ..config import DocpodConfig
from ..errors import PipelineStageError
from ..io.storage import ArtifactStore
from ..models.datatypes import RunManifest


def manifest_payload(manifest: RunManifest) -> dict[str, object]:
    """Serialize a manifest into its JSON artifact shape."""

    return {
        "run_id": manifest.run_id,
        "config_hash": manifest.config_hash,
        "source_path": str(manifest.source_path),
        "language": manifest.language,
        "artifacts": dict(manifest.artifacts),
        "extra": dict(manifest.extra),
    }


class PipelineManifestMixin:
    """Provide run-manifest serialization and persistence helpers."""

    def _write_manifest(
        self,
        config: DocpodConfig,
        run_id: str,
        config_hash: str,
        artifacts: dict[str, str],
        extra: dict[str, str],
        store: ArtifactStore,
    ) -> RunManifest:
        """Build and persist a run manifest with deterministic identifiers."""

        try:
            manifest = RunManifest(
                run_id=run_id,
                config_hash=config_hash,
                source_path=Path(str(config.input_path)),
                language=config.language,
                artifacts=artifacts,
                extra=extra,
            )
            manifest_path = store.save_json(Path("run_manifest.json"), manifest_payload(manifest))
            return replace(manifest, artifacts={**artifacts, "manifest": str(manifest_path)})
        except Exception as exc:
            raise PipelineStageError(
                stage="manifest",
                detail=f"Failed to write run manifest: {exc}",
                hint="Verify output directory is writable.",
            ) from exc
