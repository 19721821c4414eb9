"""Pipeline orchestration for docpod.

Responsibilities:
- Define the stage order for the document-to-podcast flow.
- Route documents through single-shot or chunked batch digitization.
- Coordinate stage outputs into a reproducible run manifest.

Key types:
- `PodcastPipeline`: orchestration facade used by the CLI.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path

from loguru import logger

from ..audio.merger import AudioContainerMerger
from ..batch.orchestrator import BatchOrchestrator
from ..config import DocpodConfig, ProviderRuntimeConfig
from ..digitization.client import DigitizationService
from ..digitization.job import DigitizationJobRunner
from ..errors import (
    AudioFormatMismatchError,
    DigitizationJobError,
    DigitizationServiceError,
    PdfSplitError,
    PipelineStageError,
    SegmentSynthesisError,
)
from ..io.page_counter import PdfPageCounter
from ..io.pdf_splitter import PdfSplitter
from ..io.storage import ArtifactStore
from ..io.workspace import ChunkWorkspace
from ..languages import digitization_language, digitization_output_format
from ..llm.script_generator import ScriptGenerator, script_from_payload, script_to_payload
from ..models.datatypes import (
    AudioGenerationResult,
    AudioPayload,
    Document,
    ExtractionResult,
    PodcastScript,
    RunManifest,
    SynthesizedSegment,
)
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger
from ..tts.synthesizer import SpeechSegmentSynthesizer
from .manifesting import PipelineManifestMixin
from .runtime import PipelineRuntimeMixin
from .telemetry import PipelineTelemetryMixin


_PROVIDER_HINT = (
    "Verify `SARVAM_API_KEY` or `docpod credentials`, then confirm the provider "
    "base URL and model configuration."
)


class PodcastPipeline(PipelineTelemetryMixin, PipelineRuntimeMixin, PipelineManifestMixin):
    """Coordinate all stages for a single docpod run."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        page_counter: PdfPageCounter | None = None,
        splitter: PdfSplitter | None = None,
        merger: AudioContainerMerger | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize optional runtime logging, progress hooks, and stage components."""

        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self.page_counter = page_counter or PdfPageCounter()
        self.splitter = splitter or PdfSplitter()
        self.merger = merger or AudioContainerMerger()
        self._sleep = sleep

    async def extract_document(
        self,
        data: bytes,
        config: DocpodConfig,
        service: DigitizationService,
    ) -> ExtractionResult:
        """Digitize document bytes, splitting into parallel chunk jobs when large.

        Documents with at most `chunk_size_pages` pages run as one job. Larger
        documents are split and processed concurrently; failed chunks are left
        out of the merged text.

        Raises:
            PipelineStageError: If splitting fails, the single job fails, or no
                chunk produced any text.
        """

        document = Document(data=data, page_count=self.page_counter.count(data))
        output_format = digitization_output_format(config.output_format)
        runner = DigitizationJobRunner(
            service,
            language=digitization_language(config.language),
            output_format=output_format,
            poll_max_attempts=config.poll_max_attempts,
            poll_interval_seconds=config.poll_interval_seconds,
            sleep=self._sleep,
            run_logger=self._run_logger,
        )
        logger.info(
            "Document has {} page(s); chunk size is {}",
            document.page_count,
            config.chunk_size_pages,
        )

        if document.page_count <= config.chunk_size_pages:
            text = await self._extract_single(document, runner)
            if not text.strip():
                raise PipelineStageError(
                    stage="extract",
                    detail=(
                        f"Document digitization returned no `{output_format}` text "
                        f"for {document.page_count} page(s)."
                    ),
                    hint=(
                        "Verify the document has readable content and try another "
                        "`--output-format`."
                    ),
                )
            return ExtractionResult(
                page_count=document.page_count,
                used_batch_processing=False,
                merged_text=text,
                chunks_processed=1,
                language=config.language,
                output_format=output_format,
            )

        try:
            chunks = self.splitter.split(document, config.chunk_size_pages)
        except PdfSplitError as exc:
            raise PipelineStageError(
                stage="extract",
                detail=f"Failed to split document into chunks: {exc}",
                hint="Verify the input is a readable, unencrypted PDF.",
            ) from exc

        orchestrator = BatchOrchestrator(
            output_format,
            max_concurrency=config.max_concurrency,
            run_logger=self._run_logger,
        )
        batch = await orchestrator.process_batch(chunks, runner.run)
        # Merged text always carries chunk markers; judge the chunk texts themselves.
        if not any(result.success and result.text.strip() for result in batch.results):
            first_error = next(
                (result.error for result in batch.results if result.error), "no text returned"
            )
            raise PipelineStageError(
                stage="extract",
                detail=(
                    f"Failed to extract text from any of {batch.total_count} chunks: "
                    f"{first_error}"
                ),
                hint=_PROVIDER_HINT,
            )
        return ExtractionResult(
            page_count=document.page_count,
            used_batch_processing=True,
            merged_text=batch.merged_text,
            chunks_processed=batch.succeeded_count,
            language=config.language,
            output_format=output_format,
        )

    async def _extract_single(self, document: Document, runner: DigitizationJobRunner) -> str:
        """Run one job over the whole document inside a scoped workspace."""

        try:
            with ChunkWorkspace() as workspace:
                path = workspace.write_file("document.pdf", document.data)
                return await runner.run(path, 0)
        except (DigitizationServiceError, DigitizationJobError) as exc:
            raise PipelineStageError(
                stage="extract",
                detail=f"Document digitization failed: {exc}",
                hint=_PROVIDER_HINT,
            ) from exc

    def generate_audio(
        self,
        script: PodcastScript,
        config: DocpodConfig,
        synthesizer: SpeechSegmentSynthesizer,
    ) -> AudioGenerationResult:
        """Synthesize every script segment in order, then merge the audio."""

        segments = self._run_stage(
            "tts", lambda: self._synthesize_segments(script, config, synthesizer)
        )
        merged = self._run_stage("merge", lambda: self._merge(segments))
        return AudioGenerationResult(audio=merged, segments=tuple(segments))

    def run_extract(self, config: DocpodConfig) -> RunManifest:
        """Extract document text and persist it as a run artifact."""

        run_id, config_hash, store = self._prepare_run(config, "extract")
        runtime_config = self._resolve_runtime_config(config)
        result, text_path = self._run_stage(
            "extract", lambda: self._extract(config, runtime_config, store)
        )
        return self._run_stage(
            "manifest",
            lambda: self._write_manifest(
                config,
                run_id,
                config_hash,
                artifacts={"extracted_text": str(text_path)},
                extra={
                    **self._extraction_metadata(result),
                    **runtime_config.as_manifest_metadata(),
                },
                store=store,
            ),
        )

    def run_script(self, config: DocpodConfig) -> RunManifest:
        """Generate a podcast script from an existing text file."""

        run_id, config_hash, store = self._prepare_run(config, "script")
        runtime_config = self._resolve_runtime_config(config)
        text = self._read_input_text(config)
        script, used_fallback = self._run_stage(
            "script", lambda: self._generate_script(text, config, runtime_config)
        )
        script_path = store.save_json(Path("script.json"), script_to_payload(script))
        return self._run_stage(
            "manifest",
            lambda: self._write_manifest(
                config,
                run_id,
                config_hash,
                artifacts={"script": str(script_path)},
                extra={
                    **self._script_metadata(script, used_fallback),
                    **runtime_config.as_manifest_metadata(),
                },
                store=store,
            ),
        )

    def run_synthesize(self, config: DocpodConfig) -> RunManifest:
        """Synthesize and merge podcast audio from an existing script JSON file."""

        run_id, config_hash, store = self._prepare_run(config, "synthesize")
        runtime_config = self._resolve_runtime_config(config)
        script = self._load_script(config)
        synthesizer = self._create_synthesizer(runtime_config)
        audio = self.generate_audio(script, config, synthesizer)
        artifacts = self._save_audio(audio, store)
        return self._run_stage(
            "manifest",
            lambda: self._write_manifest(
                config,
                run_id,
                config_hash,
                artifacts=artifacts,
                extra={
                    **self._audio_metadata(audio),
                    **runtime_config.as_manifest_metadata(),
                },
                store=store,
            ),
        )

    def run(self, config: DocpodConfig) -> RunManifest:
        """Run extraction, script generation, speech synthesis, and merge."""

        run_id, config_hash, store = self._prepare_run(config, "build")
        runtime_config = self._resolve_runtime_config(config)
        extraction, text_path = self._run_stage(
            "extract", lambda: self._extract(config, runtime_config, store)
        )
        script, used_fallback = self._run_stage(
            "script",
            lambda: self._generate_script(extraction.merged_text, config, runtime_config),
        )
        script_path = store.save_json(Path("script.json"), script_to_payload(script))
        synthesizer = self._create_synthesizer(runtime_config)
        audio = self.generate_audio(script, config, synthesizer)
        audio_artifacts = self._save_audio(audio, store)
        return self._run_stage(
            "manifest",
            lambda: self._write_manifest(
                config,
                run_id,
                config_hash,
                artifacts={
                    "extracted_text": str(text_path),
                    "script": str(script_path),
                    **audio_artifacts,
                },
                extra={
                    **self._extraction_metadata(extraction),
                    **self._script_metadata(script, used_fallback),
                    **self._audio_metadata(audio),
                    **runtime_config.as_manifest_metadata(),
                },
                store=store,
            ),
        )

    def _extract(
        self,
        config: DocpodConfig,
        runtime_config: ProviderRuntimeConfig,
        store: ArtifactStore,
    ) -> tuple[ExtractionResult, Path]:
        data = self._read_input_bytes(config)
        service = ProviderFactory.create_digitization_service(runtime_config)
        try:
            result = asyncio.run(self.extract_document(data, config, service))
        except PipelineStageError:
            raise
        except Exception as exc:
            raise PipelineStageError(
                stage="extract",
                detail=f"Failed to extract document text: {exc}",
                hint=_PROVIDER_HINT,
            ) from exc
        text_path = store.save_text(
            Path(f"text/extracted.{result.output_format}"), result.merged_text
        )
        return result, text_path

    def _generate_script(
        self,
        text: str,
        config: DocpodConfig,
        runtime_config: ProviderRuntimeConfig,
    ) -> tuple[PodcastScript, bool]:
        """Generate the podcast script and report whether the fallback was used."""

        try:
            generator = ScriptGenerator(
                ProviderFactory.create_chat_client(runtime_config),
                model=runtime_config.script_model,
                temperature=config.script_temperature,
            )
            script = generator.generate(text, config.language)
        except DigitizationServiceError as exc:
            raise PipelineStageError(stage="script", detail=str(exc), hint=_PROVIDER_HINT) from exc
        except ValueError as exc:
            raise PipelineStageError(
                stage="script",
                detail=str(exc),
                hint="Provide non-empty extracted text for script generation.",
            ) from exc
        return script, generator.used_fallback

    def _create_synthesizer(self, runtime_config: ProviderRuntimeConfig) -> SpeechSegmentSynthesizer:
        try:
            client = ProviderFactory.create_speech_client(runtime_config)
        except ValueError as exc:
            raise PipelineStageError(stage="tts", detail=str(exc), hint=_PROVIDER_HINT) from exc
        return SpeechSegmentSynthesizer(
            client,
            model=runtime_config.tts_model,
            merger=self.merger,
            run_logger=self._run_logger,
        )

    def _synthesize_segments(
        self,
        script: PodcastScript,
        config: DocpodConfig,
        synthesizer: SpeechSegmentSynthesizer,
    ) -> list[SynthesizedSegment]:
        try:
            return synthesizer.synthesize_script(
                script,
                config.language,
                config.voices,
                pace=config.tts_pace,
                temperature=config.tts_temperature,
            )
        except SegmentSynthesisError as exc:
            raise PipelineStageError(stage="tts", detail=str(exc), hint=_PROVIDER_HINT) from exc

    def _merge(self, segments: list[SynthesizedSegment]) -> AudioPayload:
        try:
            return self.merger.merge([segment.payload for segment in segments])
        except AudioFormatMismatchError as exc:
            raise PipelineStageError(
                stage="merge",
                detail=str(exc),
                hint="Synthesize all segments with the same TTS model and language.",
            ) from exc

    def _save_audio(self, audio: AudioGenerationResult, store: ArtifactStore) -> dict[str, str]:
        podcast_path = store.save_audio(Path("audio/podcast.wav"), audio.audio)
        segments_path = store.save_json(
            Path("audio/segments.json"),
            {
                "segments": [
                    {
                        "index": segment.index,
                        "speaker": segment.speaker,
                        "voice": segment.voice_id,
                        "text": segment.text,
                        "bytes": len(segment.payload),
                    }
                    for segment in audio.segments
                ]
            },
        )
        return {"podcast_audio": str(podcast_path), "segments": str(segments_path)}

    def _read_input_bytes(self, config: DocpodConfig) -> bytes:
        path = Path(str(config.input_path))
        try:
            return path.read_bytes()
        except OSError as exc:
            raise PipelineStageError(
                stage="extract",
                detail=f"Cannot read input document `{path}`: {exc}",
                hint="Pass an existing, readable PDF path.",
            ) from exc

    def _read_input_text(self, config: DocpodConfig) -> str:
        path = Path(str(config.input_path))
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PipelineStageError(
                stage="script",
                detail=f"Cannot read input text `{path}`: {exc}",
                hint="Pass a readable UTF-8 text or Markdown file.",
            ) from exc

    def _load_script(self, config: DocpodConfig) -> PodcastScript:
        path = Path(str(config.input_path))
        try:
            return script_from_payload(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValueError) as exc:
            raise PipelineStageError(
                stage="tts",
                detail=f"Cannot load podcast script `{path}`: {exc}",
                hint="Pass a `script.json` produced by `docpod script` or `docpod build`.",
            ) from exc

    @staticmethod
    def _extraction_metadata(result: ExtractionResult) -> dict[str, str]:
        return {
            "page_count": str(result.page_count),
            "used_batch_processing": "true" if result.used_batch_processing else "false",
            "chunks_processed": str(result.chunks_processed),
            "output_format": result.output_format,
        }

    @staticmethod
    def _script_metadata(script: PodcastScript, used_fallback: bool) -> dict[str, str]:
        return {
            "script_title": script.title,
            "script_segments": str(len(script.segments)),
            "script_fallback": "true" if used_fallback else "false",
        }

    @staticmethod
    def _audio_metadata(audio: AudioGenerationResult) -> dict[str, str]:
        return {
            "audio_segments": str(len(audio.segments)),
            "audio_bytes": str(len(audio.audio)),
        }
