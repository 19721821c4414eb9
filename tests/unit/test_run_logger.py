"""Unit tests for deterministic structured run logging."""

from __future__ import annotations

import io

from docpod.telemetry.logger import RunLogger


def test_stage_and_chunk_events_render_sorted_sanitized_context() -> None:
    sink = io.StringIO()
    run_logger = RunLogger(sink=sink)

    run_logger.log_stage_start("extract")
    run_logger.log_chunk_start(1, "6-10")
    run_logger.log_chunk_failure(2, "DigitizationJobError")
    run_logger.log_segment_complete(2, 5, "Special Guest")
    run_logger.log_stage_failure("tts", "SegmentSynthesisError")

    assert sink.getvalue().splitlines() == [
        "[phase] level=INFO stage=extract event=start",
        "[phase] level=INFO stage=extract event=chunk_start chunk=2 pages=6-10",
        "[phase] level=WARNING stage=extract event=chunk_failure chunk=3 "
        "error_type=DigitizationJobError",
        "[phase] level=INFO stage=tts event=segment_complete segment=2/5 speaker=Special_Guest",
        "[phase] level=ERROR stage=tts event=failure error_type=SegmentSynthesisError",
    ]


def test_poll_events_identify_chunk_and_attempt() -> None:
    sink = io.StringIO()
    run_logger = RunLogger(sink=sink)

    run_logger.log_poll_retry(0, 4, "ConnectionError")
    run_logger.log_poll_progress(0, 30)

    assert sink.getvalue().splitlines() == [
        "[phase] level=INFO stage=extract event=poll_retry attempt=4 chunk=1 "
        "error_type=ConnectionError",
        "[phase] level=INFO stage=extract event=poll_progress attempt=30 chunk=1",
    ]


def test_level_threshold_filters_info_records() -> None:
    sink = io.StringIO()
    run_logger = RunLogger(sink=sink, level="WARNING")

    run_logger.log_stage_complete("merge", bytes=44)
    run_logger.log_chunk_failure(0, "TimeoutError")

    assert sink.getvalue().splitlines() == [
        "[phase] level=WARNING stage=extract event=chunk_failure chunk=1 error_type=TimeoutError"
    ]
