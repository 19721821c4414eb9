"""Shared pytest fixtures for the full docpod test suite."""

from __future__ import annotations

import io
import wave
import zipfile
from collections.abc import Callable

import pytest
from pypdf import PdfReader, PdfWriter

BASE_PAGE_WIDTH = 100


def build_pdf(page_count: int) -> bytes:
    """Return a PDF whose page `i` is blank with width `BASE_PAGE_WIDTH + i`."""

    writer = PdfWriter()
    for page_number in range(page_count):
        writer.add_blank_page(width=BASE_PAGE_WIDTH + page_number, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_widths(data: bytes) -> list[int]:
    """Return the page widths of a PDF, which identify source pages in order."""

    return [int(page.mediabox.width) for page in PdfReader(io.BytesIO(data)).pages]


def build_wav(
    frame_count: int = 2400,
    *,
    sample_rate: int = 24000,
    channels: int = 1,
    sample_width: int = 2,
    fill: bytes = b"\x00",
) -> bytes:
    """Return a canonical PCM WAV payload."""

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(sample_width)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(fill * (frame_count * channels * sample_width))
    return buffer.getvalue()


def build_archive(entries: dict[str, str]) -> bytes:
    """Return zip bytes holding `entries` in insertion order."""

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as bundle:
        for name, text in entries.items():
            bundle.writestr(name, text)
    return buffer.getvalue()


@pytest.fixture
def pdf_factory() -> Callable[[int], bytes]:
    """Provide a builder for in-memory PDFs with observable page order."""

    return build_pdf


@pytest.fixture
def pdf_page_widths() -> Callable[[bytes], list[int]]:
    return page_widths


@pytest.fixture
def wav_factory() -> Callable[..., bytes]:
    """Provide a builder for canonical WAV payloads."""

    return build_wav


@pytest.fixture
def archive_factory() -> Callable[[dict[str, str]], bytes]:
    return build_archive


@pytest.fixture
def no_sleep() -> tuple[Callable[[float], object], list[float]]:
    """Provide an async sleep replacement that records requested delays."""

    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    return _sleep, delays
