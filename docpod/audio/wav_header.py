"""Canonical 44-byte RIFF/WAVE header codec.

Responsibilities:
- Unpack and pack the fixed-layout PCM WAV header with `struct`.
- Expose the sample format used for merge compatibility checks.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, replace


WAV_HEADER_SIZE = 44
RIFF_MAGIC = b"RIFF"
_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")
_RIFF_SIZE_OFFSET = 8


@dataclass(frozen=True, slots=True)
class WavFormat:
    """Sample format fields that must agree for raw data to be concatenated."""

    audio_format: int
    channels: int
    sample_rate: int
    bits_per_sample: int

    def describe(self) -> str:
        return (
            f"format={self.audio_format} channels={self.channels} "
            f"rate={self.sample_rate} bits={self.bits_per_sample}"
        )


@dataclass(frozen=True, slots=True)
class WavHeader:
    """Decoded canonical WAV header.

    `riff_size` counts the bytes after the first eight (`file size - 8`) and
    `data_size` counts the raw sample bytes that follow the header.
    """

    riff_id: bytes
    riff_size: int
    wave_id: bytes
    fmt_id: bytes
    fmt_size: int
    audio_format: int
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_id: bytes
    data_size: int

    @classmethod
    def unpack(cls, header: bytes) -> WavHeader:
        """Decode the first 44 bytes of `header`.

        Raises:
            ValueError: If fewer than 44 bytes are supplied or the RIFF magic is missing.
        """

        if len(header) < WAV_HEADER_SIZE:
            raise ValueError(
                f"WAV header needs {WAV_HEADER_SIZE} bytes, got {len(header)}."
            )
        if not header.startswith(RIFF_MAGIC):
            raise ValueError("WAV header does not start with `RIFF`.")
        return cls(*_HEADER_STRUCT.unpack_from(header, 0))

    def pack(self) -> bytes:
        return _HEADER_STRUCT.pack(
            self.riff_id,
            self.riff_size,
            self.wave_id,
            self.fmt_id,
            self.fmt_size,
            self.audio_format,
            self.channels,
            self.sample_rate,
            self.byte_rate,
            self.block_align,
            self.bits_per_sample,
            self.data_id,
            self.data_size,
        )

    @property
    def format(self) -> WavFormat:
        return WavFormat(
            audio_format=self.audio_format,
            channels=self.channels,
            sample_rate=self.sample_rate,
            bits_per_sample=self.bits_per_sample,
        )

    def with_data_size(self, data_size: int, header_size: int = WAV_HEADER_SIZE) -> WavHeader:
        """Return a copy describing `data_size` sample bytes after a `header_size` header."""

        return replace(
            self,
            riff_size=data_size + header_size - _RIFF_SIZE_OFFSET,
            data_size=data_size,
        )


def is_riff(payload: bytes) -> bool:
    return len(payload) >= WAV_HEADER_SIZE and payload.startswith(RIFF_MAGIC)
