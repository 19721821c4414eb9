"""Audio container handling for synthesized podcast segments."""

from .merger import AudioContainerMerger
from .wav_header import WAV_HEADER_SIZE, WavFormat, WavHeader

__all__ = ["AudioContainerMerger", "WAV_HEADER_SIZE", "WavFormat", "WavHeader"]
