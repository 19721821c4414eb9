"""Binary concatenation of synthesized WAV payloads.

Responsibilities:
- Split provider audio bytes into container header and raw sample data.
- Concatenate ordered payloads under one rewritten header.
- Reject payloads whose sample format differs from the first payload.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..errors import AudioFormatMismatchError
from ..models.datatypes import AudioPayload
from .wav_header import WAV_HEADER_SIZE, WavHeader, is_riff


class AudioContainerMerger:
    """Merge ordered audio payloads into one playable container."""

    def __init__(self, validate_formats: bool = True) -> None:
        self.validate_formats = validate_formats

    def split_payload(self, raw: bytes) -> AudioPayload:
        """Split raw audio bytes into header and sample data.

        Bytes starting with `RIFF` keep their first 44 bytes as header and the
        `data_size` bytes that follow as data. Anything else is headerless.
        """

        if not is_riff(raw):
            return AudioPayload(header=b"", data=raw)
        header = WavHeader.unpack(raw)
        return AudioPayload(
            header=raw[:WAV_HEADER_SIZE],
            data=raw[WAV_HEADER_SIZE : WAV_HEADER_SIZE + header.data_size],
        )

    def merge(self, payloads: Sequence[AudioPayload]) -> AudioPayload:
        """Concatenate `payloads` in order.

        An empty sequence yields an empty payload and a single payload is
        returned unchanged. Otherwise the first payload's header is the
        template, with its RIFF and data sizes rewritten to the combined data
        length.

        Raises:
            AudioFormatMismatchError: If format validation is enabled and a
                headed payload's sample format differs from the template.
        """

        if not payloads:
            return AudioPayload()
        if len(payloads) == 1:
            return payloads[0]

        template = payloads[0].header
        if self.validate_formats:
            self._check_formats(payloads)

        data = b"".join(payload.data for payload in payloads)
        if len(template) < WAV_HEADER_SIZE:
            return AudioPayload(header=template, data=data)

        rewritten = WavHeader.unpack(template).with_data_size(len(data), len(template))
        return AudioPayload(header=rewritten.pack(), data=data)

    def merge_bytes(self, raw_payloads: Sequence[bytes]) -> bytes:
        return self.merge([self.split_payload(raw) for raw in raw_payloads]).to_bytes()

    def _check_formats(self, payloads: Sequence[AudioPayload]) -> None:
        expected = None
        for position, payload in enumerate(payloads, start=1):
            if not is_riff(payload.header):
                continue
            current = WavHeader.unpack(payload.header).format
            if expected is None:
                expected = current
            elif current != expected:
                raise AudioFormatMismatchError(
                    f"Audio segment {position} has incompatible format "
                    f"({current.describe()}); expected {expected.describe()}."
                )
