"""Result-archive unpacking for digitization jobs."""

from __future__ import annotations

import io
import zipfile

from ..errors import DigitizationJobError


def extract_text_from_archive(
    archive: bytes,
    output_format: str,
    *,
    chunk_index: int | None = None,
) -> str:
    """Concatenate, in archive order, every entry ending in `.{output_format}`.

    Raises:
        DigitizationJobError: If `archive` is not a readable zip container.
    """

    suffix = f".{output_format}"
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as bundle:
            parts = [
                bundle.read(info).decode("utf-8", errors="replace")
                for info in bundle.infolist()
                if not info.is_dir() and info.filename.endswith(suffix)
            ]
    except zipfile.BadZipFile as exc:
        raise DigitizationJobError(
            f"Job output is not a valid zip archive: {exc}",
            kind="archive",
            chunk_index=chunk_index,
        ) from exc
    return "".join(parts)
