"""Request-scoped temporary working directory for chunk files.

Responsibilities:
- Acquire one private temporary directory per extraction request.
- Track every transient file written for chunk jobs.
- Remove tracked files and the directory on every exit path, swallowing errors.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from types import TracebackType

from loguru import logger

from ..models.datatypes import Chunk


class ChunkWorkspace:
    """Context manager owning the transient files of one batch request."""

    def __init__(self, prefix: str = "docpod-chunks-", base_dir: Path | None = None) -> None:
        self._prefix = prefix
        self._base_dir = base_dir
        self._root: Path | None = None
        self._files: list[Path] = []

    @property
    def root(self) -> Path:
        if self._root is None:
            raise RuntimeError("Chunk workspace is not open.")
        return self._root

    @property
    def files(self) -> tuple[Path, ...]:
        return tuple(self._files)

    def __enter__(self) -> ChunkWorkspace:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.cleanup()

    def open(self) -> Path:
        """Create the backing temporary directory."""

        if self._root is None:
            base = str(self._base_dir) if self._base_dir is not None else None
            self._root = Path(tempfile.mkdtemp(prefix=self._prefix, dir=base))
        return self._root

    def write_chunk(self, chunk: Chunk) -> Path:
        """Write one chunk document and return its path."""

        return self.write_file(chunk.filename, chunk.data)

    def write_file(self, name: str, data: bytes) -> Path:
        """Write bytes to a tracked file inside the workspace."""

        path = self.root / Path(name).name
        path.write_bytes(data)
        self._files.append(path)
        return path

    def cleanup(self) -> None:
        """Delete every tracked file, then the directory; never raises."""

        for path in self._files:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.debug("Could not delete transient file {}: {}", path, exc)
        self._files.clear()

        if self._root is None:
            return
        root = self._root
        self._root = None
        try:
            root.rmdir()
        except OSError:
            shutil.rmtree(root, ignore_errors=True)
