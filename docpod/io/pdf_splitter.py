"""Page-range splitting of PDF documents into chunk documents.

Responsibilities:
- Partition a PDF into fixed-size, independently processable chunk PDFs.
- Preserve page content and page order; never mutate the source bytes.
"""

from __future__ import annotations

import io

from loguru import logger
from pypdf import PdfReader, PdfWriter

from ..errors import PdfSplitError
from ..models.datatypes import Chunk, Document, PageRange


def plan_page_ranges(total_pages: int, chunk_size: int) -> list[PageRange]:
    """Return contiguous `[start, end)` ranges covering `[0, total_pages)`.

    Every range has `chunk_size` pages except possibly the last one.
    """

    if chunk_size <= 0:
        raise ValueError("`chunk_size` must be a positive integer.")
    return [
        PageRange(start=start, end=min(start + chunk_size, total_pages))
        for start in range(0, total_pages, chunk_size)
    ]


class PdfSplitter:
    """Split PDF documents into ordered page-range chunks."""

    def split(self, document: Document, chunk_size: int) -> list[Chunk]:
        """Split a document into chunks of at most `chunk_size` pages.

        Chunk ranges are planned from `document.page_count`, which must agree
        with the page tree of `document.data`.

        Raises:
            ValueError: If `chunk_size` is not positive.
            PdfSplitError: If the source cannot be parsed as a PDF, has no pages,
                or disagrees with the declared page count.
        """

        if chunk_size <= 0:
            raise ValueError("`chunk_size` must be a positive integer.")

        try:
            reader = PdfReader(io.BytesIO(document.data))
            parsed_pages = len(reader.pages)
        except Exception as exc:
            raise PdfSplitError(f"Source document is not a readable PDF: {exc}") from exc
        if parsed_pages == 0:
            raise PdfSplitError("Source document has no pages to split.")
        if parsed_pages != document.page_count:
            raise PdfSplitError(
                f"Source document has {parsed_pages} readable page(s) but "
                f"{document.page_count} were counted."
            )

        logger.debug(
            "Splitting PDF: {} pages into {}-page chunks", document.page_count, chunk_size
        )
        chunks: list[Chunk] = []
        for page_range in plan_page_ranges(document.page_count, chunk_size):
            try:
                chunk_bytes = self._write_page_range(reader, page_range)
            except Exception as exc:
                raise PdfSplitError(
                    f"Failed to copy {page_range.label()} into a chunk document: {exc}"
                ) from exc
            chunks.append(
                Chunk(
                    index=page_range.start // chunk_size,
                    page_range=page_range,
                    data=chunk_bytes,
                )
            )
        return chunks

    @staticmethod
    def _write_page_range(reader: PdfReader, page_range: PageRange) -> bytes:
        """Serialize one page range of `reader` into an independent PDF."""

        writer = PdfWriter()
        for page_number in range(page_range.start, page_range.end):
            writer.add_page(reader.pages[page_number])
        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()
