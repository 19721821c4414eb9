"""PDF page counting with structural and byte-scan strategies.

Responsibilities:
- Read the authoritative page count from the PDF object graph via `pypdf`.
- Fall back to bounded regex scans over raw bytes for malformed inputs.
- Always return a page count of at least one.
"""

from __future__ import annotations

import io
import re

from loguru import logger
from pypdf import PdfReader


_DEFAULT_SCAN_LIMIT_BYTES = 100_000
_MAX_PAGE_MARKER_COUNT = 1000

_PAGES_COUNT_RE = re.compile(r"/Type\s*/Pages[^\x00]*/Count\s+(\d+)")
_QUOTED_COUNT_RE = re.compile(
    r"(?:NPages|PageCount|pageCount|page_count)[\"']?\s*[:=>]\s*[\"']?(\d+)"
)
_PAGE_MARKER_RE = re.compile(r"/Type\s*/Page\b")
_KIDS_ARRAY_RE = re.compile(r"/Kids\s*\[([^\]]*)\]")
_OBJECT_REFERENCE_RE = re.compile(r"\d+\s+\d+\s+R")


class PdfPageCounter:
    """Count pages in raw PDF bytes without ever raising."""

    def __init__(self, scan_limit_bytes: int = _DEFAULT_SCAN_LIMIT_BYTES) -> None:
        self.scan_limit_bytes = scan_limit_bytes

    def count(self, data: bytes) -> int:
        """Return the document page count, defaulting to 1 when nothing is found."""

        try:
            page_count = len(PdfReader(io.BytesIO(data)).pages)
        except Exception as exc:
            logger.debug("pypdf page count failed ({}); scanning raw bytes", type(exc).__name__)
            return self.count_from_markers(data)
        if page_count < 1:
            return self.count_from_markers(data)
        return page_count

    def count_from_markers(self, data: bytes) -> int:
        """Scan a bounded byte prefix for page-count markers in priority order."""

        text = data[: self.scan_limit_bytes].decode("latin-1")

        match = _PAGES_COUNT_RE.search(text)
        if match and int(match.group(1)) > 0:
            return int(match.group(1))

        match = _QUOTED_COUNT_RE.search(text)
        if match and int(match.group(1)) > 0:
            return int(match.group(1))

        page_markers = len(_PAGE_MARKER_RE.findall(text))
        if page_markers > 0:
            return min(page_markers, _MAX_PAGE_MARKER_COUNT)

        kids_match = _KIDS_ARRAY_RE.search(text)
        if kids_match:
            references = len(_OBJECT_REFERENCE_RE.findall(kids_match.group(1)))
            if references > 0:
                return min(references, _MAX_PAGE_MARKER_COUNT)

        return 1
