"""Unit tests for structural and byte-scan PDF page counting."""

from __future__ import annotations

from collections.abc import Callable

from docpod.io.page_counter import PdfPageCounter


def test_count_uses_pdf_structure_for_readable_documents(
    pdf_factory: Callable[[int], bytes],
) -> None:
    """Readable PDFs should report their real page count."""

    assert PdfPageCounter().count(pdf_factory(12)) == 12
    assert PdfPageCounter().count(pdf_factory(1)) == 1


def test_count_falls_back_to_pages_count_marker_for_malformed_bytes() -> None:
    """Unparseable bytes with a `/Type /Pages ... /Count 7` marker should report 7."""

    data = b"%PDF-1.4 garbage << /Type /Pages /Kids [] /Count 7 >> trailing garbage"

    assert PdfPageCounter().count(data) == 7


def test_count_from_markers_prefers_quoted_count_over_page_markers() -> None:
    """Quoted page-count metadata should win over individual page markers."""

    data = b'{"pageCount": 9} /Type /Page /Type /Page'

    assert PdfPageCounter().count_from_markers(data) == 9


def test_count_from_markers_counts_individual_pages() -> None:
    """Individual `/Type /Page` markers should be counted without matching `/Pages`."""

    data = b"/Type /Page x /Type/Page y /Type /Pages z"

    assert PdfPageCounter().count_from_markers(data) == 2


def test_count_from_markers_counts_kids_references() -> None:
    """A `/Kids` array of object references should report its reference count."""

    data = b"/Kids [3 0 R 4 0 R 5 0 R]"

    assert PdfPageCounter().count_from_markers(data) == 3


def test_count_never_returns_less_than_one() -> None:
    """Inputs without any marker should default to one page."""

    assert PdfPageCounter().count(b"") == 1
    assert PdfPageCounter().count(b"not a pdf at all") == 1


def test_count_from_markers_only_scans_bounded_prefix() -> None:
    """Markers past the scan limit should be ignored."""

    data = b" " * 64 + b"/Type /Pages /Count 4"
    counter = PdfPageCounter(scan_limit_bytes=32)

    assert counter.count_from_markers(data) == 1
