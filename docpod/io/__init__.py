"""Input/output stage components for docpod.

This package contains page counting, page-range splitting, the request-scoped
chunk workspace, and run artifact storage.
"""

from .page_counter import PdfPageCounter
from .pdf_splitter import PdfSplitter, plan_page_ranges
from .storage import ArtifactStore
from .workspace import ChunkWorkspace

__all__ = [
    "ArtifactStore",
    "ChunkWorkspace",
    "PdfPageCounter",
    "PdfSplitter",
    "plan_page_ranges",
]
