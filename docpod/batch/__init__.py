"""Batch fan-out/fan-in orchestration for chunked documents."""

from .orchestrator import BatchOrchestrator, chunk_separator, merge_chunk_texts

__all__ = ["BatchOrchestrator", "chunk_separator", "merge_chunk_texts"]
