"""Top-level package for docpod.

This package converts source documents into multi-speaker podcast audio by
chaining document digitization, script generation, and speech synthesis. The
main orchestration entry point is `PodcastPipeline`.
"""

from .pipeline import PodcastPipeline

__all__ = ["PodcastPipeline", "__version__"]

__version__ = "0.1.0"
