"""docpod pipeline package.

This package contains orchestration and helper modules for pipeline execution,
run identity, and manifest persistence.
"""

from .orchestrator import PodcastPipeline

__all__ = ["PodcastPipeline"]
