"""Telemetry and observability helpers.

This package emits deterministic run events for stage, chunk, and segment activity.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
