"""Remote document digitization jobs.

This package wraps the digitization REST API, models one job as a state
machine, and unpacks result archives into text.
"""

from .archive import extract_text_from_archive
from .client import DigitizationService, SarvamDigitizationClient
from .job import DigitizationJob, DigitizationJobRunner

__all__ = [
    "DigitizationJob",
    "DigitizationJobRunner",
    "DigitizationService",
    "SarvamDigitizationClient",
    "extract_text_from_archive",
]
