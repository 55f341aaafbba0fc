"""Pipeline orchestration for listing normalization, matching, and notifications."""

from .models import PipelineRunResult
from .runner import ListingPipeline

__all__ = [
    "ListingPipeline",
    "PipelineRunResult",
]
