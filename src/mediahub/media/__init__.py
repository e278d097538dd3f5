"""Media orchestration on top of storage and imaging."""

from .labels import LabelIndex, common_terms
from .pipeline import THUMBNAIL_SUFFIX, MediaPipeline, make_thumbnail_filename

__all__ = [
    "LabelIndex",
    "MediaPipeline",
    "THUMBNAIL_SUFFIX",
    "common_terms",
    "make_thumbnail_filename",
]
