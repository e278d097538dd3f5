"""Media storage and processing pipeline.

Acquires image bytes (remote URL or direct upload), persists them in an
S3-compatible object store, derives dimensions, dominant colour and a
thumbnail, and keeps the original and thumbnail objects in sync across
rename and delete.
"""

from .config import MediaSettings, load_settings
from .media.pipeline import MediaPipeline, make_thumbnail_filename
from .services.media_service import MediaService

__all__ = [
    "MediaPipeline",
    "MediaService",
    "MediaSettings",
    "load_settings",
    "make_thumbnail_filename",
]
