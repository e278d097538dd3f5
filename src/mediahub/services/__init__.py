"""Application services composed from the pipeline and the catalog."""

from .container import build_media_service
from .media_service import MediaService

__all__ = ["MediaService", "build_media_service"]
