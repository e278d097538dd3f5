"""Service composition helpers."""

from __future__ import annotations

from ..catalog.interfaces import Catalog
from ..catalog.memory import InMemoryCatalog
from ..config import MediaSettings, load_settings
from ..imaging.analyzer import ImageAnalyzer
from ..logging import configure_logging
from ..media.pipeline import MediaPipeline
from ..storage.fetcher import BoundedFetcher, ClientFactory
from ..storage.object_store import S3ObjectStore
from .media_service import MediaService


def build_pipeline(
    settings: MediaSettings,
    *,
    http_client_factory: ClientFactory | None = None,
) -> MediaPipeline:
    """Wire the object store, fetcher and analyzer from ``settings``."""

    limits = settings.limits()
    store = S3ObjectStore.from_options(
        settings.storage_options(),
        limits=limits,
        http_client_factory=http_client_factory,
    )
    return MediaPipeline(
        store=store,
        fetcher=BoundedFetcher(limits=limits, client_factory=http_client_factory),
        analyzer=ImageAnalyzer(options=settings.thumbnail_options()),
        limits=limits,
    )


def build_media_service(
    settings: MediaSettings | None = None,
    *,
    catalog: Catalog | None = None,
    http_client_factory: ClientFactory | None = None,
) -> MediaService:
    """Build a service from ``settings`` and apply its logging level."""

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    return MediaService(
        catalog=catalog if catalog is not None else InMemoryCatalog(),
        pipeline=build_pipeline(settings, http_client_factory=http_client_factory),
    )


__all__ = ["build_media_service", "build_pipeline"]
