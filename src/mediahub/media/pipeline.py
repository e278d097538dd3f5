"""Media pipeline: upload, reparse, rename and delete of stored media.

The pipeline owns the bytes in the object store only. It returns values for
the catalog to persist and never writes records itself.

Uploads check ``exists`` before writing. The check and the write are not
atomic, so two concurrent uploads of the same filename can both pass and the
later write wins.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

from ..config import MediaLimits
from ..exceptions import ConflictError, PayloadTooLargeError, UnprocessableMediaError
from ..imaging.analyzer import ImageAnalyzer
from ..models import MediaRecord, RenameOutcome, UploadOutcome
from ..storage.fetcher import BoundedFetcher
from ..storage.object_store import ObjectStore

logger = logging.getLogger(__name__)

THUMBNAIL_SUFFIX = "-thumbnail.jpg"

T = TypeVar("T")


async def _gather_all(*operations: Awaitable[T]) -> list[T]:
    """Run ``operations`` concurrently, wait for all, then raise the first failure."""
    results = await asyncio.gather(*operations, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


def make_thumbnail_filename(filename: str) -> str:
    """Return the thumbnail key for ``filename`` (``foo.jpg`` -> ``foo-thumbnail.jpg``)."""
    return f"{filename.split('.', 1)[0]}{THUMBNAIL_SUFFIX}"


@dataclass(slots=True)
class MediaPipeline:
    """Coordinates fetcher, object store and analyzer for media records."""

    store: ObjectStore
    fetcher: BoundedFetcher
    analyzer: ImageAnalyzer
    limits: MediaLimits = field(default_factory=MediaLimits)
    log: logging.Logger = field(default_factory=lambda: logger)

    async def upload_from_url(self, remote_url: str, filename: str) -> UploadOutcome:
        """Fetch ``remote_url`` under the size cap and store it as ``filename``.

        Raises:
            ConflictError: ``filename`` is already taken; nothing is fetched.
            PayloadTooLargeError: The source exceeded the cap mid-stream.
        """
        await self._ensure_available(filename)
        fetched = await self.fetcher.fetch(remote_url, self.limits.max_file_size_bytes)
        result = await self.store.upload(fetched.content, filename, digest=fetched.sha256)
        self.log.info(
            "media.upload.from_url",
            extra={"source_url": remote_url, "url": result.url, "size_bytes": fetched.size},
        )
        return UploadOutcome(url=result.url, size=fetched.size, hash=result.hash)

    async def upload_from_bytes(self, data: bytes, filename: str) -> UploadOutcome:
        await self._ensure_available(filename)
        cap = self.limits.max_file_size_bytes
        if len(data) > cap:
            self.log.warning(
                "media.upload.payload_too_large",
                extra={"media_filename": filename, "size_bytes": len(data), "limit_bytes": cap},
            )
            raise PayloadTooLargeError(len(data), cap)
        result = await self.store.upload(data, filename)
        self.log.info(
            "media.upload.from_bytes",
            extra={"url": result.url, "size_bytes": len(data)},
        )
        return UploadOutcome(url=result.url, size=len(data), hash=result.hash)

    async def _ensure_available(self, filename: str) -> None:
        if await self.store.exists(filename):
            self.log.warning("media.upload.conflict", extra={"media_filename": filename})
            raise ConflictError(filename)

    async def reparse(self, record: MediaRecord) -> MediaRecord:
        """Recompute dimensions, colour, size, hash and thumbnail of ``record``.

        Records pointing outside the store, and records whose bytes cannot be
        decoded, come back unchanged. A failed thumbnail upload keeps the
        previous ``thumbnail_url`` but still applies the other fields.
        """
        key = self.store.get_filename_from_url(record.url)
        if key is None:
            self.log.debug("media.reparse.unmanaged", extra={"url": record.url})
            return record

        fetched = await self.fetcher.fetch(record.url, self.limits.max_file_size_bytes)
        try:
            image = await self.analyzer.analyze(fetched.content)
        except UnprocessableMediaError:
            self.log.warning(
                "media.reparse.unprocessable",
                extra={"media_id": record.id, "url": record.url},
                exc_info=True,
            )
            return record

        thumbnail_url = await self._store_thumbnail(key, image.thumbnail, record)
        return dataclasses.replace(
            record,
            width=image.width,
            height=image.height,
            color=image.color,
            thumbnail_url=thumbnail_url,
            size=fetched.size,
            file_hash=fetched.sha256 or record.file_hash,
        )

    async def _store_thumbnail(self, key: str, thumbnail: bytes, record: MediaRecord) -> str | None:
        thumbnail_key = make_thumbnail_filename(key)
        try:
            result = await self.store.upload(thumbnail, thumbnail_key)
        except Exception:
            self.log.warning(
                "media.reparse.thumbnail_failed",
                extra={"media_id": record.id, "key": thumbnail_key},
                exc_info=True,
            )
            return record.thumbnail_url
        return result.url

    async def rename(self, record: MediaRecord, new_filename: str) -> RenameOutcome | None:
        """Move the original and, when present, the thumbnail to ``new_filename``.

        Both copies run concurrently. A failure in either propagates without
        rolling back the half that succeeded.
        """
        key = self.store.get_filename_from_url(record.url)
        if key is None:
            return None

        renames = [self.store.rename(key, new_filename)]
        thumbnail_key = self.store.get_filename_from_url(record.thumbnail_url)
        if thumbnail_key:
            renames.append(self.store.rename(thumbnail_key, make_thumbnail_filename(new_filename)))

        urls = await _gather_all(*renames)
        self.log.info(
            "media.rename.done",
            extra={"media_id": record.id, "source_key": key, "target_key": new_filename},
        )
        return RenameOutcome(url=urls[0], thumbnail_url=urls[1] if len(urls) > 1 else None)

    async def delete(self, record: MediaRecord) -> None:
        """Delete the original and thumbnail objects independently of each other."""
        await _gather_all(self.delete_url(record.url), self.delete_url(record.thumbnail_url))

    async def delete_url(self, url: str | None) -> None:
        if not url:
            return
        key = self.store.get_filename_from_url(url)
        if key is None:
            return
        await self.store.delete(key)


__all__ = ["MediaPipeline", "THUMBNAIL_SUFFIX", "make_thumbnail_filename"]
