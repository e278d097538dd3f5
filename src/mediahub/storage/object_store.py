"""Object storage over an S3-compatible backend.

Keys live under ``StorageOptions.base_path`` inside the configured bucket and
are exposed publicly as ``storage_base_url/base_path/key``.
"""

from __future__ import annotations

import asyncio
import io
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Protocol
from urllib.parse import quote, unquote

from minio import Minio
from minio.commonconfig import CopySource

from ..config import MediaLimits, StorageOptions
from ..exceptions import InvalidKeyError, StorageBackendError, handle_storage_errors, is_not_found
from ..models import UploadResult
from .fetcher import ClientFactory, ProgressCallback, default_client_factory, stream_download
from .hashing import compute_hash

logger = logging.getLogger(__name__)

_IMAGE_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}

# At most one directory level below the base path.
MAX_KEY_SEGMENTS = 2


class ObjectStore(Protocol):
    """Key/value access to stored media objects."""

    async def exists(self, key: str) -> bool:
        """Return True when ``key`` is present in the store."""

    async def upload(self, data: bytes, key: str, *, digest: str | None = None) -> UploadResult:
        """Store ``data`` under ``key`` and return its public URL and digest."""

    async def download(self, url: str, *, progress: ProgressCallback | None = None) -> bytes:
        """Stream ``url`` and return its bytes."""

    async def delete(self, key: str) -> None:
        """Remove ``key``; missing objects are not an error."""

    async def rename(self, old_key: str, new_key: str) -> str:
        """Copy ``old_key`` to ``new_key``, delete the source, return the new URL.

        Renaming a key onto itself leaves the object untouched.
        """

    def get_filename_from_url(self, url: str | None) -> str | None:
        """Translate a public URL back to its key, or None when unmanaged."""

    def build_url(self, key: str) -> str:
        """Return the public URL of ``key``."""

    def get_hash(self, data: bytes) -> str:
        """Return the content digest used for upload bookkeeping."""


def normalize_key(key: str) -> str:
    """Validate ``key`` against the single-level nesting rule."""

    cleaned = key.strip().lstrip("/")
    if not cleaned or cleaned.endswith("/"):
        raise InvalidKeyError(f"Invalid storage key: {key!r}")
    segments = cleaned.split("/")
    if len(segments) > MAX_KEY_SEGMENTS:
        raise InvalidKeyError(f"Storage key nests more than one directory: {key!r}")
    if any(segment in {"", ".", ".."} for segment in segments):
        raise InvalidKeyError(f"Invalid storage key: {key!r}")
    return cleaned


def content_type_for(key: str) -> str:
    suffix = PurePosixPath(key).suffix.lower()
    if suffix in _IMAGE_TYPES:
        return _IMAGE_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(key)
    return guessed or "application/octet-stream"


@dataclass(slots=True)
class S3ObjectStore:
    """:class:`ObjectStore` backed by the MinIO SDK.

    The SDK is blocking, so every backend call is pushed to a worker thread.
    """

    options: StorageOptions
    client: Minio
    limits: MediaLimits = field(default_factory=MediaLimits)
    http_client_factory: ClientFactory | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    @classmethod
    def from_options(
        cls,
        options: StorageOptions,
        *,
        limits: MediaLimits | None = None,
        http_client_factory: ClientFactory | None = None,
    ) -> "S3ObjectStore":
        client = Minio(
            endpoint=options.endpoint,
            access_key=options.access_key or None,
            secret_key=options.secret_key or None,
            secure=options.use_ssl,
            region=options.region,
        )
        return cls(
            options=options,
            client=client,
            limits=limits or MediaLimits(),
            http_client_factory=http_client_factory,
        )

    @property
    def base_path(self) -> str:
        return self.options.base_path.strip("/")

    def object_name(self, key: str) -> str:
        key = normalize_key(key)
        return f"{self.base_path}/{key}" if self.base_path else key

    def _url_prefix(self) -> str:
        prefix = self.options.storage_base_url.rstrip("/") + "/"
        if self.base_path:
            prefix += self.base_path + "/"
        return prefix

    def build_url(self, key: str) -> str:
        return self._url_prefix() + quote(normalize_key(key), safe="/")

    def get_filename_from_url(self, url: str | None) -> str | None:
        if not url:
            return None
        prefix = self._url_prefix()
        if not url.startswith(prefix):
            return None
        remainder = url[len(prefix):].split("#", 1)[0].split("?", 1)[0]
        try:
            return normalize_key(unquote(remainder))
        except InvalidKeyError:
            return None

    def get_hash(self, data: bytes) -> str:
        return compute_hash(data)

    def _put_metadata(self) -> dict[str, str]:
        metadata = {"Cache-Control": f"max-age={self.options.cache_max_age_seconds}"}
        if self.options.default_acl:
            metadata["x-amz-acl"] = self.options.default_acl
        return metadata

    async def exists(self, key: str) -> bool:
        object_name = self.object_name(key)
        try:
            with handle_storage_errors(operation="stat_object", key=object_name):
                await asyncio.to_thread(
                    self.client.stat_object,
                    bucket_name=self.options.bucket,
                    object_name=object_name,
                )
        except StorageBackendError as exc:
            if is_not_found(exc.__cause__):
                return False
            raise
        return True

    async def upload(self, data: bytes, key: str, *, digest: str | None = None) -> UploadResult:
        key = normalize_key(key)
        object_name = self.object_name(key)
        content_type = content_type_for(key)
        with handle_storage_errors(operation="put_object", key=object_name):
            result = await asyncio.to_thread(
                self.client.put_object,
                bucket_name=self.options.bucket,
                object_name=object_name,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
                metadata=self._put_metadata(),
            )
        self.log.info(
            "storage.upload.done",
            extra={
                "key": object_name,
                "size_bytes": len(data),
                "content_type": content_type,
            },
        )
        return UploadResult(
            url=self.build_url(key),
            etag=getattr(result, "etag", None),
            version_id=getattr(result, "version_id", None),
            hash=digest or self.get_hash(data),
        )

    async def download(self, url: str, *, progress: ProgressCallback | None = None) -> bytes:
        result = await stream_download(
            url,
            client_factory=self.http_client_factory
            or default_client_factory(self.limits.fetch_timeout_seconds),
            chunk_size=self.limits.chunk_size_bytes,
            progress=progress,
        )
        return result.content

    async def delete(self, key: str) -> None:
        object_name = self.object_name(key)
        try:
            with handle_storage_errors(operation="remove_object", key=object_name):
                await asyncio.to_thread(
                    self.client.remove_object,
                    bucket_name=self.options.bucket,
                    object_name=object_name,
                )
        except StorageBackendError as exc:
            if not is_not_found(exc.__cause__):
                raise
            self.log.debug("storage.delete.missing", extra={"key": object_name})
            return
        self.log.info("storage.delete.done", extra={"key": object_name})

    async def rename(self, old_key: str, new_key: str) -> str:
        source_name = self.object_name(old_key)
        target_name = self.object_name(new_key)
        if source_name == target_name:
            return self.build_url(new_key)
        with handle_storage_errors(operation="copy_object", key=source_name):
            await asyncio.to_thread(
                self.client.copy_object,
                bucket_name=self.options.bucket,
                object_name=target_name,
                source=CopySource(bucket_name=self.options.bucket, object_name=source_name),
            )
        await self.delete(old_key)
        self.log.info(
            "storage.rename.done",
            extra={"source_key": source_name, "target_key": target_name},
        )
        return self.build_url(new_key)


__all__ = [
    "MAX_KEY_SEGMENTS",
    "ObjectStore",
    "S3ObjectStore",
    "content_type_for",
    "normalize_key",
]
