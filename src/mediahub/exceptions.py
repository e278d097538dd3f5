"""Error taxonomy for the media pipeline."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError

__all__ = [
    "MediaError",
    "ConflictError",
    "PayloadTooLargeError",
    "UnprocessableMediaError",
    "InvalidKeyError",
    "RemoteFetchError",
    "StorageBackendError",
    "MediaNotFoundError",
    "NOT_FOUND_CODES",
    "is_not_found",
    "handle_storage_errors",
]

NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchObject", "NotFound", "ResourceNotFound"})


class MediaError(Exception):
    """Base class for media pipeline errors."""


class ConflictError(MediaError):
    """Raised when the target filename is already taken in the store."""

    def __init__(self, filename: str) -> None:
        super().__init__(f"File already exists: {filename}")
        self.filename = filename


class PayloadTooLargeError(MediaError):
    """Raised when a payload grows past the configured size cap."""

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(f"File size is too large ({size_bytes} bytes, max {limit_bytes} bytes)")
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class UnprocessableMediaError(MediaError):
    """Raised when image bytes cannot be decoded or analysed."""


class InvalidKeyError(MediaError):
    """Raised when a storage key breaks the naming rules."""


class RemoteFetchError(MediaError):
    """Raised when a remote source cannot be streamed."""


class StorageBackendError(MediaError):
    """Raised for transport or auth failures of the object store."""


class MediaNotFoundError(MediaError):
    """Raised when a catalog record could not be located."""


def is_not_found(exc: BaseException) -> bool:
    """Return True when ``exc`` is an S3 "object does not exist" answer."""

    return isinstance(exc, S3Error) and exc.code in NOT_FOUND_CODES


@contextmanager
def handle_storage_errors(*, operation: str, key: str | None = None) -> Iterator[None]:
    """Translate MinIO SDK and transport errors into :class:`StorageBackendError`."""

    try:
        yield
    except (S3Error, MinioException, HTTPError) as exc:
        target = f" '{key}'" if key else ""
        raise StorageBackendError(f"{operation}{target} failed: {exc}") from exc
