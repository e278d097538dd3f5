"""Byte acquisition and S3-compatible object storage."""

from .fetcher import BoundedFetcher, ProgressCallback, stream_download
from .hashing import HashingReader, compute_hash
from .object_store import ObjectStore, S3ObjectStore

__all__ = [
    "BoundedFetcher",
    "HashingReader",
    "ObjectStore",
    "ProgressCallback",
    "S3ObjectStore",
    "compute_hash",
    "stream_download",
]
