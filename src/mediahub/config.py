"""Configuration for the media pipeline.

Settings are read from ``MEDIAHUB_*`` environment variables once and then
converted into plain option values that are injected into the storage,
fetcher and imaging components.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(slots=True)
class StorageOptions:
    endpoint: str
    bucket: str
    storage_base_url: str
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = True
    region: str | None = None
    base_path: str = ""
    default_acl: str | None = None
    cache_max_age_seconds: int = 86400


@dataclass(slots=True)
class MediaLimits:
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE
    chunk_size_bytes: int = DEFAULT_CHUNK_SIZE
    fetch_timeout_seconds: float = 15.0


@dataclass(slots=True)
class ThumbnailOptions:
    size: int = 500
    quality: int = 80


class MediaSettings(BaseSettings):
    """Environment backed settings for the media pipeline."""

    model_config = cast(Any, SettingsConfigDict(env_prefix="MEDIAHUB_"))

    s3_endpoint: str = Field(
        default="localhost:9000",
        description="Host[:port] of the S3-compatible backend.",
    )
    s3_use_ssl: bool = Field(default=True, description="Use TLS towards the backend.")
    s3_access_key: str = Field(default="", description="Access key for the backend.")
    s3_secret_key: str = Field(default="", description="Secret key for the backend.")
    s3_region: str | None = Field(default=None, description="Optional bucket region.")
    bucket: str = Field(default="media", min_length=1, description="Target bucket name.")
    base_path: str = Field(
        default="",
        description="Prefix under which every key is stored (empty for bucket root).",
    )
    storage_base_url: str = Field(
        default="http://localhost:9000/media",
        min_length=1,
        description="Public URL that maps onto the bucket root.",
    )
    default_acl: str | None = Field(
        default=None,
        description="Canned ACL applied to uploads; no ACL header is sent when unset.",
    )
    cache_max_age_seconds: int = Field(
        default=86400,
        ge=0,
        description="max-age used for the Cache-Control header of uploads.",
    )
    max_file_size_bytes: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        ge=1,
        description="Upper bound for fetched and uploaded payloads.",
    )
    chunk_size_bytes: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        ge=1,
        description="Read size used while streaming remote sources.",
    )
    fetch_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for remote HTTP transfers in seconds.",
    )
    thumbnail_size: int = Field(
        default=500,
        ge=1,
        description="Length of the longer thumbnail edge in pixels.",
    )
    thumbnail_quality: int = Field(
        default=80,
        ge=1,
        le=100,
        description="JPEG quality used for thumbnails.",
    )
    log_level: str = Field(default="INFO", description="Root logging level.")

    def storage_options(self) -> StorageOptions:
        return StorageOptions(
            endpoint=self.s3_endpoint,
            bucket=self.bucket,
            storage_base_url=self.storage_base_url,
            access_key=self.s3_access_key,
            secret_key=self.s3_secret_key,
            use_ssl=self.s3_use_ssl,
            region=self.s3_region,
            base_path=self.base_path,
            default_acl=self.default_acl or None,
            cache_max_age_seconds=self.cache_max_age_seconds,
        )

    def limits(self) -> MediaLimits:
        return MediaLimits(
            max_file_size_bytes=self.max_file_size_bytes,
            chunk_size_bytes=self.chunk_size_bytes,
            fetch_timeout_seconds=self.fetch_timeout_seconds,
        )

    def thumbnail_options(self) -> ThumbnailOptions:
        return ThumbnailOptions(size=self.thumbnail_size, quality=self.thumbnail_quality)


def load_settings() -> MediaSettings:
    """Read settings from the environment."""

    return MediaSettings()


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_MAX_FILE_SIZE",
    "MediaLimits",
    "MediaSettings",
    "StorageOptions",
    "ThumbnailOptions",
    "load_settings",
]
