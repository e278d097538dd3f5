"""Streamed HTTP downloads with progress reporting and a size cap."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from ..config import MediaLimits
from ..exceptions import PayloadTooLargeError, RemoteFetchError
from ..models import FetchResult
from .hashing import HashingReader

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
ClientFactory = Callable[[], httpx.AsyncClient]


def default_client_factory(timeout_seconds: float = 15.0) -> ClientFactory:
    def factory() -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout_seconds, follow_redirects=True)

    return factory


async def stream_download(
    url: str,
    *,
    client_factory: ClientFactory,
    chunk_size: int,
    progress: ProgressCallback | None = None,
) -> FetchResult:
    """Stream ``url`` into memory, calling ``progress`` with the running total.

    Any exception raised by ``progress`` aborts the transfer; the response
    and the client are closed on that path as well.
    """

    chunks: list[bytes] = []
    async with client_factory() as client:
        try:
            async with client.stream("GET", url) as response:
                if response.status_code >= 400:
                    raise RemoteFetchError(
                        f"GET {url} failed with status {response.status_code}"
                    )
                reader = HashingReader(response.aiter_bytes(chunk_size))
                async for chunk in reader:
                    chunks.append(chunk)
                    if progress is not None:
                        progress(reader.size)
                content_type = response.headers.get("Content-Type")
        except httpx.HTTPError as exc:
            raise RemoteFetchError(f"GET {url} failed: {exc}") from exc

    return FetchResult(
        content=b"".join(chunks),
        sha256=reader.hexdigest(),
        content_type=content_type.split(";", 1)[0].strip() if content_type else None,
    )


@dataclass(slots=True)
class BoundedFetcher:
    """Fetch remote media, aborting once the payload exceeds the cap."""

    limits: MediaLimits = field(default_factory=MediaLimits)
    client_factory: ClientFactory | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    async def fetch(self, url: str, max_bytes: int | None = None) -> FetchResult:
        cap = self.limits.max_file_size_bytes if max_bytes is None else max_bytes

        def enforce_cap(size: int) -> None:
            if size > cap:
                self.log.warning(
                    "media.fetch.payload_too_large",
                    extra={"url": url, "size_bytes": size, "limit_bytes": cap},
                )
                raise PayloadTooLargeError(size, cap)

        result = await stream_download(
            url,
            client_factory=self.client_factory
            or default_client_factory(self.limits.fetch_timeout_seconds),
            chunk_size=self.limits.chunk_size_bytes,
            progress=enforce_cap,
        )
        self.log.info(
            "media.fetch.done",
            extra={"url": url, "size_bytes": result.size, "content_type": result.content_type},
        )
        return result


__all__ = [
    "BoundedFetcher",
    "ClientFactory",
    "ProgressCallback",
    "default_client_factory",
    "stream_download",
]
