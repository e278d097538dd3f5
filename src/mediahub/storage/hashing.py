"""Content digests computed while bytes stream through."""

from __future__ import annotations

import hashlib
from collections.abc import AsyncIterable, AsyncIterator

DEFAULT_ALGORITHM = "sha256"


def compute_hash(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Return the hex digest of ``data``."""
    return hashlib.new(algorithm, data).hexdigest()


class HashingReader:
    """Wrap an async chunk source and digest every chunk as it is consumed.

    Chunks are passed through untouched; the reader itself keeps only the
    running digest and byte count.
    """

    def __init__(self, source: AsyncIterable[bytes], algorithm: str = DEFAULT_ALGORITHM) -> None:
        self._source = source
        self._digest = hashlib.new(algorithm)
        self._size = 0

    @property
    def size(self) -> int:
        return self._size

    def hexdigest(self) -> str:
        return self._digest.hexdigest()

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self._source:
            if not chunk:
                continue
            self._digest.update(chunk)
            self._size += len(chunk)
            yield chunk


__all__ = ["DEFAULT_ALGORITHM", "HashingReader", "compute_hash"]
