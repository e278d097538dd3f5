"""Catalog interface consumed by the media service."""

from __future__ import annotations

from typing import Any, Protocol

from ..models import MediaFilter, MediaRecord


class Catalog(Protocol):
    """Persistence operations for :class:`MediaRecord`."""

    async def create(self, record: MediaRecord) -> MediaRecord:
        """Persist a new record and return it."""

    async def update(self, media_id: str, **changes: Any) -> MediaRecord:
        """Apply ``changes`` to the record identified by ``media_id``."""

    async def get(self, media_id: str) -> MediaRecord | None:
        """Return the record or None when it does not exist."""

    async def find_many(self, media_filter: MediaFilter | None = None) -> list[MediaRecord]:
        """Return records matching ``media_filter``."""

    async def delete(self, media_id: str) -> MediaRecord | None:
        """Remove the record and return it, or None when it was already gone."""
