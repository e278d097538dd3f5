"""Dictionary backed catalog."""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import datetime, timezone
from typing import Any

from ..exceptions import MediaNotFoundError
from ..models import MediaFilter, MediaRecord

_READ_ONLY_FIELDS = frozenset({"id", "created_at"})


class InMemoryCatalog:
    """Keep media records in process memory, ordered by insertion."""

    def __init__(self, records: list[MediaRecord] | None = None) -> None:
        self._records: dict[str, MediaRecord] = {}
        self._lock = asyncio.Lock()
        for record in records or []:
            self._records[record.id] = record

    async def create(self, record: MediaRecord) -> MediaRecord:
        async with self._lock:
            if record.id in self._records:
                raise ValueError(f"Media '{record.id}' already exists")
            self._records[record.id] = record
            return record

    async def update(self, media_id: str, **changes: Any) -> MediaRecord:
        forbidden = _READ_ONLY_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"Fields cannot be updated: {sorted(forbidden)}")
        async with self._lock:
            current = self._records.get(media_id)
            if current is None:
                raise MediaNotFoundError(f"Media '{media_id}' not found")
            values = {**changes, "updated_at": datetime.now(timezone.utc)}
            updated = dataclasses.replace(current, **values)
            self._records[media_id] = updated
            return updated

    async def get(self, media_id: str) -> MediaRecord | None:
        return self._records.get(media_id)

    async def find_many(self, media_filter: MediaFilter | None = None) -> list[MediaRecord]:
        criteria = media_filter or MediaFilter()
        return [record for record in self._records.values() if criteria.matches(record)]

    async def delete(self, media_id: str) -> MediaRecord | None:
        async with self._lock:
            return self._records.pop(media_id, None)


__all__ = ["InMemoryCatalog"]
