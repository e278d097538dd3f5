"""Media service: keeps catalog records and stored objects in step."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..catalog.interfaces import Catalog
from ..exceptions import MediaError, MediaNotFoundError
from ..media.labels import DEFAULT_LIMIT, LabelIndex, TermPredicate
from ..media.pipeline import MediaPipeline
from ..models import LabelTerm, MediaRecord, OwnerScope, RenameOutcome, UploadOutcome

logger = logging.getLogger(__name__)

_DERIVED_FIELDS = ("width", "height", "color", "thumbnail_url", "size", "file_hash")


@dataclass(slots=True)
class MediaService:
    """Coordinates catalog persistence with the media pipeline.

    Records are created only after the bytes are stored. Metadata derivation
    after creation is best-effort. Deletion removes the record first and the
    stored objects afterwards, so a failure leaves orphan objects rather than
    a record pointing at nothing.
    """

    catalog: Catalog
    pipeline: MediaPipeline
    log: logging.Logger = field(default_factory=lambda: logger)
    labels: LabelIndex = field(init=False)

    def __post_init__(self) -> None:
        self.labels = LabelIndex(self.catalog)

    async def store_url(
        self,
        owner_id: str | None,
        url: str,
        filename: str,
        *,
        labels: str | None = None,
    ) -> MediaRecord:
        outcome = await self.pipeline.upload_from_url(url, filename)
        return await self._register(owner_id, outcome, labels)

    async def store_upload(
        self,
        owner_id: str | None,
        data: bytes,
        filename: str,
        *,
        labels: str | None = None,
    ) -> MediaRecord:
        outcome = await self.pipeline.upload_from_bytes(data, filename)
        return await self._register(owner_id, outcome, labels)

    async def _register(
        self, owner_id: str | None, outcome: UploadOutcome, labels: str | None
    ) -> MediaRecord:
        record = await self.catalog.create(
            MediaRecord(
                url=outcome.url,
                owner_id=owner_id,
                size=outcome.size,
                file_hash=outcome.hash,
                labels=labels,
            )
        )
        self.log.info(
            "media.record.created",
            extra={"media_id": record.id, "owner_id": owner_id, "url": record.url},
        )
        try:
            return await self._apply_reparse(record)
        except MediaError:
            self.log.warning(
                "media.record.metadata_skipped",
                extra={"media_id": record.id},
                exc_info=True,
            )
            return record

    async def reparse_media(self, media_id: str) -> MediaRecord:
        record = await self._require(media_id)
        return await self._apply_reparse(record)

    async def _apply_reparse(self, record: MediaRecord) -> MediaRecord:
        refreshed = await self.pipeline.reparse(record)
        changes = {
            name: getattr(refreshed, name)
            for name in _DERIVED_FIELDS
            if getattr(refreshed, name) != getattr(record, name)
        }
        if not changes:
            return record
        return await self.catalog.update(record.id, **changes)

    async def rename_media(self, media_id: str, new_filename: str) -> MediaRecord | None:
        record = await self._require(media_id)
        outcome: RenameOutcome | None = await self.pipeline.rename(record, new_filename)
        if outcome is None:
            return None
        changes: dict[str, str | None] = {"url": outcome.url}
        if outcome.thumbnail_url is not None:
            changes["thumbnail_url"] = outcome.thumbnail_url
        return await self.catalog.update(record.id, **changes)

    async def delete_media(self, media_id: str) -> MediaRecord:
        record = await self.catalog.delete(media_id)
        if record is None:
            raise MediaNotFoundError(f"Media '{media_id}' not found")
        await self.pipeline.delete(record)
        self.log.info("media.record.deleted", extra={"media_id": media_id})
        return record

    async def media_labels(
        self,
        scope: OwnerScope | None = None,
        *,
        limit: int = DEFAULT_LIMIT,
        predicate: TermPredicate | None = None,
        randomize: bool = False,
    ) -> list[LabelTerm]:
        return await self.labels.get_media_labels(
            scope, limit=limit, predicate=predicate, randomize=randomize
        )

    async def _require(self, media_id: str) -> MediaRecord:
        record = await self.catalog.get(media_id)
        if record is None:
            raise MediaNotFoundError(f"Media '{media_id}' not found")
        return record


__all__ = ["MediaService"]
