"""Value objects shared by the pipeline components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import NamedTuple
from uuid import uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class MediaRecord:
    """Catalog record referencing the stored original and its thumbnail.

    Derived fields stay ``None`` until a reparse computes them; a record with
    only ``url`` set is valid.
    """

    url: str
    id: str = field(default_factory=lambda: uuid4().hex)
    owner_id: str | None = None
    thumbnail_url: str | None = None
    width: int | None = None
    height: int | None = None
    color: str | None = None
    size: int | None = None
    file_hash: str | None = None
    labels: str | None = None
    alt_text: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    """Result of materialising one stored object from input bytes."""

    url: str
    size: int
    hash: str


@dataclass(frozen=True, slots=True)
class UploadResult:
    url: str
    etag: str | None
    version_id: str | None
    hash: str


@dataclass(frozen=True, slots=True)
class RenameOutcome:
    url: str
    thumbnail_url: str | None = None


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Bytes streamed from a remote source together with their digest."""

    content: bytes
    sha256: str
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class ImageData:
    width: int
    height: int
    color: str | None
    thumbnail: bytes


class LabelTerm(NamedTuple):
    term: str
    count: int


@dataclass(frozen=True, slots=True)
class OwnerScope:
    """Restricts catalog queries to one owner, everyone but one owner, or nobody."""

    owner_id: str | None = None
    exclude: bool = False

    @classmethod
    def any(cls) -> "OwnerScope":
        return cls()

    @classmethod
    def only(cls, owner_id: str) -> "OwnerScope":
        return cls(owner_id=owner_id)

    @classmethod
    def excluding(cls, owner_id: str) -> "OwnerScope":
        return cls(owner_id=owner_id, exclude=True)

    def matches(self, owner_id: str | None) -> bool:
        if self.owner_id is None:
            return True
        if self.exclude:
            return owner_id != self.owner_id
        return owner_id == self.owner_id


@dataclass(frozen=True, slots=True)
class MediaFilter:
    scope: OwnerScope = field(default_factory=OwnerScope)
    with_labels: bool = False

    def matches(self, record: MediaRecord) -> bool:
        if not self.scope.matches(record.owner_id):
            return False
        if self.with_labels and not record.labels:
            return False
        return True


__all__ = [
    "FetchResult",
    "ImageData",
    "LabelTerm",
    "MediaFilter",
    "MediaRecord",
    "OwnerScope",
    "RenameOutcome",
    "UploadOutcome",
    "UploadResult",
]
