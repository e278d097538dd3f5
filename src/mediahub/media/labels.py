"""Label term aggregation across media records."""

from __future__ import annotations

import random
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from ..catalog.interfaces import Catalog
from ..models import LabelTerm, MediaFilter, OwnerScope

DEFAULT_LIMIT = 5

TermPredicate = Callable[[LabelTerm], bool]


def common_terms(
    media_labels: Iterable[str | None],
    *,
    limit: int = DEFAULT_LIMIT,
    predicate: TermPredicate | None = None,
    randomize: bool = False,
    rng: random.Random | None = None,
) -> list[LabelTerm]:
    """Count comma separated labels and return the terms seen more than once.

    Terms are trimmed and case-folded. Results are ordered by term unless
    ``randomize`` is set, in which case they are shuffled before truncation.
    """
    counts: Counter[str] = Counter()
    for labels in media_labels:
        if not labels:
            continue
        for raw in labels.split(","):
            counts[raw.strip().casefold()] += 1

    terms = [
        LabelTerm(term, count)
        for term, count in counts.items()
        if count > 1 and term and (predicate is None or predicate(LabelTerm(term, count)))
    ]
    if randomize:
        (rng or random).shuffle(terms)
    else:
        terms.sort(key=lambda item: item.term)
    return terms[: max(limit, 0)]


@dataclass(slots=True)
class LabelIndex:
    """Reads labels from the catalog and ranks their common terms."""

    catalog: Catalog
    rng: random.Random = field(default_factory=random.Random)

    async def get_media_labels(
        self,
        scope: OwnerScope | None = None,
        *,
        limit: int = DEFAULT_LIMIT,
        predicate: TermPredicate | None = None,
        randomize: bool = False,
    ) -> list[LabelTerm]:
        records = await self.catalog.find_many(
            MediaFilter(scope=scope or OwnerScope.any(), with_labels=True)
        )
        return common_terms(
            (record.labels for record in records),
            limit=limit,
            predicate=predicate,
            randomize=randomize,
            rng=self.rng,
        )


__all__ = ["DEFAULT_LIMIT", "LabelIndex", "TermPredicate", "common_terms"]
