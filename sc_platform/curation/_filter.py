# sc_platform/curation/_filter.py
# filter stage: decides which existing playlist entries survive.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone

from ._types import (
    VARIOUS_AUTHORS,
    CatalogItem,
    FilterResult,
    RemovalReason,
    RemovedItem,
    SurvivingItem,
    parse_ts,
)


def signature(item: CatalogItem) -> str:
    title = (item.title or "").strip().lower()
    container = (item.container or "").strip().lower()
    return f"{title}:{item.primary_author}:{container}"


def _survivor(item: CatalogItem, pinned: bool) -> SurvivingItem:
    return SurvivingItem(
        id=item.id,
        title=item.title,
        authors=item.authors,
        container=item.container,
        added_at=item.added_at,
        popularity=item.popularity,
        position=item.position,
        is_pinned=pinned,
    )


def filter_items(
    items: Sequence[CatalogItem],
    *,
    max_age_days: float,
    remove_duplicates: bool,
    max_per_author: int,
    pinned_ids: Iterable[str] = (),
    now: datetime | None = None,
) -> FilterResult:
    """Single ordered pass: duplicate -> expired -> author_limit.

    The first failing check decides the removal reason. Pinned entries are
    exempt from age and author checks but not from duplicate removal.
    Timestamps must be valid ISO-8601; anything else raises ValueError.
    """
    now = now or datetime.now(timezone.utc)
    max_age = timedelta(days=max_age_days)
    pinned = set(pinned_ids)

    seen_ids: set[str] = set()
    seen_sigs: set[str] = set()
    per_author: dict[str, int] = {}
    out = FilterResult()

    for item in items:
        is_pinned = item.id in pinned

        if remove_duplicates:
            sig = signature(item)
            if item.id in seen_ids or sig in seen_sigs:
                out.removed.append(RemovedItem(item, RemovalReason.DUPLICATE))
                continue
            seen_ids.add(item.id)
            seen_sigs.add(sig)

        if not is_pinned and (now - parse_ts(item.added_at)) > max_age:
            out.removed.append(RemovedItem(item, RemovalReason.EXPIRED))
            continue

        if not is_pinned:
            author = item.primary_author
            if author != VARIOUS_AUTHORS:
                count = per_author.get(author, 0)
                if count >= max_per_author:
                    out.removed.append(RemovedItem(item, RemovalReason.AUTHOR_LIMIT))
                    continue
                per_author[author] = count + 1

        out.survivors.append(_survivor(item, is_pinned))

    return out
