# sc_platform/curation/_diff.py
# explains a curation run: added / removed (with reasons) / kept pinned.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence

from ._types import (
    CandidateItem,
    CatalogItem,
    DiffEntry,
    DiffResult,
    PinnedItem,
    RemovalReason,
)

UNKNOWN = "Unknown"


def _reason_str(r: RemovalReason | str | None) -> str:
    if r is None:
        return RemovalReason.OTHER.value
    return r.value if isinstance(r, RemovalReason) else str(r)


def calculate_diff(
    before: Sequence[CatalogItem],
    survivors: Sequence[CatalogItem],
    final_ids: Sequence[str],
    pinned: Sequence[PinnedItem],
    new_items: Sequence[CandidateItem],
    reasons: Mapping[str, RemovalReason | str] | None = None,
) -> DiffResult:
    """Pure function; removals are counted by multiplicity, not presence."""
    survivor_ids = {s.id for s in survivors}
    new_by_id = {c.id: c for c in new_items}
    pin_by_id = {p.id: p for p in pinned}
    reasons = reasons or {}
    out = DiffResult()

    for tid in final_ids:
        if tid in survivor_ids:
            continue
        if tid in new_by_id:
            c = new_by_id[tid]
            out.added.append(DiffEntry(tid, c.title or UNKNOWN, c.author or UNKNOWN))
        elif tid in pin_by_id:
            p = pin_by_id[tid]
            out.added.append(DiffEntry(tid, p.title or UNKNOWN, p.author or UNKNOWN))
        else:
            out.added.append(DiffEntry(tid, UNKNOWN, UNKNOWN))

    before_count = Counter(i.id for i in before)
    final_count = Counter(final_ids)
    first: dict[str, CatalogItem] = {}
    for item in before:
        first.setdefault(item.id, item)
    for tid, item in first.items():
        for _ in range(max(0, before_count[tid] - final_count.get(tid, 0))):
            out.removed.append(
                DiffEntry(tid, item.title, item.display_author, _reason_str(reasons.get(tid)))
            )

    final_set = set(final_ids)
    for p in pinned:
        if p.id in final_set:
            out.kept_pinned.append(DiffEntry(p.id, p.title or UNKNOWN, p.author or UNKNOWN))

    return out
