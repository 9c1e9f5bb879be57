# sc_platform/curation/_slots.py
# allocation driver: builds the ordered target list from pins and candidates.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from ._placer import Grid, place_pinned
from ._selection import truncate_pool
from ._shuffle import TOP_SLOTS, fill_sequentially, fill_with_shuffle, shuffle_with_author_distance
from ._types import CandidateItem, PinnedItem, RemovalReason, SizeLimitPolicy, author_key


@dataclass
class AllocationResult:
    ordered_ids: list[str] = field(default_factory=list)
    evicted: list[CandidateItem] = field(default_factory=list)

    def eviction_reasons(self) -> dict[str, RemovalReason]:
        return {c.id: RemovalReason.SIZE_LIMIT for c in self.evicted}


def allocate(
    pinned: Sequence[PinnedItem],
    survivors: Sequence[CandidateItem],
    new_candidates: Sequence[CandidateItem],
    target_size: int,
    *,
    shuffle: bool = True,
    policy: SizeLimitPolicy | str = SizeLimitPolicy.DROP_RANDOM,
    rng: random.Random | None = None,
    min_author_distance: int = 0,
    top_slots: int = TOP_SLOTS,
) -> AllocationResult:
    """Place pins, evict overflow, then fill the remaining cells.

    Pins that do not fit (more pins than cells) are left out; the
    lowest-index pins win.
    """
    rng = rng or random.Random()
    size = max(0, int(target_size))
    pinned_ids = {p.id for p in pinned}
    if size == 0:
        return AllocationResult(evicted=[c for c in survivors if c.id not in pinned_ids])

    grid: Grid = [None] * size
    place_pinned(grid, pinned, shuffle=shuffle, rng=rng)

    pool = [c for c in list(survivors) + list(new_candidates) if c.id not in pinned_ids]
    empty = sum(1 for cell in grid if cell is None)
    kept = truncate_pool(pool, empty, policy, rng=rng)

    kept_ids = {c.id for c in kept}
    new_ids = {c.id for c in new_candidates}
    evicted = [c for c in pool if c.id not in kept_ids and c.id not in new_ids]

    if not shuffle:
        ordered = fill_sequentially(grid, kept)
    elif min_author_distance > 0:
        ordered = fill_sequentially(grid, shuffle_with_author_distance(kept, min_author_distance, rng=rng))
    else:
        pin_authors = {p.id: author_key(p.author) for p in pinned if p.author}
        ordered = fill_with_shuffle(grid, kept, new_ids, authors=pin_authors, rng=rng, top_slots=top_slots)

    return AllocationResult(ordered_ids=ordered, evicted=evicted)
