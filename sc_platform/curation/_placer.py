# sc_platform/curation/_placer.py
# pinned-item placement on the slot grid.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Optional

from ._types import PinnedItem

Grid = list[Optional[str]]


def _nearest_empty(grid: Grid, start: int, end: int) -> int | None:
    # Left side is checked before right side at every offset
    total = len(grid)
    offset = 1
    while True:
        left = start - offset
        right = end + offset
        if left < 0 and right >= total:
            return None
        if 0 <= left < total and grid[left] is None:
            return left
        if 0 <= right < total and grid[right] is None:
            return right
        offset += 1


def place_fixed(grid: Grid, pinned: Sequence[PinnedItem]) -> None:
    total = len(grid)
    for meta in pinned:
        if not meta.is_fixed:
            continue
        idx = meta.min_pos - 1
        # first writer wins, later conflicts wait for the fallback pass
        if 0 <= idx < total and grid[idx] is None:
            grid[idx] = meta.id


def place_ranged(grid: Grid, pinned: Sequence[PinnedItem], *, shuffle: bool, rng: random.Random) -> None:
    total = len(grid)
    for meta in pinned:
        if meta.is_fixed:
            continue
        start = max(0, meta.min_pos - 1)
        end = min(total - 1, meta.max_pos - 1)
        free = [i for i in range(start, end + 1) if grid[i] is None]
        if free:
            chosen = rng.choice(free) if shuffle else free[0]
            grid[chosen] = meta.id
            continue
        near = _nearest_empty(grid, start, end)
        if near is not None:
            grid[near] = meta.id


def place_fallback(grid: Grid, pinned: Sequence[PinnedItem]) -> None:
    placed = {x for x in grid if x is not None}
    for meta in pinned:
        if meta.id in placed:
            continue
        try:
            idx = grid.index(None)
        except ValueError:
            return
        grid[idx] = meta.id
        placed.add(meta.id)


def place_pinned(
    grid: Grid,
    pinned: Sequence[PinnedItem],
    *,
    shuffle: bool = True,
    rng: random.Random | None = None,
) -> None:
    """Fixed positions, then ranges, then first-empty fallback. Mutates grid."""
    if not grid:
        return
    rng = rng or random.Random()
    place_fixed(grid, pinned)
    place_ranged(grid, pinned, shuffle=shuffle, rng=rng)
    place_fallback(grid, pinned)
