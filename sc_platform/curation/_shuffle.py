# sc_platform/curation/_shuffle.py
# grid filling and author-aware shuffling.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import random
from collections import deque
from collections.abc import Collection, Mapping, Sequence
from typing import Optional

from ._types import CandidateItem

TOP_SLOTS = 30


def _buckets(pool: Sequence[CandidateItem]) -> dict[str, list[CandidateItem]]:
    out: dict[str, list[CandidateItem]] = {}
    for c in pool:
        out.setdefault(c.author_key, []).append(c)
    return out


def _flatten(grid: Sequence[Optional[str]]) -> list[str]:
    return [x for x in grid if x is not None]


def fill_sequentially(grid: list[Optional[str]], pool: Sequence[CandidateItem]) -> list[str]:
    """FIFO fill of empty cells, left to right."""
    queue = deque(pool)
    for i, cell in enumerate(grid):
        if cell is None and queue:
            grid[i] = queue.popleft().id
    return _flatten(grid)


def fill_with_shuffle(
    grid: list[Optional[str]],
    pool: Sequence[CandidateItem],
    new_ids: Collection[str],
    *,
    authors: Mapping[str, str] | None = None,
    rng: random.Random | None = None,
    top_slots: int = TOP_SLOTS,
) -> list[str]:
    """Front-load new candidates, then greedy fill avoiding the previous cell's author.

    `authors` maps id -> author key for cells that are not in `pool`
    (pinned entries); pool authors are always known.
    """
    rng = rng or random.Random()
    total = len(grid)
    fresh = deque(c for c in pool if c.id in new_ids)
    carried = [c for c in pool if c.id not in new_ids]

    for i in range(min(top_slots, total)):
        if grid[i] is None and fresh:
            grid[i] = fresh.popleft().id

    author_of: dict[str, str] = dict(authors or {})
    author_of.update({c.id: c.author_key for c in pool})
    buckets = _buckets(list(fresh) + carried)

    for i in range(total):
        if grid[i] is not None:
            continue
        active = [a for a, b in buckets.items() if b]
        if not active:
            break
        prev = author_of.get(grid[i - 1]) if i > 0 and grid[i - 1] is not None else None
        candidates = active
        if prev is not None and len(active) > 1:
            candidates = [a for a in active if a != prev] or active
        chosen = rng.choice(candidates)
        grid[i] = buckets[chosen].pop().id

    return _flatten(grid)


def shuffle_with_author_distance(
    items: Sequence[CandidateItem],
    min_distance: int = 3,
    *,
    rng: random.Random | None = None,
) -> list[CandidateItem]:
    """Order items so an author reappears only after `min_distance` other picks when possible.

    Each step takes the fullest bucket among authors outside the trailing
    window (ties broken randomly); if every remaining author is inside the
    window, all of them become eligible again.
    """
    rng = rng or random.Random()
    buckets = _buckets(items)
    for b in buckets.values():
        rng.shuffle(b)

    window: deque[str] = deque(maxlen=max(0, int(min_distance)))
    out: list[CandidateItem] = []
    for _ in range(len(items)):
        active = [a for a, b in buckets.items() if b]
        if not active:
            break
        valid = [a for a in active if a not in window] or active
        best = max(len(buckets[a]) for a in valid)
        top = [a for a in valid if len(buckets[a]) == best]
        chosen = rng.choice(top)
        out.append(buckets[chosen].pop())
        window.append(chosen)
    return out
