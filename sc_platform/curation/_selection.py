# sc_platform/curation/_selection.py
# eviction policies for an oversized candidate pool.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import random
from collections.abc import Sequence
from datetime import datetime, timezone

from ._types import CandidateItem, SizeLimitPolicy

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _added(c: CandidateItem) -> datetime:
    return c.added_at or _EPOCH


def _pop(c: CandidateItem) -> int:
    return int(c.popularity or 0)


def coerce_policy(value: SizeLimitPolicy | str | None) -> SizeLimitPolicy:
    if isinstance(value, SizeLimitPolicy):
        return value
    try:
        return SizeLimitPolicy(str(value or "").strip().lower())
    except ValueError:
        return SizeLimitPolicy.DROP_RANDOM


def truncate_pool(
    pool: Sequence[CandidateItem],
    limit: int,
    policy: SizeLimitPolicy | str = SizeLimitPolicy.DROP_RANDOM,
    *,
    rng: random.Random | None = None,
) -> list[CandidateItem]:
    """Keep `limit` candidates, ordered so the policy's victims fall off the end."""
    limit = max(0, int(limit))
    if len(pool) <= limit:
        return list(pool)

    ordered = list(pool)
    pol = coerce_policy(policy)
    if pol is SizeLimitPolicy.DROP_NEWEST:
        ordered.sort(key=_added)
    elif pol is SizeLimitPolicy.DROP_OLDEST:
        ordered.sort(key=_added, reverse=True)
    elif pol is SizeLimitPolicy.DROP_MOST_POPULAR:
        ordered.sort(key=_pop)
    elif pol is SizeLimitPolicy.DROP_LEAST_POPULAR:
        ordered.sort(key=_pop, reverse=True)
    else:
        (rng or random.Random()).shuffle(ordered)

    return ordered[:limit]
