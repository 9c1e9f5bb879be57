# sc_platform/curation/_estimator.py
# pre-flight estimate: what a run would do, without allocation or sync.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from ._config import PlaylistConfig
from ._filter import filter_items
from ._types import CatalogItem, CurationEstimate, RemovalReason


def suggestion_need(cfg: PlaylistConfig, survivors: int, pinned_to_add: int) -> int:
    if not cfg.suggestions.enabled:
        return 0
    gap = cfg.settings.target_size - survivors - pinned_to_add
    return max(0, gap, cfg.suggestions.tracks_to_add)


def estimate_items(items: Sequence[CatalogItem], cfg: PlaylistConfig, *, now: datetime | None = None) -> CurationEstimate:
    pinned_ids = [p.id for p in cfg.pinned]
    res = filter_items(
        items,
        max_age_days=cfg.rules.max_age_days,
        remove_duplicates=cfg.rules.remove_duplicates,
        max_per_author=cfg.rules.max_per_author,
        pinned_ids=pinned_ids,
        now=now,
    )
    surviving = {s.id for s in res.survivors}
    pinned_to_add = sum(1 for pid in dict.fromkeys(pinned_ids) if pid not in surviving)
    suggested = suggestion_need(cfg, len(res.survivors), pinned_to_add)

    target = cfg.settings.target_size
    pre_limit = len(res.survivors) + pinned_to_add + suggested
    return CurationEstimate(
        current_size=len(items),
        duplicates_to_remove=res.count(RemovalReason.DUPLICATE),
        aged_out_count=res.count(RemovalReason.EXPIRED),
        author_limit_removed=res.count(RemovalReason.AUTHOR_LIMIT),
        size_limit_removed=max(0, pre_limit - target),
        pinned_to_add=pinned_to_add,
        suggested_to_add=suggested,
        predicted_final_size=min(pre_limit, target),
    )
