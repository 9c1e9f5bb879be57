# sc_platform/curation/_chunking.py
# batch helpers for bulk remote mutations.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")


def effective_batch_size(remote: object, fallback: int = 100) -> int:
    try:
        n = int(getattr(remote, "batch_limit", 0) or 0)
    except (TypeError, ValueError):
        n = 0
    return n if n > 0 else fallback


def chunked(seq: Sequence[T], size: int) -> Iterator[list[T]]:
    size = max(1, int(size))
    for i in range(0, len(seq), size):
        yield list(seq[i:i + size])


def group_positions(ids_by_index: Sequence[tuple[int, str]]) -> list[tuple[str, list[int]]]:
    """(index, id) pairs -> [(id, [positions...])], first-seen id order."""
    out: dict[str, list[int]] = {}
    for idx, tid in ids_by_index:
        out.setdefault(tid, []).append(idx)
    return list(out.items())
