# sc_platform/curation/_sync.py
# converges a remote playlist onto a target order: remove -> add -> reorder.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import time
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from _logging import log

from ._chunking import chunked, effective_batch_size, group_positions
from ._errors import ConsistencyFault
from ._types import RemoteCollection, SyncReport

EmitFn = Callable[..., None]

# placeholder for a remote row with no track behind it; sync leaves such rows alone
UNRESOLVED = ""


def _noop_emit(event: str, **data: Any) -> None:
    return None


def categorize(current_ids: Sequence[str], target_ids: Sequence[str], pinned_ids: Iterable[str]) -> list[int]:
    """Indices to remove: everything except the pinned occurrences still needed."""
    pinned = set(pinned_ids)
    need = Counter(target_ids)
    seen: Counter[str] = Counter()
    remove: list[int] = []
    for idx, tid in enumerate(current_ids):
        if tid == UNRESOLVED:
            continue
        keep = tid in pinned and seen[tid] < need[tid]
        seen[tid] += 1
        if not keep:
            remove.append(idx)
    return remove


def missing_in_order(current_ids: Sequence[str], target_ids: Sequence[str]) -> list[str]:
    """Occurrences the target still lacks, in target order."""
    missing = Counter(target_ids) - Counter(current_ids)
    out: list[str] = []
    for tid in target_ids:
        if missing[tid] > 0:
            out.append(tid)
            missing[tid] -= 1
    return out


def _ids(remote: RemoteCollection, playlist_id: str) -> list[str]:
    """Ids by remote position; rows the listing could not resolve hold UNRESOLVED."""
    items = remote.list_items(playlist_id)
    if any(i.position is None for i in items):
        return [i.id for i in items]
    out = [UNRESOLVED] * (max((i.position for i in items), default=-1) + 1)
    for it in items:
        out[it.position] = it.id
    return out


def _remove(remote: RemoteCollection, playlist_id: str, current: list[str], indices: list[int], *, dry_run: bool) -> list[str]:
    if not indices:
        return current
    if dry_run:
        drop = set(indices)
        return [tid for i, tid in enumerate(current) if i not in drop]
    size = effective_batch_size(remote)
    for batch in chunked(sorted(indices, reverse=True), size):
        entries = group_positions([(i, current[i]) for i in batch])
        remote.remove_positions(playlist_id, entries)
        log(f"removed {len(batch)} entries", level="DEBUG", module="SYNC")
    return _ids(remote, playlist_id)


def _add(remote: RemoteCollection, playlist_id: str, current: list[str], to_add: list[str], *, dry_run: bool) -> list[str]:
    if not to_add:
        return current
    if dry_run:
        return current + to_add
    for batch in chunked(to_add, effective_batch_size(remote)):
        remote.append(playlist_id, batch)
        log(f"appended {len(batch)} entries", level="DEBUG", module="SYNC")
    return _ids(remote, playlist_id)


def _reorder(
    remote: RemoteCollection,
    playlist_id: str,
    mirror: list[str],
    target_ids: Sequence[str],
    report: SyncReport,
    *,
    dry_run: bool,
    sleep: Callable[[float], None],
    move_delay: float,
    emit: EmitFn,
) -> None:
    for i, tid in enumerate(target_ids):
        if i < len(mirror) and mirror[i] == tid:
            continue
        try:
            j = mirror.index(tid, i)
        except ValueError:
            fault = ConsistencyFault(f"{tid} not found at or after index {i}")
            report.consistency_faults += 1
            log(f"reorder: {fault}", level="WARN", module="SYNC")
            emit("sync:consistency_fault", playlist=playlist_id, id=tid, index=i)
            continue
        if not dry_run:
            remote.move(playlist_id, j, i)
            if move_delay > 0:
                sleep(move_delay)
        mirror.insert(i, mirror.pop(j))
        report.moved += 1


def synchronize(
    remote: RemoteCollection,
    playlist_id: str,
    target_ids: Sequence[str],
    pinned_ids: Iterable[str] = (),
    *,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
    move_delay: float = 0.5,
    emit: EmitFn | None = None,
) -> SyncReport:
    """Clear everything but still-needed pinned occurrences, append, then move into place.

    Each phase reads the remote state the previous phase produced. Under
    dry_run no mutating call is made; the phases run on a local copy.
    """
    emit = emit or _noop_emit
    target = list(target_ids)
    report = SyncReport(dry_run=dry_run)
    lvl = "DRYRUN" if dry_run else "INFO"

    current = _ids(remote, playlist_id)
    to_remove = categorize(current, target, pinned_ids)
    report.removed = len(to_remove)
    emit("sync:remove", playlist=playlist_id, count=report.removed, dry_run=dry_run)
    current = _remove(remote, playlist_id, current, to_remove, dry_run=dry_run)

    to_add = missing_in_order(current, target)
    report.added = len(to_add)
    emit("sync:add", playlist=playlist_id, count=report.added, dry_run=dry_run)
    mirror = list(_add(remote, playlist_id, current, to_add, dry_run=dry_run))

    _reorder(
        remote, playlist_id, mirror, target, report,
        dry_run=dry_run, sleep=sleep, move_delay=move_delay, emit=emit,
    )
    emit("sync:done", playlist=playlist_id, **report.as_dict())
    log(
        f"sync {playlist_id}: removed={report.removed} added={report.added} "
        f"moved={report.moved} faults={report.consistency_faults}",
        level=lvl, module="SYNC",
    )
    return report
