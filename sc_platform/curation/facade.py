# sc_platform/curation/facade.py
# curation coordinator: filter -> suggest -> allocate -> diff -> sync per playlist.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import random
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from _logging import log

from sc_platform import config_base

from ._config import PlaylistConfig, normalize_playlist_id, parse_playlist_config
from ._diff import calculate_diff
from ._errors import CriticalAuthFault, CurationError, UpstreamServiceFault, failure_reason
from ._estimator import estimate_items, suggestion_need
from ._filter import filter_items
from ._logging import Emitter
from ._progress import ProgressReporter
from ._prompt import build_prompt
from ._shuffle import TOP_SLOTS
from ._slots import allocate
from ._state_store import StateStore
from ._suggestions import fill_gaps
from ._sync import synchronize
from ._types import (
    CandidateItem,
    CurationEstimate,
    ReconcileResult,
    RemoteCollection,
    SuggestionService,
)

__all__ = ["Curator"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Curator:
    config: Mapping[str, Any]
    remote_factory: Callable[[str], RemoteCollection] | None = None
    suggester_factory: Callable[[PlaylistConfig], SuggestionService] | None = None
    credential_store: Any = None
    on_progress: Callable[[str], None] | None = None

    rng: random.Random = field(default_factory=random.Random)
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], datetime] = _utcnow
    write_state: bool = True
    state_path: Path | None = None

    files: StateStore | None = field(init=False, default=None)
    emitter: Emitter = field(init=False)

    def __post_init__(self) -> None:
        self.emitter = Emitter(self.on_progress)
        if self.write_state:
            self.files = StateStore(self.state_path or config_base.state_dir(dict(self.config)))

    # settings
    def _cur(self, key: str, default: Any) -> Any:
        node = self.config.get("curation") or {}
        return node.get(key, default) if isinstance(node, Mapping) else default

    @property
    def move_delay(self) -> float:
        sp = self.config.get("spotify") or {}
        return float((sp.get("move_delay_ms", 500) if isinstance(sp, Mapping) else 500) or 0) / 1000.0

    # operations
    def estimate(self, config: Mapping[str, Any] | PlaylistConfig, remote: RemoteCollection) -> CurationEstimate:
        cfg = parse_playlist_config(config)
        items = remote.list_items(cfg.id)
        est = estimate_items(items, cfg, now=self.clock())
        log(f"estimate {cfg.label}: {est.as_dict()}", level="DEBUG", module="CURATE")
        return est

    def reconcile(
        self,
        playlist_id: str,
        config: Mapping[str, Any] | PlaylistConfig,
        remote: RemoteCollection,
        *,
        dry_run: bool | None = None,
    ) -> ReconcileResult:
        cfg = parse_playlist_config(config)
        pid = normalize_playlist_id(playlist_id) if playlist_id else cfg.id
        if pid != cfg.id:
            cfg = cfg.model_copy(update={"id": pid})
        dry = cfg.dry_run if dry_run is None else bool(dry_run)

        reporter = ProgressReporter(
            playlist_id=cfg.id,
            owner=cfg.owner,
            store=self.files,
            emitter=self.emitter.bind(cfg.id),
            dry_run=dry,
            label=cfg.label,
        )
        reporter.start()
        log(f"curating {cfg.label} (dry_run={dry})", level="DRYRUN" if dry else "INFO", module="CURATE")
        try:
            result = self._reconcile(cfg, remote, reporter, dry)
        except Exception as e:
            reporter.error(str(e) or type(e).__name__, error=failure_reason(e))
            raise
        reporter.success(
            f'Curation completed for "{cfg.label}"',
            diff=result.final_diff.as_dict(),
            added=result.added_count,
            removed=result.removed_count,
            final=len(result.final_ids),
        )
        return result

    def _reconcile(self, cfg: PlaylistConfig, remote: RemoteCollection, reporter: ProgressReporter, dry: bool) -> ReconcileResult:
        items = remote.list_items(cfg.id)
        reporter.progress(10, f"Fetched {len(items)} tracks")

        pinned = cfg.pinned_items()
        pinned_ids = [p.id for p in pinned]
        filtered = filter_items(
            items,
            max_age_days=cfg.rules.max_age_days,
            remove_duplicates=cfg.rules.remove_duplicates,
            max_per_author=cfg.rules.max_per_author,
            pinned_ids=pinned_ids,
            now=self.clock(),
        )
        reporter.progress(30, f"Filtered: {len(filtered.survivors)} kept, {len(filtered.removed)} removed")

        survivors = [CandidateItem.from_catalog(s) for s in filtered.survivors]
        surviving_ids = {s.id for s in survivors}
        pinned_to_add = sum(1 for pid in dict.fromkeys(pinned_ids) if pid not in surviving_ids)
        needed = suggestion_need(cfg, len(survivors), pinned_to_add)

        new_items: list[CandidateItem] = []
        if needed > 0:
            new_items = self._suggest(cfg, remote, reporter, items, survivors, pinned_ids, needed)

        reporter.progress(80, "Arranging tracks")
        alloc = allocate(
            pinned,
            survivors,
            new_items,
            cfg.settings.target_size,
            shuffle=cfg.settings.shuffle_at_end,
            policy=cfg.settings.size_limit_policy,
            rng=self.rng,
            min_author_distance=cfg.rules.min_author_distance,
            top_slots=int(self._cur("top_slots", TOP_SLOTS)),
        )
        reasons = filtered.reason_map()
        for rid, reason in alloc.eviction_reasons().items():
            reasons.setdefault(rid, reason)
        diff = calculate_diff(items, filtered.survivors, alloc.ordered_ids, pinned, new_items, reasons)

        reporter.progress(90, "Updating playlist")
        sync = synchronize(
            remote,
            cfg.id,
            alloc.ordered_ids,
            pinned_ids,
            dry_run=dry,
            sleep=self.sleep,
            move_delay=self.move_delay,
            emit=reporter.emitter.emit,
        )
        if sync.consistency_faults:
            reporter.warning(f"{sync.consistency_faults} track(s) could not be moved into place")

        return ReconcileResult(
            added_count=len(diff.added),
            removed_count=len(diff.removed),
            final_diff=diff,
            final_ids=list(alloc.ordered_ids),
            sync=sync,
            dry_run=dry,
        )

    def _suggest(self, cfg, remote, reporter, items, survivors, pinned_ids, needed) -> list[CandidateItem]:
        if self.suggester_factory is None:
            log(f"{cfg.label}: {needed} open slots but no suggestion service configured",
                level="WARN", module="CURATE")
            return []
        try:
            service = self.suggester_factory(cfg)
        except UpstreamServiceFault as e:
            log(f"{cfg.label}: suggestion service unavailable: {e}", level="WARN", module="CURATE")
            return []
        prompt = build_prompt(
            cfg.name or "Untitled Playlist",
            cfg.settings.description,
            instrumental_only=cfg.suggestions.instrumental_only,
            reference_artists=cfg.settings.reference_artists,
        )
        return fill_gaps(
            service,
            remote,
            prompt=prompt,
            needed=needed,
            excluded_ids=[i.id for i in items] + list(pinned_ids),
            exclusions=[f"{s.author} - {s.title}" for s in survivors],
            max_per_author=cfg.rules.max_per_author,
            attempts=int(self._cur("suggestion_attempts", 3)),
            batch_size=int(self._cur("search_batch_size", 5)),
            progress=reporter,
            now=self.clock(),
        )

    # multi-playlist
    def _remote_for(self, owner: str) -> RemoteCollection:
        if self.remote_factory is None:
            raise CurationError("no remote collection configured")
        return self.remote_factory(owner)

    def run_playlist(self, raw: Mapping[str, Any], *, dry_run: bool | None = None) -> dict[str, Any]:
        out: dict[str, Any] = {"id": str(raw.get("id") or ""), "name": str(raw.get("name") or "")}
        try:
            cfg = parse_playlist_config(raw)
            out.update(id=cfg.id, name=cfg.label)
            res = self.reconcile(cfg.id, cfg, self._remote_for(cfg.owner), dry_run=dry_run)
        except CriticalAuthFault as e:
            owner = e.owner or str(raw.get("owner") or "default")
            log(f"credential for owner '{owner}' is no longer valid: {e}", level="ERROR", module="CURATE")
            if self.credential_store is not None:
                self.credential_store.mark_invalid(owner, str(e))
            out.update(status="error", error=failure_reason(e), detail=str(e))
            return out
        except CurationError as e:
            log(f"{out['name'] or out['id']}: {failure_reason(e)}: {e}", level="ERROR", module="CURATE")
            out.update(status="error", error=failure_reason(e), detail=str(e))
            return out
        except Exception as e:
            log(f"{out['name'] or out['id']}: unexpected {type(e).__name__}: {e}", level="ERROR", module="CURATE")
            out.update(status="error", error="error", detail=str(e) or type(e).__name__)
            return out
        out.update(status="success", added=res.added_count, removed=res.removed_count, dry_run=res.dry_run)
        return out

    def run_all(self, *, dry_run: bool | None = None) -> list[dict[str, Any]]:
        """Enabled playlists one at a time, with a fixed pause in between."""
        delay = float(self._cur("inter_playlist_delay_sec", 2.0))
        todo = [p for p in config_base.playlists(dict(self.config)) if p.get("enabled", True)]
        results: list[dict[str, Any]] = []
        for idx, raw in enumerate(todo):
            if idx and delay > 0:
                self.sleep(delay)
            results.append(self.run_playlist(raw, dry_run=dry_run))
        ok = sum(1 for r in results if r.get("status") == "success")
        log(f"run-all finished: {ok}/{len(results)} succeeded", level="SUCCESS" if ok == len(results) else "WARN",
            module="CURATE")
        return results
