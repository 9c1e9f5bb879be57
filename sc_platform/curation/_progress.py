# sc_platform/curation/_progress.py
# fire-and-forget progress sink backed by the state store and emitter.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from _logging import log

from ._logging import Emitter
from ._state_store import StateStore


@dataclass
class ProgressReporter:
    playlist_id: str
    owner: str
    store: StateStore | None = None
    emitter: Emitter = field(default_factory=lambda: Emitter(None))
    dry_run: bool = False
    label: str = ""
    entry_id: str | None = field(default=None, init=False)

    def _safe(self, what: str, fn, *args: Any, **kw: Any) -> Any:
        try:
            return fn(*args, **kw)
        except Exception as e:
            log(f"progress sink {what} failed: {e}", level="WARN", module="CURATE")
            return None

    def _status(self, **fields: Any) -> None:
        if self.store is not None:
            self._safe("status", self.store.update_status, self.playlist_id, is_dry_run=self.dry_run, **fields)

    def _activity(self, kind: str, message: str, meta: dict[str, Any], *, track: bool = True) -> None:
        if self.store is None:
            return
        meta = {"playlist": self.playlist_id, "dry_run": self.dry_run, **meta}
        # one row per run, updated in place as the run advances
        eid = self._safe(
            "activity", self.store.log_activity, self.owner, kind, message, meta,
            entry_id=self.entry_id if track else None,
        )
        if eid and track:
            self.entry_id = eid

    def start(self) -> None:
        self.entry_id = None
        self._activity("info", f'Started curating "{self.label or self.playlist_id}"', {}, track=False)
        self.progress(0, "Starting curation")

    def progress(self, percent: int, step: str, **meta: Any) -> None:
        pct = max(0, min(100, int(percent)))
        self.emitter.emit("progress", percent=pct, step=step, **meta)
        self._status(state="running", progress=pct, step=step)
        self._activity("running", step, {"progress": pct, **meta})

    def warning(self, message: str, **meta: Any) -> None:
        self.emitter.emit("warning", message=message, **meta)
        self._activity("warning", message, meta, track=False)

    def success(self, message: str, **meta: Any) -> None:
        self.emitter.emit("success", message=message, **meta)
        self._status(state="completed", progress=100, step="Done", diff=meta.get("diff"))
        self._activity("success", message, {k: v for k, v in meta.items() if k != "diff"})

    def error(self, message: str, **meta: Any) -> None:
        self.emitter.emit("error", message=message, **meta)
        self._status(state="error", step=message, error=meta.get("error"))
        self._activity("error", message, meta)
