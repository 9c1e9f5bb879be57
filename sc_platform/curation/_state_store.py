# sc_platform/curation/_state_store.py
# curation status and owner activity records on disk.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import json
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

ACTIVITY_CAP = 200
ACTIVITY_TYPES = ("info", "running", "success", "warning", "error")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass
class StateStore:
    base_path: Path
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def status_file(self) -> Path:
        return self.base_path / "curation_status.json"

    @property
    def activity_file(self) -> Path:
        return self.base_path / "activity.json"

    def _read(self, p: Path, default: Any) -> Any:
        if not p.exists():
            return default
        try:
            return json.loads(p.read_text("utf-8"))
        except (OSError, ValueError):
            return default

    def _write_atomic(self, p: Path, data: Any) -> None:
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(p.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
        tmp.replace(p)

    # status
    def status(self, playlist_id: str) -> dict[str, Any]:
        data = self._read(self.status_file, {})
        node = data.get(playlist_id) if isinstance(data, dict) else None
        return dict(node) if isinstance(node, dict) else {"state": "idle", "progress": 0}

    def update_status(self, playlist_id: str, **fields: Any) -> dict[str, Any]:
        with self._lock:
            data = self._read(self.status_file, {})
            if not isinstance(data, dict):
                data = {}
            node = data.get(playlist_id)
            node = dict(node) if isinstance(node, dict) else {}
            node.update(fields)
            node["last_updated"] = _now_iso()
            data[playlist_id] = node
            self._write_atomic(self.status_file, data)
            return node

    # activity
    def activity(self, owner: str) -> list[dict[str, Any]]:
        data = self._read(self.activity_file, {})
        rows = data.get(owner) if isinstance(data, dict) else None
        return list(rows) if isinstance(rows, list) else []

    def log_activity(
        self,
        owner: str,
        kind: str,
        message: str,
        meta: dict[str, Any] | None = None,
        *,
        entry_id: str | None = None,
    ) -> str:
        """Append (or update in place, when entry_id matches) an owner activity row."""
        kind = kind if kind in ACTIVITY_TYPES else "info"
        with self._lock:
            data = self._read(self.activity_file, {})
            if not isinstance(data, dict):
                data = {}
            rows = data.get(owner)
            rows = list(rows) if isinstance(rows, list) else []

            eid = entry_id or uuid.uuid4().hex[:12]
            row = {"id": eid, "type": kind, "message": message, "meta": dict(meta or {}), "ts": _now_iso()}
            for i, r in enumerate(rows):
                if isinstance(r, dict) and r.get("id") == eid:
                    rows[i] = row
                    break
            else:
                rows.append(row)

            data[owner] = rows[-ACTIVITY_CAP:]
            self._write_atomic(self.activity_file, data)
            return eid
