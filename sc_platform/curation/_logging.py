from __future__ import annotations
import json
from typing import Any, Callable


class Emitter:
    """Serialises engine events as compact JSON lines for a progress callback."""

    def __init__(self, cb: Callable[[str], None] | None, *, playlist: str | None = None):
        self.cb = cb
        self.playlist = playlist

    def bind(self, playlist: str | None) -> "Emitter":
        return Emitter(self.cb, playlist=playlist)

    def emit(self, event: str, **data: Any) -> None:
        if not self.cb:
            return
        try:
            payload: dict[str, Any] = {"event": event}
            if self.playlist and "playlist" not in data:
                payload["playlist"] = self.playlist
            payload.update(data)
            self.cb(json.dumps(payload, separators=(",", ":"), default=str))
        except Exception:
            pass

    def info(self, line: str) -> None:
        if not self.cb:
            return
        try:
            self.cb(line)
        except Exception:
            pass

    def dbg(self, enabled: bool, msg: str, **fields: Any) -> None:
        if not enabled:
            return
        if fields:
            self.emit("debug", msg=msg, **fields)
        else:
            self.info(f"[DEBUG] {msg}")
