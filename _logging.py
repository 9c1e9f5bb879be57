# _logging.py
# Host logger: "[MODULE] LEVEL message" on the console, optional JSON-lines file.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations
import sys, datetime, json, re, threading
from typing import Any, Optional, TextIO, Mapping, Dict

RESET = "\033[0m"
DIM = "\033[90m"

LEVELS = {"silent": 60, "error": 40, "warn": 30, "info": 20, "debug": 10}

# label -> colour; labels not listed print uncoloured
LABEL_COLORS = {
    "DEBUG": "\033[33m",
    "INFO": "\033[94m",
    "WARN": "\033[33m",
    "ERROR": "\033[91m",
    "SUCCESS": "\033[92m",
    "DRYRUN": DIM,
}

# Bearer tokens and refresh tokens never reach a sink in clear text
_SECRET_RX = re.compile(r"(Bearer\s+|refresh_token=|access_token=)([A-Za-z0-9\-_.~+/]{8,})")

def redact(text: str) -> str:
    return _SECRET_RX.sub(lambda m: m.group(1) + m.group(2)[:4] + "…", text)


class Logger:
    def __init__(
        self,
        stream: TextIO = sys.stdout,
        level: str = "info",
        use_color: bool = True,
        show_time: bool = True,
        *,
        _context: Optional[Dict[str, Any]] = None,
        _json_stream: Optional[TextIO] = None,
        _lock: Optional[threading.Lock] = None,
    ):
        self.stream = stream
        self.level = level if level in LEVELS else "info"
        self.use_color = use_color
        self.show_time = show_time
        self._context: Dict[str, Any] = dict(_context or {})
        self._json_stream: Optional[TextIO] = _json_stream
        self._lock = _lock or threading.Lock()

    def enable_json(self, file_path: str) -> None:
        self._json_stream = open(file_path, "a", encoding="utf-8")

    def configure(self, cfg: Mapping[str, Any]) -> None:
        """Apply the runtime block: debug switch and optional JSON log file."""
        rt = (cfg or {}).get("runtime") or {}
        self.level = "debug" if (rt.get("debug") or rt.get("debug_mods")) else "info"
        path = str(rt.get("log_file") or "").strip()
        if path and self._json_stream is None:
            self.enable_json(path)

    def bind(self, **ctx: Any) -> "Logger":
        new_ctx = dict(self._context); new_ctx.update(ctx)
        return Logger(
            stream=self.stream,
            level=self.level,
            use_color=self.use_color,
            show_time=self.show_time,
            _context=new_ctx,
            _json_stream=self._json_stream,
            _lock=self._lock,
        )

    # "[ts] [MODULE] LEVEL message (playlist=...)"
    def _fmt_text(self, label: str, msg: str) -> str:
        mod = str(self._context.get("module") or "").strip()
        col = LABEL_COLORS.get(label.upper()) if self.use_color else None
        lvl_disp = f"{col}{label}{RESET}" if col else label
        line = f"{f'[{mod}]' if mod else ''} {lvl_disp} {msg}".strip()
        pid = self._context.get("playlist")
        if pid:
            line = f"{line} (playlist={pid})"
        if not self.show_time:
            return line
        ts = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        return f"{DIM}[{ts}]{RESET} {line}" if self.use_color else f"[{ts}] {line}"

    def _write_sinks(self, label: str, text: str, *, msg: str, extra: Optional[Mapping[str, Any]]) -> None:
        with self._lock:
            self.stream.write(text + "\n")
            self.stream.flush()
            if self._json_stream:
                row = {
                    "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="milliseconds"),
                    "level": label,
                    "msg": msg,
                    "ctx": self._context,
                }
                if extra:
                    row["extra"] = dict(extra)
                self._json_stream.write(json.dumps(row, ensure_ascii=False, default=str) + "\n")
                self._json_stream.flush()

    # severity decides filtering, label is what gets printed
    def _emit(self, severity: str, label: str, message: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        if LEVELS[self.level] > LEVELS.get(severity, LEVELS["info"]):
            return
        msg = redact(str(message))
        self._write_sinks(label, self._fmt_text(label, msg), msg=msg, extra=extra)

    def debug(self, message: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self._emit("debug", "DEBUG", message, extra)

    def info(self, message: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self._emit("info", "INFO", message, extra)

    def warn(self, message: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self._emit("warn", "WARN", message, extra)

    def error(self, message: Any, extra: Optional[Mapping[str, Any]] = None) -> None:
        self._emit("error", "ERROR", message, extra)

    # log("text", level="INFO", module="SYNC", extra={...})
    def __call__(
        self,
        message: str,
        *,
        level: str = "INFO",
        module: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        target = self.bind(module=module) if module else self
        label = level or "INFO"
        sev = label.lower()
        if sev == "warning":
            sev, label = "warn", "WARN"
        if sev not in ("debug", "warn", "error"):
            # SUCCESS, DRYRUN and other labels filter as info
            sev = "info"
        target._emit(sev, label.upper(), message, extra)

# default instance
log = Logger()

__all__ = ["Logger", "log", "redact", "LEVELS"]
