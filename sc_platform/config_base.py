# sc_platform/config_base.py
# SmartCurator - configuration file handling
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import copy
import json
import os
import secrets
import threading
import time
from pathlib import Path
from typing import Any, Dict, List

# ------------------------------------------------------------
# Base dir resolution
# ------------------------------------------------------------
def CONFIG_BASE() -> Path:
    """
    Determine the base directory for config files.

    Priority:
      1) $CONFIG_BASE if set
      2) /config (when running in container that mounts /config)
      3) Project root (one level up from this package)
    """
    env = os.getenv("CONFIG_BASE")
    if env:
        return Path(env)

    if Path("/app").exists():
        return Path("/config")

    return Path(__file__).resolve().parents[1]


# Default config structure
DEFAULT_CFG: Dict[str, Any] = {
    # --- Remote catalog ------------------------------------------------------
    "spotify": {
        "client_id": "",                                # From your Spotify developer app
        "client_secret": "",                            # From your Spotify developer app
        "timeout": 10.0,                                # HTTP timeout (seconds)
        "page_size": 50,                                # Playlist items per page (API max 50 with fields filter)
        "batch_size": 100,                              # Max items per bulk add/remove (API limit)
        "page_workers": 5,                              # Concurrent page fetches once the total is known
        "move_delay_ms": 500,                           # Pause after each positional move (eventual consistency)
    },

    # --- Suggestion service --------------------------------------------------
    "openai": {
        "api_key": "",                                  # Falls back to $OPENAI_API_KEY
        "model": "gpt-4o-mini",
        "temperature": 0.7,
    },

    # --- Curation engine -----------------------------------------------------
    "curation": {
        "retry_budget": 3,                              # Retries per remote call (attempts = 1 + budget)
        "default_backoff_sec": 1.0,                     # Used when a 429/5xx has no Retry-After
        "network_retry_sec": 1.0,                       # Fixed wait after a connection/timeout error
        "token_refresh_margin_sec": 300,                # Refresh access token when it expires within this window
        "search_batch_size": 5,                         # Concurrent catalog searches per batch
        "suggestion_attempts": 3,                       # Gap-filling attempts before giving up
        "inter_playlist_delay_sec": 2.0,                # Pause between playlists in run_all
        "top_slots": 30,                                # Leading cells reserved for new suggestions when shuffling
    },

    # --- Credential store (owner_ref -> tokens) -------------------------------
    "owners": {},

    # --- Managed playlists -----------------------------------------------------
    "playlists": [],

    # --- Runtime / Diagnostics ----------------------------------------------
    "runtime": {
        "debug": False,                                 # Extra verbose logging (debug level)
        "debug_mods": False,                            # Extra verbose provider logging
        "log_file": "",                                 # Optional JSON-lines log file
        "state_dir": "",                                # Optional override for state dir (defaults to CONFIG/state)
    },
}


# ------------------------------------------------------------
# Helpers: paths, IO, merging
# ------------------------------------------------------------
def _cfg_file() -> Path:
    return CONFIG_BASE() / "config.json"

def config_path() -> Path:
    """Public accessor for the config file location."""
    return _cfg_file()


def state_dir(cfg: Dict[str, Any] | None = None) -> Path:
    rt = (cfg or {}).get("runtime") or {}
    override = str(rt.get("state_dir") or "").strip()
    return Path(override) if override else CONFIG_BASE() / "state"


def _read_json(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write_json_atomic(p: Path, data: Dict[str, Any]) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    suffix = f".{time.time_ns()}.{os.getpid()}.{threading.get_ident()}.{secrets.token_hex(4)}.tmp"
    tmp = p.with_suffix(suffix)

    with tmp.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    tmp.replace(p)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)  # type: ignore[assignment]
        else:
            out[k] = v
    return out


def playlists(cfg: Dict[str, Any]) -> List[Dict[str, Any]]:
    arr = cfg.get("playlists")
    if not isinstance(arr, list):
        arr = []
        cfg["playlists"] = arr
    return [p for p in arr if isinstance(p, dict)]


def find_playlist(cfg: Dict[str, Any], playlist_id: str) -> Dict[str, Any] | None:
    want = str(playlist_id or "").replace("spotify:playlist:", "").strip()
    for p in playlists(cfg):
        pid = str(p.get("id") or "").replace("spotify:playlist:", "").strip()
        if pid and pid == want:
            return p
    return None


def load_config() -> Dict[str, Any]:
    """
    Read config.json
    """
    p = _cfg_file()
    user_cfg: Dict[str, Any] = {}
    if p.exists():
        try:
            user_cfg = _read_json(p)
        except Exception:
            user_cfg = {}

    return _deep_merge(DEFAULT_CFG, user_cfg)


def save_config(cfg: Dict[str, Any]) -> None:
    """
    Write to config.json
    """
    _write_json_atomic(_cfg_file(), dict(cfg or {}))
