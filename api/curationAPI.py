# api/curationAPI.py
# SmartCurator - Curation API
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from _logging import log
from providers.auth._auth_base import ConfigCredentialStore
from providers.auth._auth_SPOTIFY import credentials_for
from providers.suggest._suggest_OPENAI import build_suggester
from providers.sync._mod_SPOTIFY import build_remote
from sc_platform.config_base import find_playlist, load_config, playlists, save_config
from sc_platform.curation import Curator, parse_playlist_config
from sc_platform.curation._errors import CriticalAuthFault, CurationError, ValidationFault, failure_reason

router = APIRouter(prefix="/api/curation", tags=["curation"])


class RunIn(BaseModel):
    dry_run: bool | None = None


def build_curator(cfg: dict[str, Any] | None = None) -> Curator:
    cfg = cfg if cfg is not None else load_config()
    store = ConfigCredentialStore(load_config, save_config)
    return Curator(
        config=cfg,
        remote_factory=lambda owner: build_remote(cfg, credentials_for(owner, cfg, store)),
        suggester_factory=lambda pc: build_suggester(cfg, pc),
        credential_store=store,
    )


def _nostore(res: JSONResponse) -> JSONResponse:
    res.headers["Cache-Control"] = "no-store"
    return res


def _fail(e: CurationError) -> JSONResponse:
    body: dict[str, Any] = {"ok": False, "error": failure_reason(e), "detail": str(e)}
    if isinstance(e, ValidationFault):
        body["issues"] = e.issues
        return JSONResponse(body, status_code=400)
    if isinstance(e, CriticalAuthFault):
        return JSONResponse(body, status_code=401)
    return JSONResponse(body, status_code=502)


def _playlist(playlist_id: str) -> tuple[dict[str, Any], dict[str, Any] | None]:
    cfg = load_config()
    return cfg, find_playlist(cfg, playlist_id)


@router.get("/playlists")
def api_playlists() -> JSONResponse:
    cfg = load_config()
    cur = build_curator(cfg)
    rows: list[dict[str, Any]] = []
    for raw in playlists(cfg):
        pid = str(raw.get("id") or "").replace("spotify:playlist:", "")
        row = {
            "id": pid,
            "name": raw.get("name") or pid,
            "enabled": bool(raw.get("enabled", True)),
            "owner": raw.get("owner") or "default",
        }
        if cur.files is not None and pid:
            row["status"] = cur.files.status(pid)
        rows.append(row)
    return _nostore(JSONResponse({"ok": True, "playlists": rows}))


@router.post("/{playlist_id}/estimate")
def api_estimate(playlist_id: str) -> JSONResponse:
    cfg, raw = _playlist(playlist_id)
    if raw is None:
        return JSONResponse({"ok": False, "error": "not_found"}, status_code=404)
    cur = build_curator(cfg)
    try:
        pc = parse_playlist_config(raw)
        est = cur.estimate(pc, cur.remote_factory(pc.owner))  # type: ignore[misc]
    except CurationError as e:
        return _fail(e)
    return JSONResponse({"ok": True, "estimate": est.as_dict()})


@router.post("/{playlist_id}/run")
def api_run(playlist_id: str, payload: RunIn | None = None) -> JSONResponse:
    cfg, raw = _playlist(playlist_id)
    if raw is None:
        return JSONResponse({"ok": False, "error": "not_found"}, status_code=404)
    cur = build_curator(cfg)
    try:
        pc = parse_playlist_config(raw)
        dry = payload.dry_run if payload else None
        res = cur.reconcile(pc.id, pc, cur.remote_factory(pc.owner), dry_run=dry)  # type: ignore[misc]
    except CriticalAuthFault as e:
        if cur.credential_store is not None:
            cur.credential_store.mark_invalid(e.owner or str(raw.get("owner") or "default"), str(e))
        return _fail(e)
    except CurationError as e:
        log(f"run {playlist_id} failed: {e}", level="ERROR", module="API")
        return _fail(e)
    return JSONResponse({"ok": True, "result": res.as_dict()})


@router.post("/run-all")
def api_run_all(payload: RunIn | None = None) -> JSONResponse:
    results = build_curator().run_all(dry_run=payload.dry_run if payload else None)
    ok = all(r.get("status") == "success" for r in results)
    return JSONResponse({"ok": ok, "results": results})


@router.get("/{playlist_id}/status")
def api_status(playlist_id: str) -> JSONResponse:
    cur = build_curator()
    pid = playlist_id.replace("spotify:playlist:", "")
    status = cur.files.status(pid) if cur.files is not None else {"state": "idle", "progress": 0}
    return _nostore(JSONResponse({"ok": True, "status": status}))


__all__ = ["router", "build_curator"]
