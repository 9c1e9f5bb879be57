# /smartcurator.py
# SmartCurator - Playlist curation engine
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import time

import uvicorn
from fastapi import FastAPI, Request

from _logging import log
from api import register_api
from sc_platform.config_base import config_path, load_config, state_dir

# API
app = FastAPI(title="SmartCurator")
register_api(app)


@app.middleware("http")
async def access_logger(request: Request, call_next):
    t0 = time.time()
    response = await call_next(request)
    status = getattr(response, "status_code", 0) or 0
    if status >= 400:
        dt_ms = int((time.time() - t0) * 1000)
        log(f'"{request.method} {request.url.path}" {status} ({dt_ms} ms)', level="WARN", module="HTTP")
    return response


@app.get("/api/health")
def health() -> dict[str, bool]:
    return {"ok": True}


# Entry point
def main(host: str = "0.0.0.0", port: int = 8787) -> None:
    cfg = load_config()
    log.configure(cfg)
    print("\nSmartCurator running:")
    print(f"  Local:   http://127.0.0.1:{port}")
    print(f"  Bind:    {host}:{port}")
    print(f"  Config:  {config_path()} (JSON)")
    print(f"  State:   {state_dir(cfg)}\n")

    debug = bool((cfg.get("runtime") or {}).get("debug"))
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=("debug" if debug else "warning"),
    )


if __name__ == "__main__":
    main()
