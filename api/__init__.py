from __future__ import annotations

from fastapi import FastAPI

from .curationAPI import router as curation_router, build_curator

__all__ = [
    "curation_router",
    "build_curator",
    "register_api",
]


def register_api(app: FastAPI) -> None:
    app.include_router(curation_router)
