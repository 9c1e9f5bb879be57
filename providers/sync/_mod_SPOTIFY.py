# /providers/sync/_mod_SPOTIFY.py
# SmartCurator - Spotify remote collection module
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

__VERSION__ = "1.0.0"
__all__ = ["SPOTIFYModule", "build_remote", "get_manifest"]

from collections.abc import Mapping, Sequence
from typing import Any

from providers.auth._auth_SPOTIFY import SpotifyCredentials
from sc_platform.curation._retry import RetryPolicy, call_with_retries
from sc_platform.curation._types import CatalogItem

from ._mod_common import build_session, label_spotify, send
from .spotify import _playlists as feat
from .spotify._common import build_headers


def get_manifest() -> dict[str, Any]:
    return {
        "name": "SPOTIFY",
        "label": "Spotify",
        "version": __VERSION__,
        "features": {
            "list_items": True,
            "search": True,
            "remove_positions": True,
            "append": True,
            "move": True,
            "details": True,
        },
        "batch_limit": 100,
    }


class SPOTIFYModule:
    """Remote collection adapter: every call goes through the shared retry wrapper."""

    def __init__(
        self,
        credentials: SpotifyCredentials,
        *,
        policy: RetryPolicy | None = None,
        timeout: float = 10.0,
        page_size: int = 50,
        page_workers: int = 5,
        batch_limit: int = 100,
        session: Any = None,
        ctx: Any = None,
    ) -> None:
        self.credentials = credentials
        self.policy = policy or RetryPolicy()
        self.timeout = float(timeout)
        self.page_size = max(1, int(page_size))
        self.page_workers = max(1, int(page_workers))
        self.batch_limit = max(1, min(100, int(batch_limit)))
        self.session = session or build_session("SPOTIFY", ctx, feature_label=label_spotify)

    def request(self, method: str, url: str, *, what: str, **kwargs: Any) -> Any:
        def _once() -> Any:
            return send(
                self.session, method, url,
                what=what, timeout=self.timeout,
                headers=build_headers(self.credentials.access_token),
                **kwargs,
            )
        return call_with_retries(_once, credentials=self.credentials, policy=self.policy, label=f"spotify {what}")

    # RemoteCollection
    def list_items(self, playlist_id: str) -> list[CatalogItem]:
        return feat.list_items(self, playlist_id)

    def search(self, query: str) -> CatalogItem | None:
        return feat.search(self, query)

    def remove_positions(self, playlist_id: str, entries: Sequence[tuple[str, Sequence[int]]]) -> Any:
        return feat.remove_positions(self, playlist_id, entries)

    def append(self, playlist_id: str, ids: Sequence[str], position: int | None = None) -> Any:
        return feat.append(self, playlist_id, ids, position)

    def move(self, playlist_id: str, from_index: int, to_index: int) -> Any:
        return feat.move(self, playlist_id, from_index, to_index)

    def get_details(self, playlist_id: str) -> Mapping[str, Any]:
        return feat.get_details(self, playlist_id)

    def update_details(self, playlist_id: str, *, name: str | None = None, description: str | None = None) -> Any:
        return feat.update_details(self, playlist_id, name=name, description=description)


def build_remote(cfg: Mapping[str, Any], credentials: SpotifyCredentials, **kw: Any) -> SPOTIFYModule:
    sp = cfg.get("spotify") or {}
    return SPOTIFYModule(
        credentials,
        policy=kw.pop("policy", None) or RetryPolicy.from_config(cfg),
        timeout=float(sp.get("timeout", 10.0)),
        page_size=int(sp.get("page_size", 50)),
        page_workers=int(sp.get("page_workers", 5)),
        batch_limit=int(sp.get("batch_size", 100)),
        **kw,
    )
