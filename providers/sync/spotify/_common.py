# /providers/sync/spotify/_common.py
# SPOTIFY module shared helpers: endpoints, headers, item normalisation.

from __future__ import annotations
import os
from typing import Any, Dict, Mapping

from sc_platform.curation._types import UNKNOWN_TITLE, CatalogItem

# ── endpoints ─────────────────────────────────────────────────────────────────
API = "https://api.spotify.com/v1"
URL_PLAYLIST_FMT = f"{API}/playlists/{{pid}}"
URL_PLAYLIST_TRACKS_FMT = f"{API}/playlists/{{pid}}/tracks"
URL_SEARCH = f"{API}/search"

ITEM_FIELDS = "total,items(added_at,track(uri,name,popularity,artists(name),album(name)))"
DETAIL_FIELDS = "name,description,followers(total),tracks(total)"

UA = os.environ.get("SC_UA", "SmartCurator/1.0 (Spotify)")
TRACK_PREFIX = "spotify:track:"
PLAYLIST_PREFIX = "spotify:playlist:"
# old playlists report added_at as null; such rows read as added at the epoch
EPOCH = "1970-01-01T00:00:00+00:00"

# ── headers ───────────────────────────────────────────────────────────────────
def build_headers(access_token: str | None) -> Dict[str, str]:
    h = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": UA,
    }
    if access_token:
        h["Authorization"] = f"Bearer {access_token}"
    return h

# ── ids ───────────────────────────────────────────────────────────────────────
def bare_playlist_id(pid: str) -> str:
    v = str(pid or "").strip()
    return v[len(PLAYLIST_PREFIX):] if v.startswith(PLAYLIST_PREFIX) else v

def tracks_url(pid: str) -> str:
    return URL_PLAYLIST_TRACKS_FMT.format(pid=bare_playlist_id(pid))

def playlist_url(pid: str) -> str:
    return URL_PLAYLIST_FMT.format(pid=bare_playlist_id(pid))

# ── normalisation ─────────────────────────────────────────────────────────────
def to_catalog_item(
    track: Mapping[str, Any] | None,
    added_at: str | None = None,
    position: int | None = None,
) -> CatalogItem | None:
    if not isinstance(track, Mapping):
        return None
    uri = str(track.get("uri") or "").strip()
    if not uri:
        return None
    artists = tuple(
        str(a.get("name") or "").strip()
        for a in (track.get("artists") or [])
        if isinstance(a, Mapping) and a.get("name")
    )
    album = track.get("album") or {}
    pop = track.get("popularity")
    return CatalogItem(
        id=uri,
        title=str(track.get("name") or UNKNOWN_TITLE),
        authors=artists,
        container=str(album.get("name") or "") if isinstance(album, Mapping) else "",
        added_at=str(added_at or ""),
        popularity=int(pop) if isinstance(pop, (int, float)) else None,
        position=position,
    )

def page_items(body: Mapping[str, Any], offset: int = 0) -> list[CatalogItem]:
    """Rows with no usable track are skipped; positions still count them."""
    out: list[CatalogItem] = []
    for idx, row in enumerate(body.get("items") or []):
        if not isinstance(row, Mapping):
            continue
        item = to_catalog_item(row.get("track"), row.get("added_at") or EPOCH, offset + idx)
        if item is not None:
            out.append(item)
    return out
