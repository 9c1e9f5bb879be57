# /providers/sync/spotify/_playlists.py
# SPOTIFY Module for playlist read/write functions
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Protocol

from _logging import log

from ._common import DETAIL_FIELDS, ITEM_FIELDS, URL_SEARCH, page_items, playlist_url, to_catalog_item, tracks_url
from sc_platform.curation._types import CatalogItem


class _Ctx(Protocol):
    page_size: int
    page_workers: int

    def request(self, method: str, url: str, *, what: str, **kwargs: Any) -> Any: ...


def _page(ctx: _Ctx, pid: str, offset: int) -> Mapping[str, Any]:
    body = ctx.request(
        "GET",
        tracks_url(pid),
        what=f"playlist items @{offset}",
        params={"offset": offset, "limit": ctx.page_size, "fields": ITEM_FIELDS},
    )
    return body if isinstance(body, Mapping) else {}


def list_items(ctx: _Ctx, pid: str) -> list[CatalogItem]:
    """First page learns the total; the rest are fetched concurrently and joined in offset order."""
    first = _page(ctx, pid, 0)
    items = page_items(first)
    try:
        total = int(first.get("total") or 0)
    except (TypeError, ValueError):
        total = len(items)

    offsets = list(range(ctx.page_size, total, ctx.page_size))
    if offsets:
        workers = max(1, min(int(ctx.page_workers), len(offsets)))
        with ThreadPoolExecutor(max_workers=workers) as ex:
            pages = list(ex.map(lambda off: _page(ctx, pid, off), offsets))
        for off, body in zip(offsets, pages):
            items.extend(page_items(body, off))

    log(f"playlist {pid}: fetched {len(items)}/{total} items in {1 + len(offsets)} page(s)",
        level="DEBUG", module="SPOTIFY")
    return items


def search(ctx: _Ctx, query: str) -> CatalogItem | None:
    body = ctx.request(
        "GET", URL_SEARCH, what="search",
        params={"q": query, "type": "track", "limit": 1},
    )
    rows = ((body or {}).get("tracks") or {}).get("items") or []
    if not rows:
        return None
    return to_catalog_item(rows[0])


def remove_positions(ctx: _Ctx, pid: str, entries: Sequence[tuple[str, Sequence[int]]]) -> Any:
    tracks = [{"uri": uri, "positions": sorted(int(p) for p in positions)} for uri, positions in entries]
    if not tracks:
        return {}
    return ctx.request("DELETE", tracks_url(pid), what="remove tracks", json={"tracks": tracks})


def append(ctx: _Ctx, pid: str, ids: Sequence[str], position: int | None = None) -> Any:
    if not ids:
        return {}
    payload: dict[str, Any] = {"uris": list(ids)}
    if position is not None:
        payload["position"] = int(position)
    return ctx.request("POST", tracks_url(pid), what="add tracks", json=payload)


def move(ctx: _Ctx, pid: str, from_index: int, to_index: int) -> Any:
    # insert_before counts positions before the item is lifted out
    insert_before = to_index if to_index < from_index else to_index + 1
    payload = {"range_start": int(from_index), "insert_before": int(insert_before), "range_length": 1}
    return ctx.request("PUT", tracks_url(pid), what="move track", json=payload)


def get_details(ctx: _Ctx, pid: str) -> dict[str, Any]:
    body = ctx.request("GET", playlist_url(pid), what="playlist details", params={"fields": DETAIL_FIELDS})
    body = body if isinstance(body, Mapping) else {}
    return {
        "name": body.get("name") or "",
        "description": body.get("description") or "",
        "followers": int(((body.get("followers") or {}).get("total")) or 0),
        "total": int(((body.get("tracks") or {}).get("total")) or 0),
    }


def update_details(ctx: _Ctx, pid: str, *, name: str | None = None, description: str | None = None) -> Any:
    payload = {k: v for k, v in (("name", name), ("description", description)) if v is not None}
    if not payload:
        return {}
    return ctx.request("PUT", playlist_url(pid), what="update details", json=payload)
