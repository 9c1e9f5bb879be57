# /providers/sync/_mod_common.py
# SmartCurator common remote module helpers
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import json
import os
from typing import Any, Callable, Mapping
from urllib.parse import urlparse

import requests

from sc_platform.curation._errors import (
    CredentialExpired,
    RateLimited,
    RemoteCallError,
    ServerFault,
    TransientNetworkFault,
)

__VERSION__ = "0.3.0"
__all__ = [
    "HitSession",
    "make_emitter",
    "build_session",
    "parse_rate_limit",
    "safe_json",
    "raise_for_status",
    "send",
    "label_spotify",
]

EmitFn = Callable[[str, Mapping[str, Any]], None]
FeatureLabelFn = Callable[[str, str, Mapping[str, Any]], str]


def make_emitter(ctx: Any) -> EmitFn:
    emit_fn: Callable[..., Any] | None = None
    if hasattr(ctx, "emit") and callable(getattr(ctx, "emit")):
        emit_fn = getattr(ctx, "emit")
    elif callable(ctx):
        emit_fn = ctx

    def _emit(event: str, payload: Mapping[str, Any]) -> None:
        if not emit_fn:
            return
        try:
            emit_fn(event, **dict(payload))
        except Exception:
            pass

    return _emit


def default_feature_label(method: str, url: str, kw: Mapping[str, Any]) -> str:
    segs = [s for s in (urlparse(url).path or "/").split("/") if s]
    return ("/".join(segs[:3]) or "unknown").lower()


def label_spotify(method: str, url: str, kw: Mapping[str, Any]) -> str:
    segs = [s for s in (urlparse(url).path or "/").split("/") if s]
    m = method.upper()
    if segs[:2] == ["v1", "search"]:
        return "search"
    if len(segs) >= 3 and segs[:2] == ["v1", "playlists"]:
        if len(segs) >= 4 and segs[3] == "tracks":
            return {
                "GET": "playlist:items",
                "POST": "playlist:add",
                "DELETE": "playlist:remove",
                "PUT": "playlist:move",
            }.get(m, "playlist:tracks")
        return "playlist:details" if m == "GET" else "playlist:update"
    return default_feature_label(method, url, kw)


class HitSession(requests.Session):
    def __init__(
        self,
        provider: str,
        emit: EmitFn,
        feature_label: FeatureLabelFn | None = None,
        emit_hits: bool | None = None,
    ):
        super().__init__()
        self._provider = provider
        self._emit = emit
        self._label = feature_label or default_feature_label
        self._emit_hits = bool(os.getenv("SC_API_HITS")) if emit_hits is None else bool(emit_hits)

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # type: ignore[override]
        try:
            return super().request(method, url, **kwargs)
        finally:
            if self._emit_hits:
                try:
                    feature = self._label(method.upper(), url, kwargs)
                except Exception:
                    feature = "unknown"
                self._emit("api:hit", {"provider": self._provider, "feature": feature})


def build_session(
    provider: str,
    ctx: Any = None,
    *,
    feature_label: FeatureLabelFn | None = None,
    emit_hits: bool | None = None,
) -> HitSession:
    return HitSession(provider, make_emitter(ctx), feature_label, emit_hits)


def parse_rate_limit(h: Mapping[str, Any]) -> dict[str, float | None]:
    def _f(x: Any) -> float | None:
        try:
            return float(x)
        except (TypeError, ValueError):
            return None

    return {
        "retry_after": _f(h.get("Retry-After") or h.get("retry-after")),
        "remaining": _f(h.get("X-RateLimit-Remaining") or h.get("RateLimit-Remaining")),
    }


def safe_json(resp: requests.Response) -> Any:
    try:
        if not (resp.text or "").strip():
            return {}
        ctype = (resp.headers.get("Content-Type") or "").lower()
        if "json" in ctype:
            return resp.json()
        return json.loads(resp.text)
    except ValueError:
        return {}


def raise_for_status(resp: requests.Response, what: str) -> None:
    """Map a non-2xx response onto the remote error taxonomy."""
    code = resp.status_code
    if 200 <= code < 300:
        return
    body = safe_json(resp)
    if code == 429:
        raise RateLimited(f"{what}: rate limited", status=code,
                          retry_after=parse_rate_limit(resp.headers)["retry_after"], body=body)
    if code == 401:
        raise CredentialExpired(f"{what}: unauthorized", status=code, body=body)
    if code >= 500:
        raise ServerFault(f"{what}: server error {code}", status=code,
                          retry_after=parse_rate_limit(resp.headers)["retry_after"], body=body)
    raise RemoteCallError(f"{what}: http {code}", status=code, body=body)


def send(
    session: requests.Session,
    method: str,
    url: str,
    *,
    what: str,
    timeout: float = 10.0,
    **kwargs: Any,
) -> Any:
    """One HTTP attempt; returns decoded JSON or raises a taxonomy error."""
    try:
        resp = session.request(method, url, timeout=timeout, **kwargs)
    except (requests.ConnectionError, requests.Timeout) as e:
        raise TransientNetworkFault(f"{what}: {e}") from e
    except requests.RequestException as e:
        raise RemoteCallError(f"{what}: {e}") from e
    raise_for_status(resp, what)
    return safe_json(resp)
