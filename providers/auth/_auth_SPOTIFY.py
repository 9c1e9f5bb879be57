# providers/auth/_auth_SPOTIFY.py
# SmartCurator - Spotify Authentication Provider
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from typing import Any

import requests

from _logging import log
from providers.auth._auth_base import AuthStatus, CredentialStore, TokenSet
from sc_platform.curation._errors import (
    CriticalAuthFault,
    RateLimited,
    RemoteCallError,
    ServerFault,
    TransientNetworkFault,
)

__VERSION__ = "1.0.0"

TOKEN_URL = "https://accounts.spotify.com/api/token"
DEFAULT_MARGIN = 300


def _retry_after(r: requests.Response) -> float | None:
    try:
        return float(r.headers.get("Retry-After"))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


class SpotifyCredentials:
    """Refreshable access token for one owner; rotated tokens go back to the store."""

    def __init__(
        self,
        owner: str,
        store: CredentialStore,
        *,
        client_id: str,
        client_secret: str,
        margin: float = DEFAULT_MARGIN,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.owner = owner
        self.store = store
        self.client_id = client_id
        self.client_secret = client_secret
        self.margin = float(margin)
        self.timeout = float(timeout)
        self.session = session or requests.Session()
        self.clock = clock
        self.tokens = store.load(owner)
        self._lock = threading.Lock()

    @property
    def access_token(self) -> str:
        return self.tokens.access_token

    def ensure_valid(self) -> str:
        with self._lock:
            t = self.tokens
            if t.access_token and not t.expires_within(self.margin, self.clock()):
                return t.access_token
            log(f"access token for '{self.owner}' missing or expiring, refreshing", level="DEBUG", module="AUTH")
            return self._refresh()

    def force_refresh(self) -> str:
        with self._lock:
            log(f"forcing token refresh for '{self.owner}'", level="INFO", module="AUTH")
            return self._refresh()

    def _refresh(self) -> str:
        rt = self.tokens.refresh_token
        if self.tokens.status == "invalid":
            raise CriticalAuthFault(f"credential for '{self.owner}' is marked invalid", owner=self.owner)
        if not rt:
            raise CriticalAuthFault(f"no refresh token for '{self.owner}'", owner=self.owner)
        if not (self.client_id and self.client_secret):
            raise CriticalAuthFault("spotify client_id/client_secret missing", owner=self.owner)

        try:
            r = self.session.post(
                TOKEN_URL,
                data={"grant_type": "refresh_token", "refresh_token": rt},
                auth=(self.client_id, self.client_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransientNetworkFault(f"token refresh failed: {e}") from e

        body: dict[str, Any] = {}
        try:
            body = r.json() or {}
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if r.status_code == 429:
            raise RateLimited("token refresh rate limited", status=429, retry_after=_retry_after(r))
        if r.status_code >= 500:
            raise ServerFault(f"token endpoint error {r.status_code}", status=r.status_code)
        if body.get("error") == "invalid_grant" or r.status_code in (400, 401):
            err = str(body.get("error_description") or body.get("error") or r.status_code)
            log(f"token refresh rejected for '{self.owner}': {err}", level="ERROR", module="AUTH")
            raise CriticalAuthFault(f"refresh rejected: {err}", owner=self.owner)
        if not r.ok:
            raise RemoteCallError(f"token refresh failed {r.status_code}", status=r.status_code, body=body)

        acc = str(body.get("access_token") or "").strip()
        if not acc:
            raise RemoteCallError("token refresh returned no access_token", status=r.status_code, body=body)

        exp_in = int(body.get("expires_in") or 3600)
        self.tokens = TokenSet(
            access_token=acc,
            refresh_token=str(body.get("refresh_token") or rt).strip(),
            expires_at=int(self.clock()) + exp_in,
            status="ok",
            error=None,
        )
        self.store.save(self.owner, self.tokens)
        log(f"token refreshed and persisted for '{self.owner}'", level="DEBUG", module="AUTH")
        return acc

    def status(self) -> AuthStatus:
        t = self.tokens
        return AuthStatus(
            connected=bool(t.refresh_token) and t.status != "invalid",
            label="Spotify",
            owner=self.owner,
            expires_at=t.expires_at or None,
            extra={"status": t.status, "error": t.error},
        )


def credentials_for(owner: str, cfg: Mapping[str, Any], store: CredentialStore, **kw: Any) -> SpotifyCredentials:
    sp = cfg.get("spotify") or {}
    cur = cfg.get("curation") or {}
    return SpotifyCredentials(
        owner,
        store,
        client_id=str(sp.get("client_id") or "").strip(),
        client_secret=str(sp.get("client_secret") or "").strip(),
        margin=float(cur.get("token_refresh_margin_sec", DEFAULT_MARGIN)),
        timeout=float(sp.get("timeout", 10.0)),
        **kw,
    )


__all__ = ["SpotifyCredentials", "credentials_for", "TOKEN_URL", "__VERSION__"]
