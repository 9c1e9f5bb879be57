# providers/auth/_auth_base.py
# SmartCurator - Auth Base
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass
class TokenSet:
    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0
    status: str = "ok"
    error: str | None = None

    def expires_within(self, margin: float, now: float | None = None) -> bool:
        now = time.time() if now is None else now
        return now >= (self.expires_at - margin)

    @classmethod
    def from_mapping(cls, m: Mapping[str, Any] | None) -> "TokenSet":
        m = m or {}
        try:
            exp = int(m.get("expires_at") or 0)
        except (TypeError, ValueError):
            exp = 0
        return cls(
            access_token=str(m.get("access_token") or "").strip(),
            refresh_token=str(m.get("refresh_token") or "").strip(),
            expires_at=exp,
            status=str(m.get("status") or "ok"),
            error=m.get("error"),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "status": self.status,
            "error": self.error,
        }


@dataclass
class AuthStatus:
    connected: bool
    label: str
    owner: str | None = None
    expires_at: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)


class CredentialStore(Protocol):
    def load(self, owner: str) -> TokenSet: ...
    def save(self, owner: str, tokens: TokenSet) -> None: ...
    def mark_invalid(self, owner: str, reason: str) -> None: ...


class ConfigCredentialStore:
    """Owner tokens kept under the config file's `owners` section."""

    def __init__(
        self,
        load_cfg: Callable[[], dict[str, Any]],
        save_cfg: Callable[[dict[str, Any]], None],
    ) -> None:
        self.load_cfg = load_cfg
        self.save_cfg = save_cfg
        self._lock = threading.Lock()

    def _owners(self, cfg: dict[str, Any]) -> dict[str, Any]:
        node = cfg.get("owners")
        if not isinstance(node, dict):
            node = {}
            cfg["owners"] = node
        return node

    def load(self, owner: str) -> TokenSet:
        cfg = self.load_cfg() or {}
        return TokenSet.from_mapping((cfg.get("owners") or {}).get(owner))

    def save(self, owner: str, tokens: TokenSet) -> None:
        with self._lock:
            cfg = self.load_cfg() or {}
            owners = self._owners(cfg)
            node = dict(owners.get(owner) or {})
            node.update(tokens.as_dict())
            owners[owner] = node
            self.save_cfg(cfg)

    def mark_invalid(self, owner: str, reason: str) -> None:
        with self._lock:
            cfg = self.load_cfg() or {}
            owners = self._owners(cfg)
            node = dict(owners.get(owner) or {})
            node.update({"status": "invalid", "error": reason, "access_token": "", "expires_at": 0})
            owners[owner] = node
            self.save_cfg(cfg)
