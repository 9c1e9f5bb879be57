# SmartCurator test scripts
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Sequence

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from providers.auth._auth_base import TokenSet  # noqa: E402
from sc_platform.curation._types import CatalogItem, Suggestion  # noqa: E402

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
MUTATING = {"remove", "append", "move", "update"}


def make_item(
    tid: str,
    *,
    title: str | None = None,
    author: str = "Artist",
    container: str = "Album",
    days_ago: float = 1,
    popularity: int | None = None,
) -> CatalogItem:
    return CatalogItem(
        id=tid,
        title=title or f"Title {tid}",
        authors=(author,),
        container=container,
        added_at=(NOW - timedelta(days=days_ago)).isoformat(),
        popularity=popularity,
    )


@dataclass
class FakeRemote:
    items: list[CatalogItem] = field(default_factory=list)
    catalog: dict[str, CatalogItem] = field(default_factory=dict)
    batch_limit: int = 100
    lost_on_append: set[str] = field(default_factory=set)
    calls: list[tuple[Any, ...]] = field(default_factory=list)
    list_calls: int = 0
    details: dict[str, Any] = field(default_factory=lambda: {"name": "Fake", "description": ""})

    def _known(self, tid: str) -> CatalogItem:
        for it in list(self.items) + list(self.catalog.values()):
            if it.id == tid:
                return it
        return make_item(tid)

    @property
    def ids(self) -> list[str]:
        return [i.id for i in self.items]

    @property
    def mutations(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] in MUTATING]

    def list_items(self, playlist_id: str) -> list[CatalogItem]:
        self.list_calls += 1
        return list(self.items)

    def search(self, query: str) -> CatalogItem | None:
        self.calls.append(("search", query))
        return self.catalog.get(query)

    def remove_positions(self, playlist_id: str, entries: Sequence[tuple[str, Sequence[int]]]) -> Any:
        self.calls.append(("remove", playlist_id, [(u, list(p)) for u, p in entries]))
        positions = sorted((p for _, ps in entries for p in ps), reverse=True)
        for uri, ps in entries:
            for p in ps:
                assert self.items[p].id == uri
        for p in positions:
            self.items.pop(p)
        return {}

    def append(self, playlist_id: str, ids: Sequence[str], position: int | None = None) -> Any:
        self.calls.append(("append", playlist_id, list(ids)))
        self.items.extend(self._known(t) for t in ids if t not in self.lost_on_append)
        return {}

    def move(self, playlist_id: str, from_index: int, to_index: int) -> Any:
        self.calls.append(("move", playlist_id, from_index, to_index))
        self.items.insert(to_index, self.items.pop(from_index))
        return {}

    def get_details(self, playlist_id: str) -> dict[str, Any]:
        return dict(self.details)

    def update_details(self, playlist_id: str, *, name: str | None = None, description: str | None = None) -> Any:
        self.calls.append(("update", playlist_id, name, description))
        return {}


@dataclass
class FakeSuggester:
    batches: list[Any] = field(default_factory=list)
    requests: list[tuple[str, int, list[str]]] = field(default_factory=list)

    def suggest(self, prompt: str, count: int, exclusions: Any) -> list[Suggestion]:
        self.requests.append((prompt, count, list(exclusions)))
        nxt = self.batches.pop(0) if self.batches else []
        if isinstance(nxt, Exception):
            raise nxt
        return list(nxt)


@dataclass
class MemStore:
    tokens: dict[str, TokenSet] = field(default_factory=dict)
    invalid: list[tuple[str, str]] = field(default_factory=list)

    def load(self, owner: str) -> TokenSet:
        return self.tokens.get(owner, TokenSet())

    def save(self, owner: str, tokens: TokenSet) -> None:
        self.tokens[owner] = tokens

    def mark_invalid(self, owner: str, reason: str) -> None:
        self.invalid.append((owner, reason))
        self.tokens[owner] = TokenSet(status="invalid", error=reason)


@pytest.fixture()
def config_base(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("CONFIG_BASE", str(tmp_path))
    return tmp_path

