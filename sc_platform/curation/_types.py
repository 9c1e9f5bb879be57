# sc_platform/curation/_types.py
# value types and protocols for the curation engine.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

UNKNOWN_AUTHOR = "Unknown Artist"
UNKNOWN_TITLE = "Unknown Track"
VARIOUS_AUTHORS = "various artists"


class SizeLimitPolicy(str, Enum):
    DROP_NEWEST = "drop_newest"
    DROP_OLDEST = "drop_oldest"
    DROP_RANDOM = "drop_random"
    DROP_MOST_POPULAR = "drop_most_popular"
    DROP_LEAST_POPULAR = "drop_least_popular"


class RemovalReason(str, Enum):
    DUPLICATE = "duplicate"
    EXPIRED = "expired"
    AUTHOR_LIMIT = "author_limit"
    SIZE_LIMIT = "size_limit"
    OTHER = "other"


def parse_ts(value: str | datetime) -> datetime:
    """ISO-8601 to an aware datetime. Malformed input raises ValueError."""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def author_key(author: str | None) -> str:
    """First comma-separated author token, lowercased."""
    return str(author or "").split(",")[0].strip().lower()


@dataclass(frozen=True)
class CatalogItem:
    id: str
    title: str
    authors: tuple[str, ...]
    container: str
    added_at: str
    popularity: int | None = None
    # index on the remote collection, counting rows the listing could not resolve
    position: int | None = field(default=None, compare=False)

    @property
    def author_line(self) -> str:
        return ", ".join(a for a in self.authors if a) or UNKNOWN_AUTHOR

    @property
    def primary_author(self) -> str:
        return author_key(self.author_line)

    @property
    def display_author(self) -> str:
        return self.authors[0] if self.authors and self.authors[0] else UNKNOWN_AUTHOR


@dataclass(frozen=True)
class SurvivingItem(CatalogItem):
    is_pinned: bool = False


@dataclass(frozen=True)
class PinnedItem:
    id: str
    min_pos: int
    max_pos: int
    title: str | None = None
    author: str | None = None

    @property
    def is_fixed(self) -> bool:
        return self.min_pos == self.max_pos


@dataclass(frozen=True)
class CandidateItem:
    id: str
    title: str
    author: str
    added_at: datetime | None = None
    popularity: int | None = None

    @property
    def author_key(self) -> str:
        return author_key(self.author)

    @classmethod
    def from_catalog(cls, item: CatalogItem) -> "CandidateItem":
        return cls(
            id=item.id,
            title=item.title,
            author=item.display_author,
            added_at=parse_ts(item.added_at) if item.added_at else None,
            popularity=item.popularity,
        )


@dataclass(frozen=True)
class RemovedItem:
    item: CatalogItem
    reason: RemovalReason


@dataclass
class FilterResult:
    survivors: list[SurvivingItem] = field(default_factory=list)
    removed: list[RemovedItem] = field(default_factory=list)

    def count(self, reason: RemovalReason) -> int:
        return sum(1 for r in self.removed if r.reason is reason)

    def reason_map(self) -> dict[str, RemovalReason]:
        # first evaluated reason wins per id
        out: dict[str, RemovalReason] = {}
        for r in self.removed:
            out.setdefault(r.item.id, r.reason)
        return out


@dataclass(frozen=True)
class DiffEntry:
    id: str
    title: str
    author: str
    reason: str | None = None

    def as_dict(self) -> dict[str, Any]:
        d = {"id": self.id, "title": self.title, "author": self.author}
        if self.reason is not None:
            d["reason"] = self.reason
        return d


@dataclass
class DiffResult:
    added: list[DiffEntry] = field(default_factory=list)
    removed: list[DiffEntry] = field(default_factory=list)
    kept_pinned: list[DiffEntry] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "added": [e.as_dict() for e in self.added],
            "removed": [e.as_dict() for e in self.removed],
            "kept_pinned": [e.as_dict() for e in self.kept_pinned],
        }


@dataclass(frozen=True)
class Suggestion:
    author: str
    title: str
    rationale: str = ""

    @property
    def signature(self) -> str:
        return f"{self.author} - {self.title}"


@dataclass
class SyncReport:
    removed: int = 0
    added: int = 0
    moved: int = 0
    consistency_faults: int = 0
    dry_run: bool = False

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ReconcileResult:
    added_count: int
    removed_count: int
    final_diff: DiffResult
    final_ids: list[str] = field(default_factory=list)
    sync: SyncReport = field(default_factory=SyncReport)
    dry_run: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "added_count": self.added_count,
            "removed_count": self.removed_count,
            "final_diff": self.final_diff.as_dict(),
            "final_count": len(self.final_ids),
            "sync": self.sync.as_dict(),
            "dry_run": self.dry_run,
        }


@dataclass
class CurationEstimate:
    current_size: int = 0
    duplicates_to_remove: int = 0
    aged_out_count: int = 0
    author_limit_removed: int = 0
    size_limit_removed: int = 0
    pinned_to_add: int = 0
    suggested_to_add: int = 0
    predicted_final_size: int = 0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


# Collaborator protocols

class RemoteCollection(Protocol):
    batch_limit: int

    def list_items(self, playlist_id: str) -> list[CatalogItem]: ...
    def search(self, query: str) -> CatalogItem | None: ...
    def remove_positions(self, playlist_id: str, entries: Sequence[tuple[str, Sequence[int]]]) -> Any: ...
    def append(self, playlist_id: str, ids: Sequence[str], position: int | None = None) -> Any: ...
    def move(self, playlist_id: str, from_index: int, to_index: int) -> Any: ...
    def get_details(self, playlist_id: str) -> Mapping[str, Any]: ...
    def update_details(self, playlist_id: str, *, name: str | None = None, description: str | None = None) -> Any: ...


class SuggestionService(Protocol):
    def suggest(self, prompt: str, count: int, exclusions: Iterable[str]) -> list[Suggestion]: ...


class CredentialSource(Protocol):
    def ensure_valid(self) -> str: ...
    def force_refresh(self) -> str: ...


class ProgressSink(Protocol):
    def progress(self, percent: int, step: str, **meta: Any) -> None: ...
    def success(self, message: str, **meta: Any) -> None: ...
    def error(self, message: str, **meta: Any) -> None: ...
