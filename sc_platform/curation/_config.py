# sc_platform/curation/_config.py
# per-playlist configuration models.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ._errors import ValidationFault
from ._types import PinnedItem, SizeLimitPolicy

TRACK_PREFIX = "spotify:track:"
PLAYLIST_PREFIX = "spotify:playlist:"


def normalize_playlist_id(value: str) -> str:
    v = str(value or "").strip()
    return v[len(PLAYLIST_PREFIX):] if v.startswith(PLAYLIST_PREFIX) else v


class PositionRange(BaseModel):
    min: int = Field(ge=1)
    max: int = Field(ge=1)

    @model_validator(mode="after")
    def _ordered(self) -> "PositionRange":
        if self.min > self.max:
            raise ValueError("position_range.min must be <= position_range.max")
        return self


class PinnedTrack(BaseModel):
    id: str
    position_range: PositionRange
    title: str | None = None
    author: str | None = None

    @field_validator("id")
    @classmethod
    def _track_uri(cls, v: str) -> str:
        v = (v or "").strip()
        if not v.startswith(TRACK_PREFIX):
            raise ValueError(f"pinned id must start with {TRACK_PREFIX}")
        return v

    def to_item(self) -> PinnedItem:
        return PinnedItem(
            id=self.id,
            min_pos=self.position_range.min,
            max_pos=self.position_range.max,
            title=self.title,
            author=self.author,
        )


class PlaylistSettings(BaseModel):
    target_size: int = Field(default=20, ge=0, le=10000)
    description: str = ""
    reference_artists: list[str] = Field(default_factory=list)
    shuffle_at_end: bool = True
    size_limit_policy: SizeLimitPolicy = SizeLimitPolicy.DROP_RANDOM


class CurationRules(BaseModel):
    max_age_days: int = Field(default=30, ge=1)
    remove_duplicates: bool = True
    max_per_author: int = Field(default=2, ge=1)
    min_author_distance: int = Field(default=0, ge=0)


class SuggestionConfig(BaseModel):
    enabled: bool = False
    tracks_to_add: int = Field(default=10, ge=0, le=50)
    model: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    instrumental_only: bool = False


class PlaylistConfig(BaseModel):
    id: str
    name: str = ""
    enabled: bool = True
    owner: str = "default"
    dry_run: bool = False
    settings: PlaylistSettings = Field(default_factory=PlaylistSettings)
    rules: CurationRules = Field(default_factory=CurationRules)
    pinned: list[PinnedTrack] = Field(default_factory=list)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)

    @field_validator("id")
    @classmethod
    def _bare_id(cls, v: str) -> str:
        v = normalize_playlist_id(v)
        if not v or ":" in v:
            raise ValueError("playlist id must be a bare id or a spotify:playlist: URI")
        return v

    @field_validator("pinned")
    @classmethod
    def _unique_pins(cls, v: list[PinnedTrack]) -> list[PinnedTrack]:
        seen: set[str] = set()
        for p in v:
            if p.id in seen:
                raise ValueError(f"{p.id} is pinned more than once")
            seen.add(p.id)
        return v

    def pinned_items(self) -> list[PinnedItem]:
        return [p.to_item() for p in self.pinned]

    @property
    def label(self) -> str:
        return self.name or self.id


def parse_playlist_config(raw: Mapping[str, Any] | PlaylistConfig) -> PlaylistConfig:
    """Validate a raw playlist block; any problem surfaces as ValidationFault."""
    if isinstance(raw, PlaylistConfig):
        return raw
    try:
        return PlaylistConfig.model_validate(dict(raw or {}))
    except ValidationError as e:
        issues = [
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in e.errors()
        ]
        raise ValidationFault(f"invalid playlist config: {len(issues)} issue(s)", issues) from e
