# sc_platform/curation/_prompt.py
# suggestion prompt from playlist metadata.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import re
from collections.abc import Iterable

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "up", "about", "into", "through", "during",
    "my", "your", "our", "their", "playlist", "music", "songs", "tracks",
})

_PUNCT = re.compile(r"[^\w\s]")


def title_keywords(name: str) -> list[str]:
    words = _PUNCT.sub("", (name or "").lower()).split()
    return [w for w in words if len(w) > 2 and w not in STOP_WORDS]


def build_prompt(
    name: str,
    description: str | None = None,
    *,
    instrumental_only: bool = False,
    reference_artists: Iterable[str] = (),
) -> str:
    parts = [f'Generate a curated playlist for "{name}".']
    if description:
        parts.append(f"Playlist description: {description}")

    keywords = title_keywords(name)
    if keywords:
        parts.append(
            f"Style keywords from title: {', '.join(keywords)}.\n"
            "Use these keywords to guide the mood, genre and vibe of your suggestions."
        )

    refs = [a.strip() for a in reference_artists if a and a.strip()]
    if refs:
        parts.append(f"Reference artists (base suggestions on these or similar): {', '.join(refs)}")

    if instrumental_only:
        parts.append("IMPORTANT: only suggest instrumental tracks (no vocals).")

    parts.append("Suggest tracks that match this vibe.")
    return "\n\n".join(parts)
