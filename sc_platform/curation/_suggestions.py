# sc_platform/curation/_suggestions.py
# gap filling: generative suggestions matched against the remote catalog.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from _logging import log

from ._errors import UpstreamServiceFault
from ._types import CandidateItem, CatalogItem, ProgressSink, RemoteCollection, Suggestion, SuggestionService, author_key

PROGRESS_FROM = 30
PROGRESS_SPAN = 40


def overfetch_ratio(attempt: int) -> float:
    return 1.5 + 0.5 * attempt


def _search_batch(remote: RemoteCollection, batch: Sequence[Suggestion]) -> list[CatalogItem | None]:
    if not batch:
        return []
    with ThreadPoolExecutor(max_workers=len(batch)) as ex:
        return list(ex.map(lambda s: remote.search(f"{s.author} {s.title}"), batch))


def fill_gaps(
    service: SuggestionService,
    remote: RemoteCollection,
    *,
    prompt: str,
    needed: int,
    excluded_ids: Iterable[str] = (),
    exclusions: Iterable[str] = (),
    max_per_author: int = 2,
    attempts: int = 3,
    batch_size: int = 5,
    progress: ProgressSink | None = None,
    now: datetime | None = None,
) -> list[CandidateItem]:
    """Ask for suggestions and resolve them to catalog items until `needed` are found.

    A failing suggestion service only costs the current attempt. Searches run
    in concurrent batches; each batch boundary reports progress.
    """
    now = now or datetime.now(timezone.utc)
    taken = set(excluded_ids)
    excl = list(dict.fromkeys(exclusions))
    per_author: dict[str, int] = {}
    found: list[CandidateItem] = []
    batch_size = max(1, int(batch_size))

    for attempt in range(max(0, int(attempts))):
        remaining = needed - len(found)
        if remaining <= 0:
            break
        count = math.ceil(remaining * overfetch_ratio(attempt))
        try:
            suggestions = list(service.suggest(prompt, count, excl))
        except UpstreamServiceFault as e:
            log(f"suggestion attempt {attempt + 1}/{attempts} failed: {e}", level="WARN", module="SUGGEST")
            continue
        log(f"attempt {attempt + 1}: {len(suggestions)} suggestions for {remaining} open slots",
            level="DEBUG", module="SUGGEST")
        excl.extend(s.signature for s in suggestions if s.signature not in excl)

        for i in range(0, len(suggestions), batch_size):
            if len(found) >= needed:
                break
            if progress is not None:
                pct = PROGRESS_FROM + round(i / len(suggestions) * PROGRESS_SPAN)
                progress.progress(pct, "Searching tracks", found=len(found), needed=needed)
            batch = [
                s for s in suggestions[i:i + batch_size]
                if per_author.get(author_key(s.author), 0) < max_per_author
            ]
            for s, item in zip(batch, _search_batch(remote, batch)):
                if item is None or len(found) >= needed:
                    continue
                akey = author_key(s.author)
                if item.id in taken or per_author.get(akey, 0) >= max_per_author:
                    continue
                taken.add(item.id)
                per_author[akey] = per_author.get(akey, 0) + 1
                found.append(CandidateItem(
                    id=item.id,
                    title=item.title,
                    author=item.display_author,
                    added_at=now,
                    popularity=item.popularity,
                ))
                excl.append(f"{item.display_author} - {item.title}")

    if len(found) < needed:
        log(f"gap filling found {len(found)}/{needed} tracks", level="WARN", module="SUGGEST")
    return found
