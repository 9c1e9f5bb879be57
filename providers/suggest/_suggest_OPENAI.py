# providers/suggest/_suggest_OPENAI.py
# SmartCurator - OpenAI suggestion provider
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import json
import os
from collections.abc import Iterable, Mapping
from typing import Any

from openai import OpenAI, OpenAIError

from _logging import log
from sc_platform.curation._errors import UpstreamServiceFault
from sc_platform.curation._types import Suggestion

__VERSION__ = "1.0.0"

DEFAULT_MODEL = "gpt-4o-mini"
MAX_EXCLUSIONS = 50

SYSTEM = (
    "You are a music playlist curator. Answer with a JSON object of the form "
    '{"tracks": [{"artist": "...", "track": "...", "reason": "..."}]} and nothing else.'
)


def _rows(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in ("tracks", "suggestions", "items"):
            v = payload.get(key)
            if isinstance(v, list):
                return v
    return []


def parse_suggestions(text: str) -> list[Suggestion]:
    try:
        payload = json.loads(text or "")
    except ValueError as e:
        raise UpstreamServiceFault(f"suggestion service returned invalid JSON: {e}") from e
    out: list[Suggestion] = []
    for row in _rows(payload):
        if not isinstance(row, Mapping):
            continue
        author = str(row.get("artist") or row.get("author") or "").strip()
        title = str(row.get("track") or row.get("title") or "").strip()
        if author and title:
            out.append(Suggestion(author=author, title=title, rationale=str(row.get("reason") or "")))
    return out


class OpenAISuggester:
    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        client: Any = None,
    ) -> None:
        self.model = model or DEFAULT_MODEL
        self.temperature = float(temperature)
        if client is None:
            try:
                client = OpenAI(api_key=api_key or os.getenv("OPENAI_API_KEY"))
            except OpenAIError as e:
                raise UpstreamServiceFault(f"suggestion service unavailable: {e}") from e
        self.client = client

    def _user_prompt(self, prompt: str, count: int, exclusions: list[str]) -> str:
        text = f"{prompt}\n\nSuggest exactly {count} tracks."
        if exclusions:
            text += f"\nDo NOT suggest any of these tracks: {json.dumps(exclusions[:MAX_EXCLUSIONS])}"
        return text

    def suggest(self, prompt: str, count: int, exclusions: Iterable[str]) -> list[Suggestion]:
        if count <= 0:
            return []
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": SYSTEM},
                    {"role": "user", "content": self._user_prompt(prompt, count, list(exclusions))},
                ],
            )
        except OpenAIError as e:
            raise UpstreamServiceFault(f"suggestion service error: {e}") from e

        try:
            text = resp.choices[0].message.content or ""
        except (AttributeError, IndexError) as e:
            raise UpstreamServiceFault("suggestion service returned no choices") from e

        out = parse_suggestions(text)
        log(f"suggested {len(out)} tracks (requested {count})", level="DEBUG", module="SUGGEST")
        return out


def build_suggester(cfg: Mapping[str, Any], playlist: Any = None, **kw: Any) -> OpenAISuggester:
    """Service settings from the `openai` section, overridden per playlist."""
    oa = cfg.get("openai") or {}
    sug = getattr(playlist, "suggestions", None)
    return OpenAISuggester(
        api_key=str(oa.get("api_key") or "") or None,
        model=(getattr(sug, "model", None) or oa.get("model") or DEFAULT_MODEL),
        temperature=float(getattr(sug, "temperature", None) if sug is not None else oa.get("temperature", 0.7)),
        **kw,
    )


__all__ = ["OpenAISuggester", "build_suggester", "parse_suggestions", "__VERSION__"]
