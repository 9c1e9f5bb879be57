# SmartCurator test scripts
from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

import pytest
from openai import OpenAIError

from providers.suggest._suggest_OPENAI import OpenAISuggester, build_suggester, parse_suggestions
from sc_platform.curation import Suggestion, UpstreamServiceFault, parse_playlist_config


class FakeCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def create(self, **kw: Any) -> Any:
        self.calls.append(kw)
        if self.error is not None:
            raise self.error
        msg = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=msg)])


def fake_client(completions: FakeCompletions) -> Any:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_parse_accepts_object_and_list_shapes() -> None:
    obj = json.dumps({"tracks": [{"artist": "Tycho", "track": "Awake", "reason": "calm"}]})
    lst = json.dumps([{"author": "Bonobo", "title": "Kerala"}, {"artist": "", "track": "x"}, "junk"])

    assert parse_suggestions(obj) == [Suggestion("Tycho", "Awake", "calm")]
    assert parse_suggestions(lst) == [Suggestion("Bonobo", "Kerala")]
    assert parse_suggestions(json.dumps({"nothing": []})) == []


def test_parse_rejects_invalid_json() -> None:
    with pytest.raises(UpstreamServiceFault):
        parse_suggestions("Sure! Here are some tracks:")


def test_suggest_sends_json_mode_request() -> None:
    comp = FakeCompletions(json.dumps({"tracks": [{"artist": "A", "track": "T"}]}))
    sug = OpenAISuggester(model="m-1", temperature=0.3, client=fake_client(comp))

    out = sug.suggest("make it chill", 4, ["X - Y"])

    assert out == [Suggestion("A", "T")]
    (call,) = comp.calls
    assert call["model"] == "m-1"
    assert call["temperature"] == 0.3
    assert call["response_format"] == {"type": "json_object"}
    user = call["messages"][1]["content"]
    assert user.startswith("make it chill")
    assert "exactly 4 tracks" in user
    assert '"X - Y"' in user


def test_zero_count_skips_the_service() -> None:
    comp = FakeCompletions("{}")
    assert OpenAISuggester(client=fake_client(comp)).suggest("p", 0, []) == []
    assert comp.calls == []


def test_service_errors_become_upstream_faults() -> None:
    comp = FakeCompletions(error=OpenAIError("quota exceeded"))
    with pytest.raises(UpstreamServiceFault):
        OpenAISuggester(client=fake_client(comp)).suggest("p", 3, [])


def test_build_suggester_prefers_playlist_settings() -> None:
    cfg = {"openai": {"api_key": "k", "model": "global-model", "temperature": 0.9}}
    pc = parse_playlist_config({"id": "p", "suggestions": {"model": "local-model", "temperature": 0.2}})
    client = fake_client(FakeCompletions("{}"))

    sug = build_suggester(cfg, pc, client=client)
    assert (sug.model, sug.temperature) == ("local-model", 0.2)

    sug = build_suggester(cfg, None, client=client)
    assert (sug.model, sug.temperature) == ("global-model", 0.9)
