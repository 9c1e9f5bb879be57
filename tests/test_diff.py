# SmartCurator test scripts
from __future__ import annotations

from sc_platform.curation._diff import calculate_diff
from sc_platform.curation._types import CandidateItem, PinnedItem, RemovalReason

from conftest import make_item


def test_removed_counts_every_dropped_occurrence() -> None:
    x = make_item("x", title="X", author="Band")
    y = make_item("y")

    diff = calculate_diff([x, x, y], [y], ["y"], [], [], {"x": RemovalReason.DUPLICATE})

    assert [(e.id, e.reason) for e in diff.removed] == [("x", "duplicate"), ("x", "duplicate")]
    assert diff.removed[0].title == "X"
    assert diff.removed[0].author == "Band"
    assert diff.added == []


def test_partial_duplicate_removal() -> None:
    x = make_item("x")
    diff = calculate_diff([x, x, x], [x], ["x"], [], [])
    assert len(diff.removed) == 2
    assert {e.reason for e in diff.removed} == {"other"}


def test_added_metadata_priority() -> None:
    new = CandidateItem(id="n", title="New Song", author="New Band")
    pins = [PinnedItem(id="p", min_pos=1, max_pos=1, title="Pinned", author="Pin Band"),
            PinnedItem(id="q", min_pos=2, max_pos=2)]

    diff = calculate_diff([], [], ["p", "n", "u", "q"], pins, [new])

    assert [(e.id, e.title, e.author) for e in diff.added] == [
        ("p", "Pinned", "Pin Band"),
        ("n", "New Song", "New Band"),
        ("u", "Unknown", "Unknown"),
        ("q", "Unknown", "Unknown"),
    ]
    assert [e.id for e in diff.kept_pinned] == ["p", "q"]


def test_surviving_items_are_not_reported_as_added() -> None:
    s = make_item("s")
    pins = [PinnedItem(id="s", min_pos=1, max_pos=1), PinnedItem(id="gone", min_pos=2, max_pos=2)]

    diff = calculate_diff([s], [s], ["s"], pins, [])

    assert diff.added == []
    assert diff.removed == []
    assert [e.id for e in diff.kept_pinned] == ["s"]
    assert diff.as_dict()["kept_pinned"] == [{"id": "s", "title": "Unknown", "author": "Unknown"}]
