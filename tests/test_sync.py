# SmartCurator test scripts
from __future__ import annotations

import json
from dataclasses import replace

from sc_platform.curation._logging import Emitter
from sc_platform.curation._sync import categorize, missing_in_order, synchronize

from conftest import FakeRemote, make_item


def _remote(*ids: str, **kw) -> FakeRemote:
    return FakeRemote(items=[make_item(i) for i in ids], **kw)


class RowsRemote(FakeRemote):
    """None in items is a remote row with no track behind it; listings skip it but count its position."""

    @property
    def ids(self) -> list:
        return [i.id if i is not None else None for i in self.items]

    def list_items(self, playlist_id: str):
        self.list_calls += 1
        return [replace(it, position=n) for n, it in enumerate(self.items) if it is not None]


def test_categorize_keeps_only_needed_pinned_occurrences() -> None:
    assert categorize(["p", "x", "p", "p"], ["p", "p", "y"], {"p"}) == [1, 3]
    assert categorize(["a", "b"], ["a", "b"], set()) == [0, 1]


def test_missing_in_order_respects_multiplicity() -> None:
    assert missing_in_order(["p"], ["a", "p", "p", "b"]) == ["a", "p", "b"]


def test_pinned_reorder_is_a_single_move() -> None:
    remote = _remote("D", "A")
    sleeps: list[float] = []

    report = synchronize(remote, "pl", ["A", "D"], {"A", "D"}, sleep=sleeps.append, move_delay=0.5)

    assert remote.mutations == [("move", "pl", 1, 0)]
    assert remote.ids == ["A", "D"]
    assert (report.removed, report.added, report.moved) == (0, 0, 1)
    assert sleeps == [0.5]


def test_unpinned_entries_are_cleared_and_rebuilt() -> None:
    remote = _remote("A", "B", "C")

    report = synchronize(remote, "pl", ["C", "A"], (), move_delay=0)

    assert remote.mutations == [
        ("remove", "pl", [("C", [2]), ("B", [1]), ("A", [0])]),
        ("append", "pl", ["C", "A"]),
    ]
    assert remote.ids == ["C", "A"]
    assert report.moved == 0


def test_removals_are_batched_highest_position_first() -> None:
    remote = _remote("a", "b", "c", "d", "e", batch_limit=2)

    synchronize(remote, "pl", [], (), move_delay=0)

    removes = [c[2] for c in remote.mutations if c[0] == "remove"]
    assert removes == [[("e", [4]), ("d", [3])], [("c", [2]), ("b", [1])], [("a", [0])]]
    assert remote.ids == []


def test_adds_are_batched() -> None:
    remote = _remote(batch_limit=2)
    synchronize(remote, "pl", ["a", "b", "c"], (), move_delay=0)
    assert [c for c in remote.mutations if c[0] == "append"] == [
        ("append", "pl", ["a", "b"]),
        ("append", "pl", ["c"]),
    ]


def test_duplicate_pinned_occurrences() -> None:
    remote = _remote("P", "X", "P")

    report = synchronize(remote, "pl", ["P", "P", "Y"], {"P"}, move_delay=0)

    assert remote.ids == ["P", "P", "Y"]
    assert report.removed == 1
    assert report.added == 1
    assert report.moved == 0


def test_pinned_entry_moves_between_new_items() -> None:
    remote = _remote("P", "old")

    synchronize(remote, "pl", ["a", "P", "b"], {"P"}, move_delay=0)

    assert remote.ids == ["a", "P", "b"]
    assert [c[0] for c in remote.mutations] == ["remove", "append", "move"]


def test_missing_item_counts_as_consistency_fault() -> None:
    remote = _remote(lost_on_append={"Z"})
    events: list[dict] = []

    report = synchronize(
        remote, "pl", ["A", "Z"], (), move_delay=0,
        emit=Emitter(lambda line: events.append(json.loads(line))).emit,
    )

    assert report.consistency_faults == 1
    assert remote.ids == ["A"]
    faults = [e for e in events if e["event"] == "sync:consistency_fault"]
    assert faults == [{"event": "sync:consistency_fault", "playlist": "pl", "id": "Z", "index": 1}]
    assert events[-1]["event"] == "sync:done"


def test_dry_run_makes_no_mutating_calls() -> None:
    live = _remote("D", "x", "A")
    dry = _remote("D", "x", "A")
    sleeps: list[float] = []

    expected = synchronize(live, "pl", ["A", "n", "D"], {"A", "D"}, move_delay=0)
    report = synchronize(dry, "pl", ["A", "n", "D"], {"A", "D"}, dry_run=True, sleep=sleeps.append)

    assert dry.mutations == []
    assert dry.ids == ["D", "x", "A"]
    assert sleeps == []
    assert report.dry_run is True
    assert (report.removed, report.added, report.moved) == (expected.removed, expected.added, expected.moved)
    assert live.ids == ["A", "n", "D"]


def test_unresolved_row_does_not_shift_positions() -> None:
    remote = RowsRemote(items=[None, make_item("x"), make_item("b")])

    report = synchronize(remote, "pl", ["b"], {"b"}, move_delay=0)

    assert remote.mutations == [
        ("remove", "pl", [("x", [1])]),
        ("move", "pl", 1, 0),
    ]
    assert remote.ids == ["b", None]
    assert (report.removed, report.moved, report.consistency_faults) == (1, 1, 0)


def test_unresolved_rows_are_left_in_place_and_pushed_back() -> None:
    remote = RowsRemote(items=[None, make_item("b"), make_item("c")])

    synchronize(remote, "pl", ["c", "b"], {"b", "c"}, move_delay=0)

    assert remote.mutations == [("move", "pl", 2, 0), ("move", "pl", 2, 1)]
    assert remote.ids == ["c", "b", None]
