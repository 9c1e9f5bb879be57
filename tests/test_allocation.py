# SmartCurator test scripts
from __future__ import annotations

import random
from datetime import timedelta

import pytest

from sc_platform.curation._placer import place_pinned
from sc_platform.curation._selection import coerce_policy, truncate_pool
from sc_platform.curation._shuffle import fill_with_shuffle, shuffle_with_author_distance
from sc_platform.curation._slots import allocate
from sc_platform.curation._types import CandidateItem, PinnedItem, RemovalReason, SizeLimitPolicy

from conftest import NOW


def cand(cid: str, author: str = "A", *, days_ago: float = 1, popularity: int | None = None) -> CandidateItem:
    return CandidateItem(
        id=cid,
        title=f"T {cid}",
        author=author,
        added_at=NOW - timedelta(days=days_ago),
        popularity=popularity,
    )


def pin(pid: str, lo: int, hi: int | None = None) -> PinnedItem:
    return PinnedItem(id=pid, min_pos=lo, max_pos=hi if hi is not None else lo)


# Placement

def test_fixed_pin_conflict_falls_back_to_first_empty() -> None:
    grid = [None] * 4
    place_pinned(grid, [pin("p1", 1), pin("p2", 1)], shuffle=False)
    assert grid == ["p1", "p2", None, None]


def test_ranged_pin_takes_nearest_cell_left_first() -> None:
    grid = [None] * 5
    place_pinned(grid, [pin("f2", 2), pin("f3", 3), pin("r", 2, 3)], shuffle=False)
    assert grid == ["r", "f2", "f3", None, None]


def test_ranged_pin_goes_right_when_left_is_taken() -> None:
    grid = [None] * 5
    place_pinned(grid, [pin("f1", 1), pin("f2", 2), pin("f3", 3), pin("r", 2, 3)], shuffle=False)
    assert grid == ["f1", "f2", "f3", "r", None]


def test_range_beyond_grid_is_clipped() -> None:
    grid = [None] * 3
    place_pinned(grid, [pin("r", 3, 10)], shuffle=False)
    assert grid == [None, None, "r"]


# Eviction

@pytest.fixture()
def pool() -> list[CandidateItem]:
    return [
        cand("oldest", days_ago=10, popularity=90),
        cand("mid", days_ago=5, popularity=20),
        cand("newest", days_ago=1, popularity=95),
        cand("mid2", days_ago=4, popularity=10),
    ]


@pytest.mark.parametrize(
    "policy, kept",
    [
        (SizeLimitPolicy.DROP_NEWEST, {"oldest", "mid"}),
        (SizeLimitPolicy.DROP_OLDEST, {"newest", "mid2"}),
        (SizeLimitPolicy.DROP_MOST_POPULAR, {"mid2", "mid"}),
        (SizeLimitPolicy.DROP_LEAST_POPULAR, {"newest", "oldest"}),
    ],
)
def test_eviction_policies(pool, policy, kept) -> None:
    assert {c.id for c in truncate_pool(pool, 2, policy)} == kept


def test_drop_random_keeps_a_subset(pool) -> None:
    out = truncate_pool(pool, 2, "drop_random", rng=random.Random(7))
    assert len(out) == 2
    assert {c.id for c in out} <= {c.id for c in pool}


def test_unknown_policy_falls_back_to_random() -> None:
    assert coerce_policy("nonsense") is SizeLimitPolicy.DROP_RANDOM
    assert coerce_policy("DROP_NEWEST") is SizeLimitPolicy.DROP_NEWEST


# Allocation

def test_every_pin_appears_exactly_once() -> None:
    survivors = [cand(f"s{i}", author=f"a{i % 3}") for i in range(10)]
    pins = [pin("p1", 1), pin("p2", 2, 4), pin("p3", 2, 4)]

    res = allocate(pins, survivors, [], 5, rng=random.Random(3))

    assert len(res.ordered_ids) == 5
    assert res.ordered_ids[0] == "p1"
    for p in ("p1", "p2", "p3"):
        assert res.ordered_ids.count(p) == 1
    assert {res.ordered_ids.index("p2"), res.ordered_ids.index("p3")} <= {1, 2, 3}
    assert len(res.evicted) == 8
    assert set(res.eviction_reasons().values()) == {RemovalReason.SIZE_LIMIT}


def test_small_pool_leaves_no_gaps() -> None:
    res = allocate([pin("p", 1)], [cand("a"), cand("b")], [cand("n")], 10, shuffle=False)
    assert res.ordered_ids == ["p", "a", "b", "n"]
    assert res.evicted == []


def test_target_size_zero() -> None:
    res = allocate([pin("p", 1)], [cand("a"), cand("p")], [cand("n")], 0)
    assert res.ordered_ids == []
    assert [c.id for c in res.evicted] == ["a"]


def test_more_pins_than_cells() -> None:
    res = allocate([pin("p1", 1), pin("p2", 2), pin("p3", 3)], [cand("a")], [], 2)
    assert res.ordered_ids == ["p1", "p2"]


def test_pinned_survivor_is_not_duplicated() -> None:
    res = allocate([pin("p", 2)], [cand("a"), cand("p"), cand("b")], [], 3, shuffle=False)
    assert res.ordered_ids == ["a", "p", "b"]


def test_new_candidates_are_never_reported_evicted() -> None:
    survivors = [cand("s1", days_ago=3), cand("s2", days_ago=2)]
    new = [cand("n1", days_ago=0), cand("n2", days_ago=0)]

    res = allocate([], survivors, new, 3, shuffle=False, policy=SizeLimitPolicy.DROP_OLDEST)

    assert res.ordered_ids == ["n1", "n2", "s2"]
    assert [c.id for c in res.evicted] == ["s1"]

    res = allocate([], survivors, new, 1, shuffle=False, policy=SizeLimitPolicy.DROP_NEWEST)
    assert res.ordered_ids == ["s1"]
    assert [c.id for c in res.evicted] == ["s2"]


def test_shuffle_front_loads_new_candidates() -> None:
    survivors = [cand("s1", "x"), cand("s2", "y"), cand("s3", "z")]
    new = [cand("n1", "u"), cand("n2", "v")]

    res = allocate([], survivors, new, 5, rng=random.Random(11))

    assert res.ordered_ids[:2] == ["n1", "n2"]
    assert sorted(res.ordered_ids[2:]) == ["s1", "s2", "s3"]


def test_shuffle_alternates_two_authors() -> None:
    items = [cand("a1", "A"), cand("a2", "A"), cand("b1", "B"), cand("b2", "B")]
    authors = {c.id: c.author_key for c in items}
    for seed in range(5):
        out = fill_with_shuffle([None] * 4, items, set(), rng=random.Random(seed))
        keys = [authors[i] for i in out]
        assert all(keys[i] != keys[i - 1] for i in range(1, len(keys)))


def test_author_distance_rotation() -> None:
    items = [cand(f"{a}{i}", a) for a in "ABC" for i in range(3)]
    out = shuffle_with_author_distance(items, 2, rng=random.Random(5))
    keys = [c.author_key for c in out]

    assert sorted(c.id for c in out) == sorted(c.id for c in items)
    for i in range(1, len(keys)):
        assert keys[i] != keys[i - 1]
        if i >= 2:
            assert keys[i] != keys[i - 2]


def test_allocate_with_author_distance() -> None:
    survivors = [cand(f"{a}{i}", a) for a in "ABC" for i in range(2)]
    res = allocate([], survivors, [], 6, min_author_distance=2, rng=random.Random(1))
    keys = [i[0] for i in res.ordered_ids]
    assert all(keys[i] != keys[i - 1] for i in range(1, 6))
