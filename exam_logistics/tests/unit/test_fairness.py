# exam_logistics/tests/unit/test_fairness.py

import random

import pytest

from ...engine import make_rng, order_rooms_by_capacity, pick_least_loaded, shuffled
from ..conftest import make_room


class TestShuffled:
    def test_returns_permutation_and_leaves_input_untouched(self, rng):
        items = list(range(20))
        result = shuffled(items, rng)

        assert sorted(result) == items
        assert items == list(range(20))

    def test_same_seed_same_order(self):
        items = list("abcdefgh")
        assert shuffled(items, random.Random(7)) == shuffled(items, random.Random(7))

    def test_handles_empty_and_single(self, rng):
        assert shuffled([], rng) == []
        assert shuffled(["only"], rng) == ["only"]

    def test_every_position_reachable(self):
        seen_first = {shuffled([1, 2, 3], random.Random(seed))[0] for seed in range(200)}
        assert seen_first == {1, 2, 3}


class TestOrderRoomsByCapacity:
    def test_capacity_descending(self, rng):
        rooms = [make_room(str(n), cap) for n, cap in enumerate([30, 60, 30, 45, 60])]
        ordered = order_rooms_by_capacity(rooms, rng)

        capacities = [r.capacity for r in ordered]
        assert capacities == sorted(capacities, reverse=True)
        assert {r.id for r in ordered} == {r.id for r in rooms}

    def test_equal_capacity_rooms_are_shuffled_within_tier(self):
        big = make_room("101", 50)
        a = make_room("201", 30)
        b = make_room("202", 30)

        orders = set()
        for seed in range(100):
            ordered = order_rooms_by_capacity([big, a, b], random.Random(seed))
            assert ordered[0] is big
            orders.add(tuple(r.number for r in ordered[1:]))

        assert orders == {("201", "202"), ("202", "201")}


class TestPickLeastLoaded:
    def test_only_minimum_load_is_picked(self, rng):
        load = {"a": 2, "b": 0, "c": 1}
        for _ in range(50):
            assert pick_least_loaded(list(load), load.get, rng) == "b"

    def test_ties_broken_across_all_minimum_candidates(self):
        load = {"a": 1, "b": 1, "c": 3}
        picked = {
            pick_least_loaded(list(load), load.get, random.Random(seed))
            for seed in range(100)
        }
        assert picked == {"a", "b"}

    def test_empty_candidates_rejected(self, rng):
        with pytest.raises(ValueError):
            pick_least_loaded([], lambda c: 0, rng)


def test_make_rng_seeded_is_reproducible():
    assert make_rng(42).random() == make_rng(42).random()
