# exam_logistics/engine/fairness.py

"""
Randomized tie-breaking shared by the allocators.

Every helper takes the run's ``random.Random`` explicitly so that tests can
pin a seed and still walk the randomized code paths.
"""

import random
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from .entities import RoomRecord

T = TypeVar("T")


def make_rng(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)


def shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    """Shuffled copy of ``items``; the input is left untouched."""
    result = list(items)
    rng.shuffle(result)
    return result


def order_rooms_by_capacity(
    rooms: Sequence[RoomRecord], rng: random.Random
) -> List[RoomRecord]:
    """
    Order rooms by capacity, largest first, shuffling rooms that share a
    capacity so no particular room id is always picked first within a tier.
    """
    tiers: Dict[int, List[RoomRecord]] = defaultdict(list)
    for room in rooms:
        tiers[room.capacity].append(room)

    ordered: List[RoomRecord] = []
    for capacity in sorted(tiers, reverse=True):
        ordered.extend(shuffled(tiers[capacity], rng))
    return ordered


def pick_least_loaded(
    candidates: Sequence[T], load: Callable[[T], int], rng: random.Random
) -> T:
    """Pick uniformly at random among the candidates carrying the lowest load."""
    if not candidates:
        raise ValueError("pick_least_loaded requires at least one candidate")

    lowest = min(load(c) for c in candidates)
    least_loaded = [c for c in candidates if load(c) == lowest]
    return least_loaded[rng.randrange(len(least_loaded))]
