import gc
import operator
from dataclasses import dataclass

import pytest
from weakcoll.bag import WeakBag
from weakcoll.core.policy import BagPolicy


class Token:
    pass


@dataclass(eq=True)
class Named:
    name: str


def add_collectable(bag: WeakBag, count: int) -> None:
    for _ in range(count):
        bag.add(Token())
    gc.collect()


@pytest.fixture
def live():
    return [Token() for _ in range(3)]


@pytest.fixture
def mixed_bag(live):
    bag = WeakBag(live)
    add_collectable(bag, 3)
    return bag


def test_count_is_exact_without_reclamation(live):
    bag = WeakBag(live)
    assert bag.unsafe_count == 3
    assert bag.remove(live[0])
    assert bag.unsafe_count == 2
    assert not bag.remove(live[0])


def test_same_value_gets_independent_entries(live):
    x = live[0]
    bag = WeakBag([x, x])
    assert bag.unsafe_count == 2
    assert bag.remove(x)
    assert x in bag
    assert bag.remove(x)
    assert x not in bag


def test_clean_removes_stale_entries(mixed_bag, live):
    assert mixed_bag.unsafe_count == 6
    assert mixed_bag.add_count_since_last_clean == 6
    mixed_bag.clean()
    assert mixed_bag.unsafe_count == 3
    assert mixed_bag.add_count_since_last_clean == 0
    assert sorted(map(id, mixed_bag)) == sorted(map(id, live))


def test_enumeration_sweeps_stale_entries(mixed_bag, live):
    values = list(mixed_bag)
    assert len(values) == 3
    assert mixed_bag.unsafe_count == 3
    assert mixed_bag.add_count_since_last_clean == 0


def test_partial_enumeration_keeps_add_count(mixed_bag):
    it = iter(mixed_bag)
    next(it)
    del it
    assert mixed_bag.add_count_since_last_clean == 6


def test_enumeration_without_sweeping_leaves_entries(mixed_bag):
    mixed_bag.sweep_on_encounter = False
    assert len(list(mixed_bag)) == 3
    assert mixed_bag.unsafe_count == 6
    assert mixed_bag.add_count_since_last_clean == 6


def test_adding_during_enumeration_is_still_counted(mixed_bag):
    extra = Token()
    for _ in mixed_bag:
        mixed_bag.add(extra)
        break
    for _ in mixed_bag:
        pass
    assert extra in mixed_bag
    assert mixed_bag.add_count_since_last_clean == 0

    marker = Token()
    seen = []
    for value in mixed_bag:
        if not seen:
            mixed_bag.add(marker)
        seen.append(value)
    assert len(seen) == 4
    assert mixed_bag.add_count_since_last_clean == 1


def test_contains_miss_sweeps_whole_bag(mixed_bag):
    assert not mixed_bag.contains(Token())
    assert mixed_bag.unsafe_count == 3


def test_contains_without_sweeping(mixed_bag):
    mixed_bag.sweep_on_encounter = False
    assert not mixed_bag.contains(Token())
    assert mixed_bag.unsafe_count == 6


def test_remove_uses_comparer():
    first = Named("n")
    bag = WeakBag([first])
    assert not bag.remove(Named("n"), operator.is_)
    assert bag.remove(Named("n"))
    assert bag.unsafe_count == 0


def test_auto_clean_fires_on_threshold(live):
    bag = WeakBag(policy=BagPolicy(auto_clean_threshold=4))
    add_collectable(bag, 3)
    assert bag.unsafe_count == 3
    bag.add(live[0])
    assert bag.unsafe_count == 1
    assert bag.add_count_since_last_clean == 0


def test_trim_during_clean(mixed_bag):
    mixed_bag.trim_excess_during_clean = True
    assert mixed_bag.capacity == 8
    mixed_bag.clean()
    assert mixed_bag.capacity == 3
    mixed_bag.clean()
    assert mixed_bag.capacity == 3
    assert mixed_bag.unsafe_count == 3


def test_ensure_capacity():
    bag = WeakBag(capacity=2)
    assert bag.ensure_capacity(10) == 10
    assert bag.ensure_capacity(5) == 10
    with pytest.raises(ValueError):
        bag.ensure_capacity(-1)


def test_clear_resets_add_counter(mixed_bag):
    mixed_bag.clear()
    assert mixed_bag.unsafe_count == 0
    assert mixed_bag.add_count_since_last_clean == 0
    assert mixed_bag.capacity == 8


def test_nested_enumeration_resets_add_count_once(mixed_bag):
    for _ in mixed_bag:
        for _ in mixed_bag:
            pass
    assert mixed_bag.unsafe_count == 3
    assert mixed_bag.add_count_since_last_clean == 0

    mixed_bag.add(Token())
    assert mixed_bag.add_count_since_last_clean == 1


def test_nested_enumeration_keeps_auto_clean_on_schedule(live):
    bag = WeakBag(live[:2], policy=BagPolicy(auto_clean_threshold=3))
    for _ in bag:
        for _ in bag:
            pass
    add_collectable(bag, 2)
    assert bag.unsafe_count == 4
    bag.add(live[2])
    assert bag.unsafe_count == 3
    assert bag.add_count_since_last_clean == 0


def test_trim_keeps_extra_headroom(mixed_bag):
    mixed_bag.trim_excess_during_clean = True
    mixed_bag.extra_trim_capacity = 2
    mixed_bag.clean()
    assert mixed_bag.unsafe_count == 3
    assert mixed_bag.capacity == 5
    with pytest.raises(ValueError):
        mixed_bag.extra_trim_capacity = -1
