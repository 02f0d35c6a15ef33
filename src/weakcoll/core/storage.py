"""Backing stores for the weak containers.

Python's builtin list, set and dict manage their own allocation and do not
expose it. These wrappers keep a logical capacity next to the builtin so the
containers can reserve, report and trim storage the same way regardless of
which builtin backs them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

K = TypeVar("K")
E = TypeVar("E")

DEFAULT_CAPACITY = 4


def grown_capacity(current: int, required: int) -> int:
    if required <= current:
        return current
    return max(required, current * 2 if current else DEFAULT_CAPACITY)


class _CapacityTracked:
    __slots__ = ("_capacity",)

    def __init__(self, capacity: int = 0) -> None:
        if capacity < 0:
            raise ValueError(f"Capacity must be non-negative: got {capacity}")
        self._capacity = capacity

    def __len__(self) -> int:
        raise NotImplementedError

    @property
    def capacity(self) -> int:
        return self._capacity

    def _reserve(self, required: int) -> None:
        self._capacity = grown_capacity(self._capacity, required)

    def ensure_capacity(self, capacity: int) -> int:
        if capacity < 0:
            raise ValueError(f"Capacity must be non-negative: got {capacity}")
        if capacity > self._capacity:
            self._capacity = capacity
        return self._capacity

    def trim_excess(self, extra: int = 0) -> None:
        trimmed = len(self) + extra
        if trimmed < self._capacity:
            self._capacity = trimmed


class EntryArray(_CapacityTracked, Generic[E]):
    """Positional store: append, insert and delete by index."""

    __slots__ = ("_items",)

    def __init__(self, capacity: int = 0) -> None:
        super().__init__(capacity)
        self._items: list[E] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[E]:
        return iter(self._items)

    def __getitem__(self, index: int) -> E:
        return self._items[index]

    def __delitem__(self, index: int) -> None:
        del self._items[index]

    @property
    def capacity(self) -> int:
        return self._capacity

    @capacity.setter
    def capacity(self, value: int) -> None:
        if value < len(self._items):
            raise ValueError(
                f"Capacity {value} is smaller than the current size {len(self._items)}"
            )
        self._capacity = value

    def append(self, entry: E) -> None:
        self._reserve(len(self._items) + 1)
        self._items.append(entry)

    def insert(self, index: int, entry: E) -> None:
        self._reserve(len(self._items) + 1)
        self._items.insert(index, entry)

    def remove_where(self, predicate: Callable[[E], bool]) -> int:
        kept = [entry for entry in self._items if not predicate(entry)]
        removed = len(self._items) - len(kept)
        self._items = kept
        return removed

    def clear(self) -> None:
        self._items.clear()


class EntrySet(_CapacityTracked, Generic[E]):
    """Unordered hash-based store."""

    __slots__ = ("_items",)

    def __init__(self, capacity: int = 0) -> None:
        super().__init__(capacity)
        self._items: set[E] = set()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[E]:
        return iter(self._items)

    def __contains__(self, entry: object) -> bool:
        return entry in self._items

    def add(self, entry: E) -> None:
        if entry not in self._items:
            self._reserve(len(self._items) + 1)
            self._items.add(entry)

    def discard(self, entry: E) -> None:
        self._items.discard(entry)

    def remove_where(self, predicate: Callable[[E], bool]) -> int:
        doomed = [entry for entry in self._items if predicate(entry)]
        self._items.difference_update(doomed)
        return len(doomed)

    def clear(self) -> None:
        self._items.clear()


class EntryTable(_CapacityTracked, Generic[K, E]):
    """Keyed hash-based store."""

    __slots__ = ("_items",)

    def __init__(self, capacity: int = 0) -> None:
        super().__init__(capacity)
        self._items: dict[K, E] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __setitem__(self, key: K, entry: E) -> None:
        if key not in self._items:
            self._reserve(len(self._items) + 1)
        self._items[key] = entry

    def __delitem__(self, key: K) -> None:
        del self._items[key]

    def get(self, key: K) -> E | None:
        return self._items.get(key)

    def items(self):
        return self._items.items()

    def remove_where(self, predicate: Callable[[K, E], bool]) -> int:
        doomed = [key for key, entry in self._items.items() if predicate(key, entry)]
        for key in doomed:
            del self._items[key]
        return len(doomed)

    def clear(self) -> None:
        self._items.clear()
