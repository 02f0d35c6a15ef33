from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

from weakcoll.core.accounting import WeakContainer
from weakcoll.core.entry import Comparer, WeakEntry, default_comparer
from weakcoll.core.policy import BagPolicy
from weakcoll.core.storage import EntrySet

T = TypeVar("T")


class WeakBag(WeakContainer, Generic[T]):
    """Unordered collection of weakly referenced values.

    The same value may be added more than once; every add gets its own
    entry. With ``sweep_on_encounter`` enabled, ``remove``, ``contains`` and
    iteration discard the stale entries they come across, so a bag that is
    iterated now and then shrinks without explicit ``clean()`` calls. Those
    reads mutate the bag: concurrent access needs an external lock.
    """

    policy: BagPolicy

    def __init__(
        self,
        iterable: Iterable[T] | None = None,
        *,
        capacity: int = 0,
        policy: BagPolicy | None = None,
    ) -> None:
        super().__init__(policy.model_copy() if policy else BagPolicy())
        self._entries: EntrySet[WeakEntry[T]] = EntrySet(capacity)
        if iterable is not None:
            self.extend(iterable)

    @property
    def unsafe_count(self) -> int:
        """Number of entries, including stale ones not swept yet."""
        return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._entries.capacity

    @property
    def extra_trim_capacity(self) -> int:
        return self.policy.extra_trim_capacity

    @extra_trim_capacity.setter
    def extra_trim_capacity(self, value: int) -> None:
        self.policy.extra_trim_capacity = value

    @property
    def sweep_on_encounter(self) -> bool:
        return self.policy.sweep_on_encounter

    @sweep_on_encounter.setter
    def sweep_on_encounter(self, value: bool) -> None:
        self.policy.sweep_on_encounter = value

    def add(self, value: T) -> None:
        self._entries.add(WeakEntry(value))
        self._on_added()

    def extend(self, iterable: Iterable[T]) -> None:
        for value in iterable:
            self.add(value)

    def _find(self, item: T, comparer: Comparer | None) -> WeakEntry[T] | None:
        comparer = comparer or default_comparer
        stale = []
        found = None
        for entry in self._entries:
            current = entry.try_get()
            if current is None:
                stale.append(entry)
            elif comparer(current, item):
                found = entry
                break
        if self.policy.sweep_on_encounter:
            for entry in stale:
                self._entries.discard(entry)
        return found

    def remove(self, item: T, comparer: Comparer | None = None) -> bool:
        if (entry := self._find(item, comparer)) is None:
            return False
        self._entries.discard(entry)
        return True

    def contains(self, item: T, comparer: Comparer | None = None) -> bool:
        return self._find(item, comparer) is not None

    def __contains__(self, item: object) -> bool:
        return self.contains(item)

    def ensure_capacity(self, capacity: int) -> int:
        return self._entries.ensure_capacity(capacity)

    def trim_excess(self) -> None:
        self._entries.trim_excess(self.policy.extra_trim_capacity)

    def _sweep(self) -> int:
        return self._entries.remove_where(lambda entry: not entry.is_alive)

    def _clear_entries(self) -> None:
        self._entries.clear()

    def _entry_count(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        sweep = self.policy.sweep_on_encounter
        marker = self._walk_marker()
        dropped = 0
        # Walk a snapshot: stale entries can be discarded, and the caller can
        # add or remove between yields, without breaking the walk.
        for entry in tuple(self._entries):
            if (value := entry.try_get()) is not None:
                yield value
            elif sweep and entry in self._entries:
                self._entries.discard(entry)
                dropped += 1
        if sweep:
            self._finish_sweeping_walk(marker, dropped)

    def __repr__(self) -> str:
        live = [
            value for entry in self._entries if (value := entry.try_get()) is not None
        ]
        return f"{type(self).__name__}({live!r})"
