from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

from weakcoll.core.accounting import WeakContainer
from weakcoll.core.entry import Comparer, WeakEntry, default_comparer
from weakcoll.core.policy import SequencePolicy
from weakcoll.core.storage import EntryArray
from weakcoll.errors import AnchorNotFoundError

T = TypeVar("T")


class WeakSequence(WeakContainer, Generic[T]):
    """Weakly referenced values kept in relative insertion order.

    Read-only operations (iteration, ``contains``, the anchor scans) never
    mutate the backing array, so a sequence that is not being written to may
    be read from several threads at once. Anything else needs an external
    lock.

    Entries of reclaimed values are only removed by ``clean()`` and by
    ``remove()``, which drops the stale entries it walks past.
    """

    policy: SequencePolicy

    def __init__(
        self,
        iterable: Iterable[T] | None = None,
        *,
        capacity: int = 0,
        policy: SequencePolicy | None = None,
    ) -> None:
        super().__init__(policy.model_copy() if policy else SequencePolicy())
        self._entries: EntryArray[WeakEntry[T]] = EntryArray(capacity)
        if iterable is not None:
            self.extend(iterable)

    @property
    def unreliable_count(self) -> int:
        """Number of entries, including stale ones not swept yet.

        Only an upper bound on how many values iteration will produce.
        """
        return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._entries.capacity

    @capacity.setter
    def capacity(self, value: int) -> None:
        self._entries.capacity = value

    @property
    def extra_trim_capacity(self) -> int:
        return self.policy.extra_trim_capacity

    @extra_trim_capacity.setter
    def extra_trim_capacity(self, value: int) -> None:
        self.policy.extra_trim_capacity = value

    def add(self, value: T) -> None:
        self._entries.append(WeakEntry(value))
        self._on_added()

    def extend(self, iterable: Iterable[T]) -> None:
        for value in iterable:
            self.add(value)

    def insert_first(self, value: T) -> None:
        self._entries.insert(0, WeakEntry(value))
        self._on_added()

    def _index_of_live(self, item: T, comparer: Comparer | None) -> int:
        comparer = comparer or default_comparer
        for i, entry in enumerate(self._entries):
            if (current := entry.try_get()) is not None and comparer(current, item):
                return i
        return -1

    def try_insert_before(
        self, value: T, anchor: T, comparer: Comparer | None = None
    ) -> bool:
        if (i := self._index_of_live(anchor, comparer)) < 0:
            return False
        self._entries.insert(i, WeakEntry(value))
        self._on_added()
        return True

    def try_insert_after(
        self, value: T, anchor: T, comparer: Comparer | None = None
    ) -> bool:
        if (i := self._index_of_live(anchor, comparer)) < 0:
            return False
        self._entries.insert(i + 1, WeakEntry(value))
        self._on_added()
        return True

    def insert_before(
        self, value: T, anchor: T, comparer: Comparer | None = None
    ) -> None:
        if not self.try_insert_before(value, anchor, comparer):
            raise AnchorNotFoundError(f"Item to insert before not found: {anchor!r}")

    def insert_after(
        self, value: T, anchor: T, comparer: Comparer | None = None
    ) -> None:
        if not self.try_insert_after(value, anchor, comparer):
            raise AnchorNotFoundError(f"Item to insert after not found: {anchor!r}")

    def remove(self, item: T, comparer: Comparer | None = None) -> bool:
        """Remove the first live value equal to ``item``.

        Stale entries in front of the match (or everywhere, on a miss) are
        dropped along the way.
        """
        comparer = comparer or default_comparer
        i = 0
        while i < len(self._entries):
            current = self._entries[i].try_get()
            if current is None:
                del self._entries[i]
                continue
            if comparer(current, item):
                del self._entries[i]
                return True
            i += 1
        return False

    def contains(self, item: T, comparer: Comparer | None = None) -> bool:
        return self._index_of_live(item, comparer) >= 0

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
        # Snapshot, so inserts and removes between yields do not shift the walk.
        for entry in tuple(self._entries):
            if (value := entry.try_get()) is not None:
                yield value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"
