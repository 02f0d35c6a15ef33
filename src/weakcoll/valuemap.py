from __future__ import annotations

from collections.abc import Hashable, Iterator
from typing import Any, Generic, TypeVar

from weakcoll.core.accounting import WeakContainer
from weakcoll.core.entry import Comparer, WeakEntry, default_comparer
from weakcoll.core.policy import HashPolicy
from weakcoll.core.storage import EntryTable
from weakcoll.errors import DuplicateKeyError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING: Any = object()


class WeakValueMap(WeakContainer, Generic[K, V]):
    """Mapping from strongly held keys to weakly referenced values.

    A key whose value has been reclaimed is treated as absent by every query
    even while its slot is still in the table. Lookups and removals for such a
    key drop the slot when ``sweep_on_encounter`` is enabled, and so does
    iteration for every stale slot it meets. Because of that, reads mutate
    the map and concurrent access needs an external lock.

    Iterating the map yields ``(key, value)`` pairs for live values.
    """

    policy: HashPolicy

    def __init__(self, *, capacity: int = 0, policy: HashPolicy | None = None) -> None:
        super().__init__(policy.model_copy() if policy else HashPolicy())
        self._entries: EntryTable[K, WeakEntry[V]] = EntryTable(capacity)

    @property
    def unsafe_count(self) -> int:
        """Number of slots, including stale ones not swept yet."""
        return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._entries.capacity

    @property
    def sweep_on_encounter(self) -> bool:
        return self.policy.sweep_on_encounter

    @sweep_on_encounter.setter
    def sweep_on_encounter(self, value: bool) -> None:
        self.policy.sweep_on_encounter = value

    def try_get_value(self, key: K) -> V | None:
        if (entry := self._entries.get(key)) is None:
            return None
        if (value := entry.try_get()) is None and self.policy.sweep_on_encounter:
            del self._entries[key]
        return value

    def get(self, key: K, default: V | None = None) -> V | None:
        if (value := self.try_get_value(key)) is None:
            return default
        return value

    def __getitem__(self, key: K) -> V:
        if (value := self.try_get_value(key)) is None:
            raise KeyError(key)
        return value

    def __setitem__(self, key: K, value: V) -> None:
        if (entry := self._entries.get(key)) is not None:
            entry.set_target(value)
        else:
            self._entries[key] = WeakEntry(value)
        self._on_added()

    def try_add(self, key: K, value: V) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = WeakEntry(value)
        elif entry.try_get() is None:
            # Reuse the dead slot instead of deleting and reinserting the key.
            entry.set_target(value)
        else:
            return False
        self._on_added()
        return True

    def add(self, key: K, value: V) -> None:
        if not self.try_add(key, value):
            raise DuplicateKeyError(key)

    def remove(
        self, key: K, value: V = _MISSING, comparer: Comparer | None = None
    ) -> bool:
        """Remove ``key`` if it holds a live value.

        When ``value`` is given the key is only removed if its live value is
        equal to it under ``comparer``.
        """
        if (current := self.try_get_value(key)) is None:
            return False
        if value is not _MISSING and not (comparer or default_comparer)(value, current):
            return False
        del self._entries[key]
        return True

    def pop(self, key: K, default: V = _MISSING) -> V:
        """Remove ``key`` and return the value it resolved to."""
        if (current := self.try_get_value(key)) is None:
            if default is _MISSING:
                raise KeyError(key)
            return default
        del self._entries[key]
        return current

    def __delitem__(self, key: K) -> None:
        if not self.remove(key):
            raise KeyError(key)

    def contains_key(self, key: K) -> bool:
        return self.try_get_value(key) is not None

    def __contains__(self, key: object) -> bool:
        return self.contains_key(key)

    def contains(self, key: K, value: V, comparer: Comparer | None = None) -> bool:
        current = self.try_get_value(key)
        return current is not None and (comparer or default_comparer)(value, current)

    def contains_value(self, value: V, comparer: Comparer | None = None) -> bool:
        comparer = comparer or default_comparer
        return any(comparer(value, current) for current in self.values())

    def ensure_capacity(self, capacity: int) -> int:
        return self._entries.ensure_capacity(capacity)

    def trim_excess(self) -> None:
        self._entries.trim_excess()

    def _sweep(self) -> int:
        return self._entries.remove_where(lambda key, entry: not entry.is_alive)

    def _clear_entries(self) -> None:
        self._entries.clear()

    def _entry_count(self) -> int:
        return len(self._entries)

    def items(self) -> Iterator[tuple[K, V]]:
        sweep = self.policy.sweep_on_encounter
        marker = self._walk_marker()
        dropped = 0
        for key, entry in tuple(self._entries.items()):
            if (value := entry.try_get()) is not None:
                yield key, value
            elif sweep and self._entries.get(key) is entry:
                # The slot may have been reused or replaced since the snapshot.
                if entry.try_get() is None:
                    del self._entries[key]
                    dropped += 1
        if sweep:
            self._finish_sweeping_walk(marker, dropped)

    def keys(self) -> Iterator[K]:
        return (key for key, _ in self.items())

    def values(self) -> Iterator[V]:
        return (value for _, value in self.items())

    def __iter__(self) -> Iterator[tuple[K, V]]:
        return self.items()

    def __repr__(self) -> str:
        live = {
            key: value
            for key, entry in self._entries.items()
            if (value := entry.try_get()) is not None
        }
        return f"{type(self).__name__}({live!r})"
