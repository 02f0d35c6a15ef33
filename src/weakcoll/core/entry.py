from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Generic, TypeAlias, TypeVar
from weakref import ref

T = TypeVar("T")

Comparer: TypeAlias = Callable[[T, T], bool]

default_comparer: Comparer = operator.eq


class WeakEntry(Generic[T]):
    """A slot holding a non-owning reference to a value.

    Entries hash and compare by identity, so two entries pointing at the same
    value stay independent inside a set or as dict values.
    """

    __slots__ = ("_ref",)

    def __init__(self, value: T) -> None:
        self._ref: ref[T] = ref(value)

    def try_get(self) -> T | None:
        """Upgrade to a strong reference, or None once the value is gone.

        This is the only safe way to read the value: the returned reference
        keeps it alive for as long as the caller holds it.
        """
        return self._ref()

    @property
    def is_alive(self) -> bool:
        # Can go stale right after returning True; use try_get to read.
        return self._ref() is not None

    def set_target(self, value: T) -> None:
        self._ref = ref(value)

    def __repr__(self) -> str:
        if (value := self._ref()) is None:
            return "WeakEntry(<stale>)"
        return f"WeakEntry({value!r})"
